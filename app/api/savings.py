from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.core.security import get_current_user
from app.schemas.savings import (
    MonthlySavingsRead,
    SavingsAdjust,
    SavingsDeposit,
    SavingsEntryRead,
    SavingsLedgerRead,
    SavingsWithdraw,
)
from app.services.composition import Engine, get_engine

router = APIRouter(prefix="/savings", tags=["savings"])


@router.get("/{ledger_id}", response_model=SavingsLedgerRead)
def get_savings_ledger(
    ledger_id: int,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    ledger = engine.savings.get_ledger(ledger_id, user_id)
    return SavingsLedgerRead(
        id=ledger.id,
        name=ledger.name,
        balance=ledger.balance,
        guarded_value=engine.savings.guarded_value(ledger_id, user_id),
    )


@router.get("/{ledger_id}/entries", response_model=List[SavingsEntryRead])
def list_savings_entries(
    ledger_id: int,
    limit: int = Query(50, ge=1, le=500),
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return engine.savings.list_entries(ledger_id, user_id, limit=limit)


@router.get("/{ledger_id}/evolution", response_model=List[MonthlySavingsRead])
def get_savings_evolution(
    ledger_id: int,
    months: int = Query(12, ge=1, le=120),
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return [MonthlySavingsRead.model_validate(m) for m in engine.savings.evolution(ledger_id, user_id, months)]


@router.post("/{ledger_id}/deposit", response_model=SavingsEntryRead)
def deposit_to_savings(
    ledger_id: int,
    deposit_data: SavingsDeposit,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return engine.savings.deposit(
        ledger_id,
        user_id,
        deposit_data.amount,
        deposit_data.source_account_id,
        description=deposit_data.description,
    )


@router.post("/{ledger_id}/withdraw", response_model=SavingsEntryRead)
def withdraw_from_savings(
    ledger_id: int,
    withdraw_data: SavingsWithdraw,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return engine.savings.withdraw(
        ledger_id,
        user_id,
        withdraw_data.amount,
        withdraw_data.destination_account_id,
        description=withdraw_data.description,
    )


@router.post("/{ledger_id}/adjust", response_model=Optional[SavingsEntryRead])
def adjust_savings_balance(
    ledger_id: int,
    adjust_data: SavingsAdjust,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    # Sin diferencia no se registra asiento y la respuesta es null
    return engine.savings.adjust(ledger_id, user_id, adjust_data.new_balance)
