from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from app.core.security import get_current_user
from app.schemas.account import (
    AccountBalanceUpdate,
    AccountCreate,
    AccountRead,
    BalanceChangeRead,
    BalanceEffectRequest,
    TotalBalanceRead,
)
from app.services.composition import Engine, get_engine

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.post("", response_model=AccountRead)
@router.post("/", response_model=AccountRead)
def create_account(
    account_data: AccountCreate,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return engine.accounts.create_account(user_id, **account_data.model_dump())


@router.get("", response_model=List[AccountRead])
@router.get("/", response_model=List[AccountRead])
def list_accounts(
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return engine.accounts.list_accounts(user_id)


@router.get("/total-balance", response_model=TotalBalanceRead)
def get_total_balance(
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return TotalBalanceRead(total=engine.accounts.total_balance(user_id))


@router.patch("/{account_id}/primary", response_model=AccountRead)
def set_primary_account(
    account_id: int,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return engine.accounts.set_primary(account_id, user_id)


@router.patch("/{account_id}/balance", response_model=AccountRead)
def set_account_balance(
    account_id: int,
    balance_data: AccountBalanceUpdate,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return engine.accounts.set_balance(account_id, user_id, balance_data.balance)


@router.post("/{account_id}/balance-effects", response_model=List[BalanceChangeRead])
def apply_balance_effect(
    account_id: int,
    effect: BalanceEffectRequest,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return engine.accounts.apply_effect(account_id, user_id, **effect.model_dump())
