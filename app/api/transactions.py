import datetime as dt
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from app.core.security import get_current_user
from app.models.transaction import Transaction
from app.schemas.account import BalanceChangeRead
from app.schemas.transaction import (
    TransactionCreate,
    TransactionMutationRead,
    TransactionPaidUpdate,
    TransactionRead,
    TransactionUpdate,
)
from app.services.composition import Engine, get_engine
from app.services.ledger import BalanceChange
from app.services.transactions import TransactionSnapshot

router = APIRouter(prefix="/transactions", tags=["transactions"])


def mutation_result(transaction: Optional[Transaction], changes: List[BalanceChange]) -> TransactionMutationRead:
    return TransactionMutationRead(
        transaction=TransactionRead.model_validate(transaction) if transaction is not None else None,
        balance_changes=[BalanceChangeRead.model_validate(change) for change in changes],
    )


@router.post("", response_model=TransactionMutationRead)
@router.post("/", response_model=TransactionMutationRead)
def create_transaction(
    transaction_data: TransactionCreate,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    if transaction_data.account_id is not None:
        engine.accounts.get_account(transaction_data.account_id, user_id)

    data = transaction_data.model_dump()
    if data.get("date") is None:
        data["date"] = dt.date.today()

    transaction = Transaction(**data, user_id=user_id)
    changes = engine.transactions.record_created(transaction)
    return mutation_result(transaction, changes)


@router.post("/apply-due", response_model=List[TransactionRead])
def apply_due_transactions(
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return engine.transactions.apply_due(user_id)


@router.put("/{transaction_id}", response_model=TransactionMutationRead)
def update_transaction(
    transaction_id: int,
    transaction_data: TransactionUpdate,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    transaction = engine.transactions.get_owned(transaction_id, user_id)
    updates = transaction_data.model_dump(exclude_unset=True)
    if updates.get("account_id") is not None:
        engine.accounts.get_account(updates["account_id"], user_id)

    prior = TransactionSnapshot.of(transaction)
    for key, value in updates.items():
        setattr(transaction, key, value)

    changes = engine.transactions.record_updated(transaction, prior)
    return mutation_result(transaction, changes)


@router.delete("/{transaction_id}", response_model=TransactionMutationRead)
def delete_transaction(
    transaction_id: int,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    transaction = engine.transactions.get_owned(transaction_id, user_id)
    changes = engine.transactions.record_deleted(transaction)
    return mutation_result(None, changes)


@router.patch("/{transaction_id}/paid", response_model=TransactionRead)
def set_transaction_paid(
    transaction_id: int,
    paid_data: TransactionPaidUpdate,
    user_id: UUID = Depends(get_current_user),
    engine: Engine = Depends(get_engine),
):
    return engine.transactions.set_paid(transaction_id, user_id, paid_data.is_paid)
