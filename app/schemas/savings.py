# app/schemas/savings.py

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import EntryClass, SavingsEntryKind


class SavingsDeposit(BaseModel):
    amount: Annotated[Decimal, Field(gt=0, description="Monto a depositar")]
    source_account_id: int
    description: Optional[str] = None


class SavingsWithdraw(BaseModel):
    amount: Decimal = Field(..., gt=0, description="Monto a retirar")
    destination_account_id: int
    description: Optional[str] = None


class SavingsAdjust(BaseModel):
    new_balance: Decimal = Field(..., ge=0)


class SavingsEntryRead(BaseModel):
    id: int
    ledger_id: int
    kind: SavingsEntryKind
    amount: Decimal
    description: Optional[str] = None
    account_id: Optional[int] = None
    entry_class: Optional[EntryClass] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SavingsLedgerRead(BaseModel):
    id: int
    name: str
    balance: Decimal
    guarded_value: Decimal


class MonthlySavingsRead(BaseModel):
    month: str
    deposits: Decimal
    withdrawals: Decimal
    balance: Decimal

    model_config = ConfigDict(from_attributes=True)
