# app/schemas/account.py

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import AccountKind, BalanceOperation, TransactionKind


class AccountCreate(BaseModel):
    name: str
    kind: AccountKind = AccountKind.ordinary
    balance: Decimal = Decimal("0")
    is_primary: bool = False


class AccountRead(BaseModel):
    id: int
    name: str
    kind: AccountKind
    balance: Decimal
    is_primary: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AccountBalanceUpdate(BaseModel):
    balance: Decimal


class TotalBalanceRead(BaseModel):
    total: Decimal


class BalanceEffectRequest(BaseModel):
    amount: Decimal = Field(..., ge=0)
    kind: TransactionKind
    operation: BalanceOperation
    prior_amount: Optional[Decimal] = Field(default=None, ge=0)
    prior_account_id: Optional[int] = None


class BalanceChangeRead(BaseModel):
    account_id: int
    delta: Decimal
    balance: Decimal

    model_config = ConfigDict(from_attributes=True)
