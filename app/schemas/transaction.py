import datetime as dt
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import PaymentChannel, Recurrence, TransactionKind
from app.schemas.account import BalanceChangeRead


class TransactionCreate(BaseModel):
    kind: TransactionKind
    amount: Decimal = Field(..., gt=0)
    description: Optional[str] = None
    date: Optional[dt.date] = None
    payment_date: Optional[dt.date] = None
    channel: PaymentChannel = PaymentChannel.debit
    account_id: Optional[int] = None
    is_paid: bool = False
    is_recurring: bool = False
    recurrence: Recurrence = Recurrence.none


class TransactionUpdate(BaseModel):
    kind: Optional[TransactionKind] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    description: Optional[str] = None
    date: Optional[dt.date] = None
    payment_date: Optional[dt.date] = None
    channel: Optional[PaymentChannel] = None
    account_id: Optional[int] = None
    is_recurring: Optional[bool] = None
    recurrence: Optional[Recurrence] = None


class TransactionPaidUpdate(BaseModel):
    is_paid: bool


class TransactionRead(BaseModel):
    id: int
    kind: TransactionKind
    amount: Decimal
    description: Optional[str] = None
    date: dt.date
    payment_date: Optional[dt.date] = None
    channel: PaymentChannel
    account_id: Optional[int] = None
    is_paid: bool
    is_recurring: bool
    recurrence: Recurrence
    balance_applied: bool

    model_config = ConfigDict(from_attributes=True)


class TransactionMutationRead(BaseModel):
    transaction: Optional[TransactionRead] = None
    balance_changes: List[BalanceChangeRead] = []
