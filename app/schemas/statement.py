# app/schemas/statement.py

import datetime as dt
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PeriodRead(BaseModel):
    closing_date: dt.date
    due_date: dt.date
    period_start: dt.date
    period_end: dt.date

    model_config = ConfigDict(from_attributes=True)


class StatementCreate(BaseModel):
    closing_day: int
    due_day: int
    account_id: Optional[int] = None
    year: Optional[int] = None
    month: Optional[int] = None
    best_purchase_day: Optional[int] = None
    description: str = ""
    notes: Optional[str] = None


class StatementUpdate(BaseModel):
    closing_day: Optional[int] = None
    due_day: Optional[int] = None
    year: Optional[int] = None
    month: Optional[int] = None
    best_purchase_day: Optional[int] = None
    description: Optional[str] = None
    notes: Optional[str] = None


class StatementLineRead(BaseModel):
    transaction_id: Optional[int] = None
    description: Optional[str] = None
    amount: Decimal
    date: dt.date
    projected: bool = False

    model_config = ConfigDict(from_attributes=True)


class StatementRead(BaseModel):
    id: int
    account_id: Optional[int] = None
    description: str
    closing_date: dt.date
    due_date: dt.date
    best_purchase_date: Optional[dt.date] = None
    closing_day: int
    due_day: int
    best_purchase_day: Optional[int] = None
    period_key: str
    total_amount: Decimal
    is_paid: bool
    paid_account_id: Optional[int] = None
    paid_at: Optional[dt.datetime] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class StatementDetailRead(StatementRead):
    lines: List[StatementLineRead] = []


class SplitPaymentCreate(BaseModel):
    account_id: int
    amount: Decimal = Field(..., gt=0, description="Parte del total pagada con esta cuenta")


class MarkPaidRequest(BaseModel):
    # Una cuenta, o varias partes; ninguna = la cuenta del extracto
    account_id: Optional[int] = None
    payments: Optional[List[SplitPaymentCreate]] = None


class StatementPaymentRead(BaseModel):
    account_id: int
    amount: Decimal
    created_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class GenerationFailureRead(BaseModel):
    account_id: Optional[int] = None
    period_key: str
    error: str

    model_config = ConfigDict(from_attributes=True)


class GenerationResultRead(BaseModel):
    created: List[StatementRead]
    failures: List[GenerationFailureRead]

    model_config = ConfigDict(from_attributes=True)
