from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field
from uuid import UUID
from typing import Optional
from decimal import Decimal
from datetime import date, datetime

class Statement(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("user_id", "account_id", "period_key", name="uq_statement_user_account_period"),
    )
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    # None = bolsa "sin cuenta"
    account_id: Optional[int] = Field(default=None, foreign_key="account.id", index=True)
    description: str = ""
    closing_date: date = Field(index=True)
    due_date: date
    best_purchase_date: Optional[date] = None

    # Días configurados (sin recortar) para que un ciclo del 31 sobreviva a febrero
    closing_day: int
    due_day: int
    best_purchase_day: Optional[int] = None
    period_key: str  # "YYYY-MM" del cierre

    total_amount: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    is_paid: bool = Field(default=False)
    paid_account_id: Optional[int] = Field(default=None, foreign_key="account.id")
    paid_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class StatementPayment(SQLModel, table=True):
    __tablename__ = "statement_payment"

    id: Optional[int] = Field(default=None, primary_key=True)
    statement_id: int = Field(foreign_key="statement.id", index=True)
    account_id: int = Field(foreign_key="account.id")
    amount: Decimal = Field(max_digits=14, decimal_places=2)
    created_at: datetime = Field(default_factory=datetime.utcnow)
