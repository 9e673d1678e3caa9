from uuid import UUID
from sqlmodel import SQLModel, Field
from typing import Optional
from decimal import Decimal
import datetime as dt

from app.models.enums import PaymentChannel, Recurrence, TransactionKind

class Transaction(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    kind: TransactionKind
    amount: Decimal = Field(max_digits=14, decimal_places=2)
    description: Optional[str] = None
    date: dt.date = Field(index=True)  # fecha contable
    # Fecha efectiva de pago; si es None se usa la fecha contable
    payment_date: Optional[dt.date] = Field(default=None, index=True)
    channel: PaymentChannel = Field(default=PaymentChannel.debit)
    account_id: Optional[int] = Field(default=None, foreign_key="account.id", index=True)
    is_paid: bool = Field(default=False)

    is_recurring: bool = Field(default=False)
    recurrence: Recurrence = Field(default=Recurrence.none)

    # True mientras el efecto de esta transacción esté reflejado en el saldo de la cuenta
    balance_applied: bool = Field(default=False)
    created_at: dt.datetime = Field(default_factory=dt.datetime.utcnow)

    @property
    def effective_date(self) -> dt.date:
        return self.payment_date or self.date
