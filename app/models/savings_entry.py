# app/models/savings_entry.py

from sqlmodel import SQLModel, Field
from uuid import UUID
from typing import Optional
from decimal import Decimal
from datetime import datetime

from app.models.enums import EntryClass, SavingsEntryKind

class SavingsEntry(SQLModel, table=True):
    __tablename__ = "savings_entry"

    id: Optional[int] = Field(default=None, primary_key=True)
    # Cuenta de tipo savings que actúa como libro de ahorro
    ledger_id: int = Field(foreign_key="account.id", index=True)
    user_id: UUID = Field(foreign_key="user.id")
    kind: SavingsEntryKind
    amount: Decimal = Field(max_digits=14, decimal_places=2)
    description: Optional[str] = None
    # Cuenta origen (depósito) o destino (retiro)
    account_id: Optional[int] = Field(default=None, foreign_key="account.id")
    # None solo en registros importados antes de existir la clasificación
    entry_class: Optional[EntryClass] = Field(default=EntryClass.real)
    created_at: datetime = Field(default_factory=datetime.utcnow)
