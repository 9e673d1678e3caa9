from sqlmodel import SQLModel, Field
from uuid import UUID
from typing import Optional
from decimal import Decimal
from datetime import datetime

from app.models.enums import AccountKind

class Account(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    name: str
    kind: AccountKind = Field(default=AccountKind.ordinary)
    balance: Decimal = Field(default=Decimal("0"), max_digits=14, decimal_places=2)
    is_primary: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
