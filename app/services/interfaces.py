"""
Capacidades mínimas que cada servicio necesita de la persistencia.

Los servicios reciben estas interfaces por constructor en lugar de
importarse entre sí; el cableado concreto vive en app/services/composition.py.
"""

from datetime import date
from typing import List, Optional, Protocol, Sequence
from uuid import UUID

from app.models.account import Account
from app.models.savings_entry import SavingsEntry
from app.models.statement import Statement, StatementPayment
from app.models.transaction import Transaction


class UnitOfWork(Protocol):
    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class AccountStore(Protocol):
    def get(self, account_id: int) -> Optional[Account]: ...

    def get_for_update(self, account_id: int) -> Optional[Account]: ...

    def list_for_user(self, user_id: UUID) -> List[Account]: ...

    def save(self, account: Account) -> Account: ...


class TransactionReader(Protocol):
    def credit_transactions(
        self, user_id: UUID, account_id: Optional[int], start: date, end: date
    ) -> List[Transaction]: ...

    def monthly_templates(
        self, user_id: UUID, account_id: Optional[int], before: date
    ) -> List[Transaction]: ...


class TransactionStore(TransactionReader, Protocol):
    def get(self, transaction_id: int) -> Optional[Transaction]: ...

    def save(self, transaction: Transaction) -> Transaction: ...

    def delete(self, transaction: Transaction) -> None: ...

    def unapplied_due(self, user_id: UUID, today: date) -> List[Transaction]: ...


class StatementStore(Protocol):
    def get(self, statement_id: int) -> Optional[Statement]: ...

    def get_for_update(self, statement_id: int) -> Optional[Statement]: ...

    def list_for_user(self, user_id: UUID) -> List[Statement]: ...

    def latest(self, user_id: UUID, account_id: Optional[int]) -> Optional[Statement]: ...

    def previous_closing(
        self, user_id: UUID, account_id: Optional[int], closing_date: date
    ) -> Optional[date]: ...

    def find_in_month(
        self, user_id: UUID, account_id: Optional[int], period_key: str
    ) -> Optional[Statement]: ...

    def account_groupings(self, user_id: UUID) -> List[Optional[int]]: ...

    def save(self, statement: Statement) -> Statement: ...

    def delete(self, statement: Statement) -> None: ...

    def payments(self, statement_id: int) -> List[StatementPayment]: ...

    def add_payments(self, payments: Sequence[StatementPayment]) -> None: ...

    def clear_payments(self, statement_id: int) -> None: ...


class SavingsEntryStore(Protocol):
    def list_for_ledger(self, ledger_id: int, limit: Optional[int] = None) -> List[SavingsEntry]: ...

    def since(self, ledger_id: int, start: date) -> List[SavingsEntry]: ...

    def add(self, entry: SavingsEntry) -> SavingsEntry: ...
