"""
Libros de ahorro.

Un libro de ahorro es una cuenta de tipo savings. Su valor guardado se
deriva solo de los depósitos y retiros reales; los asientos contables
(correcciones de saldo, asociaciones, transferencias internas) quedan fuera.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, List, Optional
from uuid import UUID

from app.core.errors import InvalidArgumentError
from app.core.locks import KeyedLocks, engine_locks
from app.models.account import Account
from app.models.enums import AccountKind, EntryClass, SavingsEntryKind
from app.models.savings_entry import SavingsEntry
from app.services.interfaces import AccountStore, SavingsEntryStore, UnitOfWork
from app.services.periods import clamp_day, month_offset
from app.utils.account_helpers import get_owned_account
from app.utils.money import Number, to_money

logger = logging.getLogger(__name__)

# Marcadores con que registros antiguos señalaban asientos del sistema.
# Solo se consultan cuando el registro no trae entry_class.
LEGACY_BOOKKEEPING_MARKERS = ("asociación", "association", "ajuste", "adjustment", "transfer")


def entry_class_of(entry: SavingsEntry) -> EntryClass:
    if entry.entry_class is not None:
        return EntryClass(entry.entry_class)
    description = (entry.description or "").lower()
    if any(marker in description for marker in LEGACY_BOOKKEEPING_MARKERS):
        return EntryClass.bookkeeping
    return EntryClass.real


def guarded_value(entries: Iterable[SavingsEntry]) -> Decimal:
    total = Decimal("0")
    for entry in entries:
        if entry_class_of(entry) != EntryClass.real:
            continue
        if entry.kind == SavingsEntryKind.deposit:
            total += Decimal(entry.amount)
        else:
            total -= Decimal(entry.amount)
    return to_money(total)


@dataclass(frozen=True)
class MonthlySavings:
    month: str
    deposits: Decimal
    withdrawals: Decimal
    balance: Decimal


class SavingsService:
    def __init__(
        self,
        accounts: AccountStore,
        entries: SavingsEntryStore,
        uow: UnitOfWork,
        locks: KeyedLocks = engine_locks,
        clock: Callable[[], date] = date.today,
    ):
        self.accounts = accounts
        self.entries = entries
        self.uow = uow
        self.locks = locks
        self.clock = clock

    def get_ledger(self, ledger_id: int, user_id: UUID) -> Account:
        ledger = get_owned_account(self.accounts, ledger_id, user_id)
        if ledger.kind != AccountKind.savings:
            raise InvalidArgumentError("La cuenta indicada no es una cuenta de ahorro.")
        return ledger

    def guarded_value(self, ledger_id: int, user_id: UUID) -> Decimal:
        self.get_ledger(ledger_id, user_id)
        return guarded_value(self.entries.list_for_ledger(ledger_id))

    def list_entries(self, ledger_id: int, user_id: UUID, limit: int = 50) -> List[SavingsEntry]:
        self.get_ledger(ledger_id, user_id)
        return self.entries.list_for_ledger(ledger_id, limit=limit)

    def _counterpart(self, ledger: Account, account_id: int, user_id: UUID) -> Account:
        account = get_owned_account(self.accounts, account_id, user_id)
        if account.id == ledger.id:
            raise InvalidArgumentError("La cuenta origen/destino debe ser distinta de la cuenta de ahorro.")
        return account

    def _locked(self, account: Account) -> Account:
        # Saldos releídos con la fila bloqueada hasta el commit
        return self.accounts.get_for_update(account.id)

    def deposit(
        self,
        ledger_id: int,
        user_id: UUID,
        amount: Number,
        source_account_id: int,
        description: Optional[str] = None,
    ) -> SavingsEntry:
        amount = to_money(amount)
        if amount <= 0:
            raise InvalidArgumentError("El monto debe ser mayor a cero.")

        with self.locks.hold(("account", ledger_id), ("account", source_account_id)):
            ledger = self.get_ledger(ledger_id, user_id)
            source = self._counterpart(ledger, source_account_id, user_id)
            ledger, source = self._locked(ledger), self._locked(source)

            # Entre ahorros se permite mover sin validar saldo
            if source.kind != AccountKind.savings and Decimal(source.balance) < amount:
                raise InvalidArgumentError("Saldo insuficiente en la cuenta para realizar el depósito")

            entry = SavingsEntry(
                ledger_id=ledger.id,
                user_id=user_id,
                kind=SavingsEntryKind.deposit,
                amount=amount,
                description=description or "Depósito",
                account_id=source.id,
                entry_class=EntryClass.real,
            )
            self._commit_movement(entry, source, ledger, amount)

        logger.info("Depósito de %s a la cuenta de ahorro %s desde %s", amount, ledger_id, source_account_id)
        return entry

    def withdraw(
        self,
        ledger_id: int,
        user_id: UUID,
        amount: Number,
        destination_account_id: int,
        description: Optional[str] = None,
    ) -> SavingsEntry:
        amount = to_money(amount)
        if amount <= 0:
            raise InvalidArgumentError("El monto debe ser mayor a cero.")

        with self.locks.hold(("account", ledger_id), ("account", destination_account_id)):
            ledger = self.get_ledger(ledger_id, user_id)
            destination = self._counterpart(ledger, destination_account_id, user_id)
            ledger, destination = self._locked(ledger), self._locked(destination)

            available = guarded_value(self.entries.list_for_ledger(ledger.id))
            if amount > available:
                raise InvalidArgumentError("Valor insuficiente en la cuenta de ahorro para realizar el retiro")

            entry = SavingsEntry(
                ledger_id=ledger.id,
                user_id=user_id,
                kind=SavingsEntryKind.withdrawal,
                amount=amount,
                description=description or "Retiro",
                account_id=destination.id,
                entry_class=EntryClass.real,
            )
            self._commit_movement(entry, ledger, destination, amount)

        logger.info("Retiro de %s de la cuenta de ahorro %s hacia %s", amount, ledger_id, destination_account_id)
        return entry

    def _commit_movement(self, entry: SavingsEntry, debit: Account, credit: Account, amount: Decimal) -> None:
        # Asiento + dos saldos: todo o nada
        try:
            debit.balance = to_money(Decimal(debit.balance) - amount)
            credit.balance = to_money(Decimal(credit.balance) + amount)
            self.accounts.save(debit)
            self.accounts.save(credit)
            self.entries.add(entry)
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            raise

    def adjust(self, ledger_id: int, user_id: UUID, new_balance: Number) -> Optional[SavingsEntry]:
        """Corrige el saldo de la cuenta de ahorro con un asiento contable (no cuenta en el valor guardado)."""
        new_balance = to_money(new_balance)
        if new_balance < 0:
            raise InvalidArgumentError("El saldo no puede ser negativo.")

        with self.locks.hold(("account", ledger_id)):
            ledger = self.get_ledger(ledger_id, user_id)
            ledger = self._locked(ledger)
            difference = new_balance - to_money(ledger.balance)
            if difference == 0:
                return None

            entry = SavingsEntry(
                ledger_id=ledger.id,
                user_id=user_id,
                kind=SavingsEntryKind.deposit if difference > 0 else SavingsEntryKind.withdrawal,
                amount=abs(difference),
                description="Ajuste de saldo",
                entry_class=EntryClass.bookkeeping,
            )
            try:
                ledger.balance = new_balance
                self.accounts.save(ledger)
                self.entries.add(entry)
                self.uow.commit()
            except Exception:
                self.uow.rollback()
                raise
        return entry

    def evolution(
        self, ledger_id: int, user_id: UUID, months: int = 12, today: Optional[date] = None
    ) -> List[MonthlySavings]:
        """Depósitos, retiros y saldo guardado acumulado por mes."""
        self.get_ledger(ledger_id, user_id)
        today = today or self.clock()
        start_year, start_month = month_offset(today.year, today.month, -months)
        start = clamp_day(start_year, start_month, today.day)

        # El saldo de arranque incluye lo que había antes de la ventana
        all_entries = self.entries.list_for_ledger(ledger_id)
        window = self.entries.since(ledger_id, start)
        window_ids = {e.id for e in window}
        balance = guarded_value(e for e in all_entries if e.id not in window_ids)

        buckets: "OrderedDict[str, List[SavingsEntry]]" = OrderedDict()
        for entry in window:
            buckets.setdefault(f"{entry.created_at.year:04d}-{entry.created_at.month:02d}", []).append(entry)

        result = []
        for month, entries in buckets.items():
            real = [e for e in entries if entry_class_of(e) == EntryClass.real]
            deposits = to_money(sum((Decimal(e.amount) for e in real if e.kind == SavingsEntryKind.deposit), Decimal("0")))
            withdrawals = to_money(sum((Decimal(e.amount) for e in real if e.kind == SavingsEntryKind.withdrawal), Decimal("0")))
            balance = to_money(balance + deposits - withdrawals)
            result.append(MonthlySavings(month=month, deposits=deposits, withdrawals=withdrawals, balance=balance))
        return result
