"""
Extractos de tarjeta: armado, generación de extractos futuros y lectura.

Un extracto nunca se actualiza por partes: su total se recalcula siempre
a partir de las transacciones de crédito de su período más las
proyecciones de plantillas mensuales que aún no se han materializado.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Callable, Iterator, List, Optional, Set, Tuple, Union
from uuid import UUID

from app.core.config import FUTURE_STATEMENT_MONTHS
from app.core.errors import ForbiddenError, InvalidArgumentError, NotFoundError
from app.core.locks import KeyedLocks, engine_locks
from app.models.statement import Statement
from app.services.interfaces import AccountStore, StatementStore, TransactionReader, UnitOfWork
from app.services.periods import (
    BillingPeriod,
    best_purchase_date,
    clamp_day,
    compute_period,
    month_offset,
    period_key,
)
from app.utils.account_helpers import get_owned_account
from app.utils.money import money_sum, to_money

logger = logging.getLogger(__name__)


class _AllAccounts:
    def __repr__(self) -> str:
        return "ALL_ACCOUNTS"


# Filtro "todas las cuentas"; None sigue significando la bolsa sin cuenta
ALL_ACCOUNTS = _AllAccounts()

AccountFilter = Union[int, None, _AllAccounts]


def _matches(account_filter: AccountFilter, account_id: Optional[int]) -> bool:
    return account_filter is ALL_ACCOUNTS or account_filter == account_id


@dataclass(frozen=True)
class StatementLine:
    transaction_id: Optional[int]
    description: Optional[str]
    amount: Decimal
    date: date
    projected: bool = False


@dataclass(frozen=True)
class AssembledStatement:
    period: BillingPeriod
    total: Decimal
    lines: List[StatementLine]


@dataclass
class StatementView:
    statement: Statement
    lines: List[StatementLine]


@dataclass(frozen=True)
class GenerationFailure:
    account_id: Optional[int]
    period_key: str
    error: str


@dataclass
class GenerationResult:
    created: List[Statement] = field(default_factory=list)
    failures: List[GenerationFailure] = field(default_factory=list)

    def __iter__(self) -> Iterator[Statement]:
        return iter(self.created)

    def __len__(self) -> int:
        return len(self.created)


def _months_between(start: date, end: date) -> List[Tuple[int, int]]:
    months = []
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        months.append((year, month))
        year, month = month_offset(year, month, 1)
    return months


class StatementAssembler:
    def __init__(self, transactions: TransactionReader):
        self.transactions = transactions

    def assemble(
        self, user_id: UUID, account_id: Optional[int], period: BillingPeriod
    ) -> AssembledStatement:
        real = self.transactions.credit_transactions(
            user_id, account_id, period.period_start, period.period_end
        )
        lines = [
            StatementLine(
                transaction_id=tx.id,
                description=tx.description,
                amount=to_money(tx.amount),
                date=tx.effective_date,
            )
            for tx in real
        ]

        # (descripción, monto, año, mes) ya contados: evita contar dos veces
        # una recurrente que ya se materializó como transacción real
        seen: Set[Tuple[Optional[str], Decimal, int, int]] = {
            (line.description, line.amount, line.date.year, line.date.month) for line in lines
        }

        end_month_start = date(period.period_end.year, period.period_end.month, 1)
        templates = self.transactions.monthly_templates(user_id, account_id, end_month_start)
        months = _months_between(period.period_start, period.period_end)

        for template in templates:
            amount = to_money(template.amount)
            for year, month in months:
                if (year, month) <= (template.date.year, template.date.month):
                    continue
                projected_date = clamp_day(year, month, template.date.day)
                if not period.contains(projected_date):
                    continue
                key = (template.description, amount, year, month)
                if key in seen:
                    continue
                seen.add(key)
                lines.append(
                    StatementLine(
                        transaction_id=template.id,
                        description=template.description,
                        amount=amount,
                        date=projected_date,
                        projected=True,
                    )
                )

        lines.sort(key=lambda line: (line.date, line.projected))
        return AssembledStatement(
            period=period,
            total=money_sum(line.amount for line in lines),
            lines=lines,
        )


class FutureStatementGenerator:
    """
    Crea los extractos que falten en la ventana de N meses que empieza en el
    mes actual, siguiendo el ciclo (días de cierre y vencimiento) del último
    extracto conocido de cada cuenta. Sin un extracto previo no hay ciclo que
    seguir, así que esa cuenta se ignora.

    La ventana se ancla en el calendario y no en el último extracto: así una
    segunda corrida sin cambios no encuentra nada nuevo que crear.
    """

    def __init__(
        self,
        assembler: StatementAssembler,
        statements: StatementStore,
        uow: UnitOfWork,
        locks: KeyedLocks = engine_locks,
        clock: Callable[[], date] = date.today,
    ):
        self.assembler = assembler
        self.statements = statements
        self.uow = uow
        self.locks = locks
        self.clock = clock

    def generate(
        self,
        user_id: UUID,
        months_ahead: Optional[int] = None,
        account_id: AccountFilter = ALL_ACCOUNTS,
        today: Optional[date] = None,
    ) -> GenerationResult:
        """
        Crea los extractos de los meses today + i, i en 0..months_ahead-1.

        La ventana parte del mes actual y no del mes siguiente al último
        extracto: si ya hay extractos más allá de la ventana, no se crea nada
        después de ellos.
        """
        months_ahead = FUTURE_STATEMENT_MONTHS if months_ahead is None else months_ahead
        if months_ahead < 1:
            raise InvalidArgumentError("months_ahead debe ser al menos 1.")
        today = today or self.clock()

        result = GenerationResult()
        groupings = [
            grouping
            for grouping in self.statements.account_groupings(user_id)
            if _matches(account_id, grouping)
        ]
        for grouping in groupings:
            try:
                with self.locks.hold(("statements", user_id, grouping)):
                    self._generate_for_account(user_id, grouping, months_ahead, today, result)
            except Exception as exc:
                # Una cuenta que falla no detiene a las demás, pero queda reportada
                logger.exception("Fallo generando extractos de la cuenta %s", grouping)
                result.failures.append(GenerationFailure(grouping, "*", str(exc)))

        if result.created:
            logger.info("Generados %d extractos para el usuario %s", len(result.created), user_id)
        return result

    def _generate_for_account(
        self,
        user_id: UUID,
        account_id: Optional[int],
        months_ahead: int,
        today: date,
        result: GenerationResult,
    ) -> None:
        latest = self.statements.latest(user_id, account_id)
        if latest is None:
            return

        closing_day, due_day = latest.closing_day, latest.due_day
        purchase_day = latest.best_purchase_day

        for i in range(months_ahead):
            year, month = month_offset(today.year, today.month, i)
            key = f"{year:04d}-{month:02d}"

            if self.statements.find_in_month(user_id, account_id, key) is not None:
                continue

            try:
                closing = compute_period(closing_day, due_day, year, month).closing_date
                previous = self.statements.previous_closing(user_id, account_id, closing)
                period = compute_period(closing_day, due_day, year, month, previous)

                assembled = self.assembler.assemble(user_id, account_id, period)
                if not assembled.lines:
                    logger.debug("Sin movimientos para %s en la cuenta %s, se omite", key, account_id)
                    continue

                statement = Statement(
                    user_id=user_id,
                    account_id=account_id,
                    description=f"Extracto {key}",
                    closing_date=period.closing_date,
                    due_date=period.due_date,
                    best_purchase_date=best_purchase_date(purchase_day, year, month),
                    closing_day=closing_day,
                    due_day=due_day,
                    best_purchase_day=purchase_day,
                    period_key=key,
                    total_amount=assembled.total,
                    is_paid=False,
                )
                self.statements.save(statement)
                self.uow.commit()
                result.created.append(statement)
            except Exception as exc:
                self.uow.rollback()
                logger.exception("Fallo generando el extracto %s de la cuenta %s", key, account_id)
                result.failures.append(GenerationFailure(account_id, key, str(exc)))


class StatementService:
    def __init__(
        self,
        statements: StatementStore,
        accounts: AccountStore,
        assembler: StatementAssembler,
        generator: FutureStatementGenerator,
        uow: UnitOfWork,
        locks: KeyedLocks = engine_locks,
        clock: Callable[[], date] = date.today,
    ):
        self.statements = statements
        self.accounts = accounts
        self.assembler = assembler
        self.generator = generator
        self.uow = uow
        self.locks = locks
        self.clock = clock

    # ---------- lectura ----------

    def get_owned(self, statement_id: int, user_id: UUID) -> Statement:
        statement = self.statements.get(statement_id)
        if not statement:
            raise NotFoundError("Extracto no encontrado")
        if statement.user_id != user_id:
            raise ForbiddenError("El extracto no pertenece al usuario")
        return statement

    def period_for(self, statement: Statement) -> BillingPeriod:
        previous = self.statements.previous_closing(
            statement.user_id, statement.account_id, statement.closing_date
        )
        return compute_period(
            statement.closing_day,
            statement.due_day,
            statement.closing_date.year,
            statement.closing_date.month,
            previous,
        )

    def recompute(self, statement: Statement) -> AssembledStatement:
        """Recalcula el total completo; un extracto pagado conserva el total con que se pagó."""
        assembled = self.assembler.assemble(
            statement.user_id, statement.account_id, self.period_for(statement)
        )
        if not statement.is_paid and to_money(statement.total_amount) != assembled.total:
            statement.total_amount = assembled.total
            self.statements.save(statement)
        return assembled

    def get_statement(self, statement_id: int, user_id: UUID) -> StatementView:
        statement = self.get_owned(statement_id, user_id)
        with self.locks.hold(("statements", user_id, statement.account_id)):
            assembled = self.recompute(statement)
            self.uow.commit()
        return StatementView(statement=statement, lines=assembled.lines)

    def statement_lines(self, statement_id: int, user_id: UUID) -> List[StatementLine]:
        return self.get_statement(statement_id, user_id).lines

    def list_statements(self, user_id: UUID, account_id: AccountFilter = ALL_ACCOUNTS) -> List[Statement]:
        statements = [s for s in self.statements.list_for_user(user_id) if _matches(account_id, s.account_id)]
        for statement in statements:
            with self.locks.hold(("statements", user_id, statement.account_id)):
                self.recompute(statement)
        self.uow.commit()
        return statements

    def get_current_statement(
        self,
        user_id: UUID,
        account_id: AccountFilter = ALL_ACCOUNTS,
        today: Optional[date] = None,
    ) -> Optional[Statement]:
        today = today or self.clock()
        key = period_key(today)
        statement = self._find_current(user_id, account_id, key)
        if statement is None:
            self.generator.generate(user_id, account_id=account_id, today=today)
            statement = self._find_current(user_id, account_id, key)
        if statement is not None:
            with self.locks.hold(("statements", user_id, statement.account_id)):
                self.recompute(statement)
                self.uow.commit()
        return statement

    def _find_current(self, user_id: UUID, account_id: AccountFilter, key: str) -> Optional[Statement]:
        if account_id is not ALL_ACCOUNTS:
            return self.statements.find_in_month(user_id, account_id, key)
        for statement in self.statements.list_for_user(user_id):
            if statement.period_key == key:
                return statement
        return None

    def generate_future_statements(
        self,
        user_id: UUID,
        months_ahead: Optional[int] = None,
        account_id: AccountFilter = ALL_ACCOUNTS,
        today: Optional[date] = None,
    ) -> GenerationResult:
        return self.generator.generate(user_id, months_ahead, account_id, today=today)

    def list_future_statements(
        self,
        user_id: UUID,
        account_id: AccountFilter = ALL_ACCOUNTS,
        months_ahead: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        today: Optional[date] = None,
    ) -> List[StatementView]:
        today = today or self.clock()
        self.generator.generate(user_id, months_ahead, account_id, today=today)

        views = []
        for statement in reversed(self.statements.list_for_user(user_id)):
            if statement.closing_date <= today or not _matches(account_id, statement.account_id):
                continue
            if start_date and statement.closing_date < start_date:
                continue
            if end_date and statement.closing_date > end_date:
                continue
            with self.locks.hold(("statements", user_id, statement.account_id)):
                assembled = self.recompute(statement)
            views.append(StatementView(statement=statement, lines=assembled.lines))
        self.uow.commit()
        return views

    # ---------- escritura manual ----------

    def create_statement(
        self,
        user_id: UUID,
        closing_day: int,
        due_day: int,
        account_id: Optional[int] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
        best_purchase_day: Optional[int] = None,
        description: str = "",
        notes: Optional[str] = None,
    ) -> Statement:
        if account_id is not None:
            get_owned_account(self.accounts, account_id, user_id)

        today = self.clock()
        year = year or today.year
        month = month or today.month
        # Se valida antes de consultar para que el error sea el de los días
        candidate = compute_period(closing_day, due_day, year, month)
        key = period_key(candidate.closing_date)

        with self.locks.hold(("statements", user_id, account_id)):
            if self.statements.find_in_month(user_id, account_id, key):
                raise InvalidArgumentError("Ya existe un extracto para ese mes en esta cuenta.")

            previous = self.statements.previous_closing(user_id, account_id, candidate.closing_date)
            period = compute_period(closing_day, due_day, year, month, previous)
            assembled = self.assembler.assemble(user_id, account_id, period)

            statement = Statement(
                user_id=user_id,
                account_id=account_id,
                description=description or f"Extracto {key}",
                closing_date=period.closing_date,
                due_date=period.due_date,
                best_purchase_date=best_purchase_date(best_purchase_day, year, month),
                closing_day=closing_day,
                due_day=due_day,
                best_purchase_day=best_purchase_day,
                period_key=key,
                total_amount=assembled.total,
                notes=notes,
            )
            self.statements.save(statement)
            self.uow.commit()

        logger.info("Extracto %s creado manualmente para la cuenta %s", key, account_id)
        return statement

    def update_statement(
        self,
        statement_id: int,
        user_id: UUID,
        closing_day: Optional[int] = None,
        due_day: Optional[int] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
        best_purchase_day: Optional[int] = None,
        description: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Statement:
        statement = self.get_owned(statement_id, user_id)
        touches_cycle = any(v is not None for v in (closing_day, due_day, year, month, best_purchase_day))
        if touches_cycle and statement.is_paid:
            raise InvalidArgumentError("No se puede cambiar el ciclo de un extracto pagado.")

        with self.locks.hold(("statements", user_id, statement.account_id)):
            if touches_cycle:
                closing_day = statement.closing_day if closing_day is None else closing_day
                due_day = statement.due_day if due_day is None else due_day
                year = statement.closing_date.year if year is None else year
                month = statement.closing_date.month if month is None else month
                if best_purchase_day is None:
                    best_purchase_day = statement.best_purchase_day

                candidate = compute_period(closing_day, due_day, year, month)
                key = period_key(candidate.closing_date)
                clash = self.statements.find_in_month(user_id, statement.account_id, key)
                if clash is not None and clash.id != statement.id:
                    raise InvalidArgumentError("Ya existe un extracto para ese mes en esta cuenta.")

                statement.closing_day = closing_day
                statement.due_day = due_day
                statement.best_purchase_day = best_purchase_day
                statement.closing_date = candidate.closing_date
                statement.due_date = candidate.due_date
                statement.best_purchase_date = best_purchase_date(best_purchase_day, year, month)
                statement.period_key = key

            if description is not None:
                statement.description = description
            if notes is not None:
                statement.notes = notes or None

            self.statements.save(statement)
            self.recompute(statement)
            self.uow.commit()
        return statement

    def delete_statement(self, statement_id: int, user_id: UUID) -> None:
        statement = self.get_owned(statement_id, user_id)
        if statement.is_paid:
            raise InvalidArgumentError("Marca el extracto como no pagado antes de eliminarlo.")
        with self.locks.hold(("statements", user_id, statement.account_id)):
            self.statements.delete(statement)
            self.uow.commit()

    def refresh_account(self, user_id: UUID, account_id: Optional[int]) -> GenerationResult:
        """Tras mutar una transacción de crédito: crea los extractos que falten y recalcula los abiertos."""
        result = self.generator.generate(user_id, account_id=account_id)
        with self.locks.hold(("statements", user_id, account_id)):
            for statement in self.statements.list_for_user(user_id):
                if statement.account_id == account_id and not statement.is_paid:
                    self.recompute(statement)
            self.uow.commit()
        return result

