from datetime import date
from typing import List, Optional, Sequence
from uuid import UUID

from sqlmodel import Session, select

from app.models.statement import Statement, StatementPayment
from app.repositories.base import match_account


class StatementRepository:
    def __init__(self, session: Session):
        self.session = session

    def get(self, statement_id: int) -> Optional[Statement]:
        return self.session.get(Statement, statement_id)

    def get_for_update(self, statement_id: int) -> Optional[Statement]:
        return self.session.exec(
            select(Statement)
            .where(Statement.id == statement_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).first()

    def list_for_user(self, user_id: UUID) -> List[Statement]:
        return list(
            self.session.exec(
                select(Statement)
                .where(Statement.user_id == user_id)
                .order_by(Statement.closing_date.desc(), Statement.id.desc())
            ).all()
        )

    def latest(self, user_id: UUID, account_id: Optional[int]) -> Optional[Statement]:
        return self.session.exec(
            select(Statement)
            .where(Statement.user_id == user_id, match_account(Statement.account_id, account_id))
            .order_by(Statement.closing_date.desc())
        ).first()

    def previous_closing(
        self, user_id: UUID, account_id: Optional[int], closing_date: date
    ) -> Optional[date]:
        return self.session.exec(
            select(Statement.closing_date)
            .where(
                Statement.user_id == user_id,
                match_account(Statement.account_id, account_id),
                Statement.closing_date < closing_date,
            )
            .order_by(Statement.closing_date.desc())
        ).first()

    def find_in_month(
        self, user_id: UUID, account_id: Optional[int], period_key: str
    ) -> Optional[Statement]:
        return self.session.exec(
            select(Statement).where(
                Statement.user_id == user_id,
                match_account(Statement.account_id, account_id),
                Statement.period_key == period_key,
            )
        ).first()

    def account_groupings(self, user_id: UUID) -> List[Optional[int]]:
        return list(
            self.session.exec(
                select(Statement.account_id).where(Statement.user_id == user_id).distinct()
            ).all()
        )

    def save(self, statement: Statement) -> Statement:
        self.session.add(statement)
        self.session.flush()
        return statement

    def delete(self, statement: Statement) -> None:
        self.clear_payments(statement.id)
        self.session.delete(statement)
        self.session.flush()

    def payments(self, statement_id: int) -> List[StatementPayment]:
        return list(
            self.session.exec(
                select(StatementPayment)
                .where(StatementPayment.statement_id == statement_id)
                .order_by(StatementPayment.id)
            ).all()
        )

    def add_payments(self, payments: Sequence[StatementPayment]) -> None:
        self.session.add_all(list(payments))
        self.session.flush()

    def clear_payments(self, statement_id: int) -> None:
        for payment in self.payments(statement_id):
            self.session.delete(payment)
        self.session.flush()
