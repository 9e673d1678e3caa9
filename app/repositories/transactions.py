from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, or_
from sqlmodel import Session, col, select

from app.models.enums import PaymentChannel, Recurrence
from app.models.transaction import Transaction
from app.repositories.base import match_account


def _effective_date():
    return func.coalesce(Transaction.payment_date, Transaction.date)


class TransactionRepository:
    def __init__(self, session: Session):
        self.session = session

    def get(self, transaction_id: int) -> Optional[Transaction]:
        return self.session.get(Transaction, transaction_id)

    def save(self, transaction: Transaction) -> Transaction:
        self.session.add(transaction)
        self.session.flush()
        return transaction

    def delete(self, transaction: Transaction) -> None:
        self.session.delete(transaction)
        self.session.flush()

    def credit_transactions(
        self, user_id: UUID, account_id: Optional[int], start: date, end: date
    ) -> List[Transaction]:
        return list(
            self.session.exec(
                select(Transaction)
                .where(
                    Transaction.user_id == user_id,
                    Transaction.channel == PaymentChannel.credit,
                    match_account(Transaction.account_id, account_id),
                    _effective_date() >= start,
                    _effective_date() <= end,
                )
                .order_by(_effective_date(), Transaction.id)
            ).all()
        )

    def monthly_templates(
        self, user_id: UUID, account_id: Optional[int], before: date
    ) -> List[Transaction]:
        return list(
            self.session.exec(
                select(Transaction)
                .where(
                    Transaction.user_id == user_id,
                    Transaction.channel == PaymentChannel.credit,
                    Transaction.is_recurring == True,  # noqa: E712
                    Transaction.recurrence == Recurrence.monthly,
                    match_account(Transaction.account_id, account_id),
                    Transaction.date < before,
                )
                .order_by(Transaction.date, Transaction.id)
            ).all()
        )

    def unapplied_due(self, user_id: UUID, today: date) -> List[Transaction]:
        return list(
            self.session.exec(
                select(Transaction)
                .where(
                    Transaction.user_id == user_id,
                    Transaction.balance_applied == False,  # noqa: E712
                    Transaction.channel != PaymentChannel.credit,
                    col(Transaction.account_id).is_not(None),
                    or_(Transaction.is_paid == True, _effective_date() <= today),  # noqa: E712
                )
                .order_by(_effective_date(), Transaction.id)
            ).all()
        )
