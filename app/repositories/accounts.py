from typing import List, Optional
from uuid import UUID

from sqlmodel import Session, select

from app.models.account import Account


class AccountRepository:
    def __init__(self, session: Session):
        self.session = session

    def get(self, account_id: int) -> Optional[Account]:
        return self.session.get(Account, account_id)

    def get_for_update(self, account_id: int) -> Optional[Account]:
        # Relee la fila bloqueada: el objeto en la sesión puede traer un saldo viejo
        return self.session.exec(
            select(Account)
            .where(Account.id == account_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).first()

    def list_for_user(self, user_id: UUID) -> List[Account]:
        return list(
            self.session.exec(
                select(Account)
                .where(Account.user_id == user_id)
                .order_by(Account.is_primary.desc(), Account.created_at.desc())
            ).all()
        )

    def save(self, account: Account) -> Account:
        self.session.add(account)
        self.session.flush()
        return account
