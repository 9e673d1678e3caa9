import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from app.models.account import Account
from app.models.enums import AccountKind, BalanceOperation, TransactionKind
from app.services.interfaces import AccountStore, UnitOfWork
from app.services.ledger import BalanceChange, BalanceLedger
from app.utils.account_helpers import get_owned_account
from app.utils.money import Number, money_sum, to_money

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, accounts: AccountStore, ledger: BalanceLedger, uow: UnitOfWork):
        self.accounts = accounts
        self.ledger = ledger
        self.uow = uow

    def get_account(self, account_id: int, user_id: UUID) -> Account:
        return get_owned_account(self.accounts, account_id, user_id)

    def list_accounts(self, user_id: UUID) -> List[Account]:
        return self.accounts.list_for_user(user_id)

    def create_account(
        self,
        user_id: UUID,
        name: str,
        kind: AccountKind = AccountKind.ordinary,
        balance: Optional[Number] = None,
        is_primary: bool = False,
    ) -> Account:
        if is_primary:
            self._clear_primary(user_id)
        account = Account(
            user_id=user_id,
            name=name,
            kind=kind,
            balance=to_money(balance) if balance is not None else Decimal("0.00"),
            is_primary=is_primary,
        )
        self.accounts.save(account)
        self.uow.commit()
        return account

    def set_primary(self, account_id: int, user_id: UUID) -> Account:
        account = self.get_account(account_id, user_id)
        # Solo una cuenta principal por usuario
        self._clear_primary(user_id, keep=account.id)
        account.is_primary = True
        self.accounts.save(account)
        self.uow.commit()
        return account

    def set_balance(self, account_id: int, user_id: UUID, balance: Number) -> Account:
        """Fija el saldo a mano (conciliación con el banco real)."""
        self.get_account(account_id, user_id)
        account = self.accounts.get_for_update(account_id)
        account.balance = to_money(balance)
        self.accounts.save(account)
        self.uow.commit()
        logger.info("Saldo de cuenta %s fijado manualmente en %s", account_id, account.balance)
        return account

    def apply_effect(
        self,
        account_id: int,
        user_id: UUID,
        amount: Number,
        kind: TransactionKind,
        operation: BalanceOperation,
        prior_amount: Optional[Number] = None,
        prior_account_id: Optional[int] = None,
    ) -> List[BalanceChange]:
        """Efecto de saldo pedido desde fuera (p. ej. el flujo de captura de transacciones)."""
        self.get_account(account_id, user_id)
        if prior_account_id is not None:
            self.get_account(prior_account_id, user_id)
        try:
            changes = self.ledger.apply_effect(
                account_id,
                amount,
                kind,
                operation,
                prior_amount=prior_amount,
                prior_account_id=prior_account_id,
            )
            self.uow.commit()
        except Exception:
            self.uow.rollback()
            raise
        return changes

    def total_balance(self, user_id: UUID) -> Decimal:
        # Las cuentas de ahorro no son saldo disponible
        return money_sum(
            account.balance
            for account in self.accounts.list_for_user(user_id)
            if account.kind != AccountKind.savings
        )

    def _clear_primary(self, user_id: UUID, keep: Optional[int] = None) -> None:
        for other in self.accounts.list_for_user(user_id):
            if other.is_primary and other.id != keep:
                other.is_primary = False
                self.accounts.save(other)
