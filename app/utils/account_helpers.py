from decimal import Decimal
from uuid import UUID

from app.core.errors import ForbiddenError, NotFoundError
from app.models.account import Account
from app.models.enums import TransactionKind
from app.services.interfaces import AccountStore


def get_owned_account(accounts: AccountStore, account_id: int, user_id: UUID) -> Account:
    account = accounts.get(account_id)

    if not account:
        raise NotFoundError("Cuenta no encontrada")
    if account.user_id != user_id:
        raise ForbiddenError("La cuenta no pertenece al usuario")

    return account


def signed_amount(kind: TransactionKind, amount: Decimal) -> Decimal:
    """Ingreso suma al saldo, gasto resta."""
    return amount if kind == TransactionKind.receipt else -amount

