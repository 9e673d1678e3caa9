import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from app.core.errors import InvalidArgumentError, NotFoundError
from app.models.enums import BalanceOperation, TransactionKind
from app.services.interfaces import AccountStore
from app.utils.account_helpers import signed_amount
from app.utils.money import Number, to_money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceChange:
    account_id: int
    delta: Decimal
    balance: Decimal


class BalanceLedger:
    """
    Aplica, revierte o re-diferencia el efecto de una transacción sobre el saldo
    de una cuenta. No decide si la transacción es elegible: eso lo hace quien llama.
    Tampoco hace commit; el saldo queda en la sesión del llamador.
    """

    def __init__(self, accounts: AccountStore):
        self.accounts = accounts

    def apply_effect(
        self,
        account_id: Optional[int],
        amount: Number,
        kind: TransactionKind,
        operation: BalanceOperation,
        prior_amount: Optional[Number] = None,
        prior_account_id: Optional[int] = None,
    ) -> List[BalanceChange]:
        amount = to_money(amount)
        prior = to_money(prior_amount) if prior_amount is not None else Decimal("0.00")
        if amount < 0 or prior < 0:
            raise InvalidArgumentError("Los montos no pueden ser negativos.")

        if account_id is None and prior_account_id is None:
            return []  # Sin cuenta asociada no hay saldo que tocar

        # Edición con cambio de cuenta: revertir en la anterior y aplicar en la nueva
        if (
            operation == BalanceOperation.update
            and prior_account_id is not None
            and account_id != prior_account_id
        ):
            changes = [self._adjust(prior_account_id, -signed_amount(kind, prior))]
            if account_id is not None:
                changes.append(self._adjust(account_id, signed_amount(kind, amount)))
            return changes

        target = account_id if account_id is not None else prior_account_id

        if operation == BalanceOperation.create:
            delta = signed_amount(kind, amount)
        elif operation == BalanceOperation.delete:
            delta = -signed_amount(kind, amount)
        else:
            delta = signed_amount(kind, amount - prior)

        return [self._adjust(target, delta)]

    def _adjust(self, account_id: int, delta: Decimal) -> BalanceChange:
        # Se suma sobre el saldo confirmado
        account = self.accounts.get_for_update(account_id)
        if not account:
            raise NotFoundError("Cuenta no encontrada")

        account.balance = to_money(Decimal(account.balance) + delta)
        self.accounts.save(account)
        logger.info("Saldo de cuenta %s ajustado en %s (nuevo saldo %s)", account_id, delta, account.balance)
        return BalanceChange(account_id=account_id, delta=delta, balance=account.balance)
