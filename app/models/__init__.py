from app.models.user import User
from app.models.account import Account
from app.models.transaction import Transaction
from app.models.statement import Statement, StatementPayment
from app.models.savings_entry import SavingsEntry

__all__ = ["User", "Account", "Transaction", "Statement", "StatementPayment", "SavingsEntry"]
