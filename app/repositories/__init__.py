from app.repositories.accounts import AccountRepository
from app.repositories.savings import SavingsEntryRepository
from app.repositories.statements import StatementRepository
from app.repositories.transactions import TransactionRepository

__all__ = [
    "AccountRepository",
    "SavingsEntryRepository",
    "StatementRepository",
    "TransactionRepository",
]
