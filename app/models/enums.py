from enum import Enum

class TransactionKind(str, Enum):
    expense = "expense"
    receipt = "receipt"

class PaymentChannel(str, Enum):
    credit = "credit"
    debit = "debit"
    cash = "cash"
    transfer = "transfer"
    other = "other"

class Recurrence(str, Enum):
    none = "none"
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    yearly = "yearly"

class AccountKind(str, Enum):
    ordinary = "ordinary"
    savings = "savings"
    credit = "credit"
    other = "other"

class BalanceOperation(str, Enum):
    create = "create"
    update = "update"
    delete = "delete"

class SavingsEntryKind(str, Enum):
    deposit = "deposit"
    withdrawal = "withdrawal"

class EntryClass(str, Enum):
    real = "real"
    bookkeeping = "bookkeeping"
