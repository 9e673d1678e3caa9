"""create ledger tables

Revision ID: 5e1f0c2a9b7d
Revises:
Create Date: 2026-10-18 10:12:40.118392

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel


# revision identifiers, used by Alembic.
revision: str = '5e1f0c2a9b7d'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

MONEY = sa.Numeric(precision=14, scale=2)


def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "account",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("kind", sa.Enum("ordinary", "savings", "credit", "other", name="accountkind"), nullable=False),
        sa.Column("balance", MONEY, nullable=False),
        sa.Column("is_primary", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_account_user_id", "account", ["user_id"])

    op.create_table(
        "transaction",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("kind", sa.Enum("expense", "receipt", name="transactionkind"), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("description", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=True),
        sa.Column(
            "channel",
            sa.Enum("credit", "debit", "cash", "transfer", "other", name="paymentchannel"),
            nullable=False,
        ),
        sa.Column("account_id", sa.Integer(), nullable=True),
        sa.Column("is_paid", sa.Boolean(), nullable=False),
        sa.Column("is_recurring", sa.Boolean(), nullable=False),
        sa.Column(
            "recurrence",
            sa.Enum("none", "daily", "weekly", "monthly", "yearly", name="recurrence"),
            nullable=False,
        ),
        sa.Column("balance_applied", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"]),
        sa.ForeignKeyConstraint(["account_id"], ["account.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_transaction_user_id", "transaction", ["user_id"])
    op.create_index("ix_transaction_date", "transaction", ["date"])
    op.create_index("ix_transaction_payment_date", "transaction", ["payment_date"])
    op.create_index("ix_transaction_account_id", "transaction", ["account_id"])

    op.create_table(
        "statement",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("account_id", sa.Integer(), nullable=True),
        sa.Column("description", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("closing_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("best_purchase_date", sa.Date(), nullable=True),
        sa.Column("closing_day", sa.Integer(), nullable=False),
        sa.Column("due_day", sa.Integer(), nullable=False),
        sa.Column("best_purchase_day", sa.Integer(), nullable=True),
        sa.Column("period_key", sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column("total_amount", MONEY, nullable=False),
        sa.Column("is_paid", sa.Boolean(), nullable=False),
        sa.Column("paid_account_id", sa.Integer(), nullable=True),
        sa.Column("paid_at", sa.DateTime(), nullable=True),
        sa.Column("notes", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"]),
        sa.ForeignKeyConstraint(["account_id"], ["account.id"]),
        sa.ForeignKeyConstraint(["paid_account_id"], ["account.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "account_id", "period_key", name="uq_statement_user_account_period"),
    )
    op.create_index("ix_statement_user_id", "statement", ["user_id"])
    op.create_index("ix_statement_account_id", "statement", ["account_id"])
    op.create_index("ix_statement_closing_date", "statement", ["closing_date"])

    op.create_table(
        "statement_payment",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("statement_id", sa.Integer(), nullable=False),
        sa.Column("account_id", sa.Integer(), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["statement_id"], ["statement.id"]),
        sa.ForeignKeyConstraint(["account_id"], ["account.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_statement_payment_statement_id", "statement_payment", ["statement_id"])

    op.create_table(
        "savings_entry",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("ledger_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("kind", sa.Enum("deposit", "withdrawal", name="savingsentrykind"), nullable=False),
        sa.Column("amount", MONEY, nullable=False),
        sa.Column("description", sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column("account_id", sa.Integer(), nullable=True),
        # Nulo solo en registros importados antes de la clasificación
        sa.Column("entry_class", sa.Enum("real", "bookkeeping", name="entryclass"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["ledger_id"], ["account.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"]),
        sa.ForeignKeyConstraint(["account_id"], ["account.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_savings_entry_ledger_id", "savings_entry", ["ledger_id"])


def downgrade():
    op.drop_index("ix_savings_entry_ledger_id", table_name="savings_entry")
    op.drop_table("savings_entry")
    op.drop_index("ix_statement_payment_statement_id", table_name="statement_payment")
    op.drop_table("statement_payment")
    op.drop_index("ix_statement_closing_date", table_name="statement")
    op.drop_index("ix_statement_account_id", table_name="statement")
    op.drop_index("ix_statement_user_id", table_name="statement")
    op.drop_table("statement")
    op.drop_index("ix_transaction_account_id", table_name="transaction")
    op.drop_index("ix_transaction_payment_date", table_name="transaction")
    op.drop_index("ix_transaction_date", table_name="transaction")
    op.drop_index("ix_transaction_user_id", table_name="transaction")
    op.drop_table("transaction")
    op.drop_index("ix_account_user_id", table_name="account")
    op.drop_table("account")
    op.drop_index("ix_user_email", table_name="user")
    op.drop_table("user")
    sa.Enum(name="entryclass").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="savingsentrykind").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="recurrence").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="paymentchannel").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="transactionkind").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="accountkind").drop(op.get_bind(), checkfirst=True)
