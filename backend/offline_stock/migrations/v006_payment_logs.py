"""Payment log

Version: 6
Append-only ledger of payments applied to transactions.
"""

import sqlalchemy as sa

from .introspection import has_table


version = 6
description = "payment_logs table"


def upgrade(op, conn):
    if has_table(conn, "payment_logs"):
        return

    op.create_table(
        "payment_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("transaction_id", sa.Integer(), sa.ForeignKey("transactions.id"), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sqlite_autoincrement=True,
    )
