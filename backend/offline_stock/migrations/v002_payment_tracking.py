"""Partial-payment tracking on transactions

Version: 2
Adds payment_status / paid_amount and backfills paid_amount for historical
fully-paid sales, which predate the column and would otherwise read as debt.
"""

import sqlalchemy as sa

from .introspection import add_missing_columns


version = 2
description = "payment_status and paid_amount on transactions"


def upgrade(op, conn):
    add_missing_columns(op, conn, "transactions", [
        sa.Column("payment_status", sa.Text(), server_default="fully_paid"),
        sa.Column("paid_amount", sa.Float(), server_default="0"),
    ])

    # Idempotent: a second run finds nothing left to fix
    conn.execute(sa.text("""
        UPDATE transactions
        SET paid_amount = total_amount
        WHERE payment_status = 'fully_paid'
          AND (paid_amount IS NULL OR paid_amount = 0)
          AND total_amount > 0
    """))
    conn.execute(sa.text("""
        UPDATE transactions
        SET paid_amount = 0
        WHERE paid_amount IS NULL
    """))
