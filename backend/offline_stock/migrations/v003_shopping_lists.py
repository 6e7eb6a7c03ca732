"""Shopping lists

Version: 3
Creates shopping_lists, or completes an early shape that lacked the
priority / notes / customer / due date / status / type columns.
"""

import sqlalchemy as sa

from .introspection import add_missing_columns, has_table


version = 3
description = "shopping_lists table and its late columns"


def upgrade(op, conn):
    if not has_table(conn, "shopping_lists"):
        op.create_table(
            "shopping_lists",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("title", sa.Text(), nullable=False),
            sa.Column("type", sa.Text(), server_default="restock"),
            sa.Column("status", sa.Text(), server_default="active"),
            sa.Column("priority", sa.Text(), server_default="medium"),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id"), nullable=True),
            sa.Column("due_date", sa.DateTime(), nullable=True),
            sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
            sqlite_autoincrement=True,
        )
        return

    add_missing_columns(op, conn, "shopping_lists", [
        sa.Column("priority", sa.Text(), server_default="medium"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("customer_id", sa.Integer(), nullable=True),
        sa.Column("due_date", sa.DateTime(), nullable=True),
        sa.Column("status", sa.Text(), server_default="active"),
        sa.Column("type", sa.Text(), server_default="restock"),
    ])
