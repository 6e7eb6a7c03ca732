"""Local user accounts

Version: 5
"""

import sqlalchemy as sa

from .introspection import has_table, index_names


version = 5
description = "users table with unique nickname"

NICKNAME_INDEX = "users_nickname_unique"


def upgrade(op, conn):
    if not has_table(conn, "users"):
        op.create_table(
            "users",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("nickname", sa.Text(), nullable=False),
            sa.Column("password", sa.Text(), nullable=False),
            sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
            sqlite_autoincrement=True,
        )

    if NICKNAME_INDEX not in index_names(conn, "users"):
        op.create_index(NICKNAME_INDEX, "users", ["nickname"], unique=True)
