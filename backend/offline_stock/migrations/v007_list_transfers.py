"""Shopping list transfer journal

Version: 7
Records what each list-to-depot transfer moved so the latest one can be
rolled back.
"""

import sqlalchemy as sa

from .introspection import has_table, index_names


version = 7
description = "shopping_list_transfers and shopping_list_transfer_lines"


def upgrade(op, conn):
    if not has_table(conn, "shopping_list_transfers"):
        op.create_table(
            "shopping_list_transfers",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("list_id", sa.Integer(), nullable=False),
            sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
            sa.Column("reverted_at", sa.DateTime(), nullable=True),
            sqlite_autoincrement=True,
        )
    if "ix_shopping_list_transfers_list_id" not in index_names(conn, "shopping_list_transfers"):
        op.create_index("ix_shopping_list_transfers_list_id", "shopping_list_transfers", ["list_id"])

    if not has_table(conn, "shopping_list_transfer_lines"):
        op.create_table(
            "shopping_list_transfer_lines",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "transfer_id",
                sa.Integer(),
                sa.ForeignKey("shopping_list_transfers.id"),
                nullable=False,
            ),
            sa.Column("item_id", sa.Integer(), nullable=False),
            sa.Column("product_id", sa.Integer(), nullable=True),
            sa.Column("quantity", sa.Float(), nullable=False, server_default="0"),
            sa.Column("created_product", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("previous_quantity_value", sa.Float(), nullable=True),
            sqlite_autoincrement=True,
        )
    if "ix_shopping_list_transfer_lines_transfer_id" not in index_names(conn, "shopping_list_transfer_lines"):
        op.create_index(
            "ix_shopping_list_transfer_lines_transfer_id",
            "shopping_list_transfer_lines",
            ["transfer_id"],
        )
