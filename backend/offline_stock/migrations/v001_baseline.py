"""Baseline depot, customer and sales tables

Version: 1
Shape of the first web release: products, customers, transactions (no payment
tracking yet) and transaction_items.
"""

import sqlalchemy as sa

from .introspection import has_table


version = 1
description = "baseline depot, customer and sales tables"


def upgrade(op, conn):
    if not has_table(conn, "products"):
        op.create_table(
            "products",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.Text(), nullable=False),
            sa.Column("barcode", sa.Text(), nullable=True),
            sa.Column("category", sa.Text(), nullable=True),
            sa.Column("buy_price", sa.Float(), server_default="0"),
            sa.Column("sell_price", sa.Float(), server_default="0"),
            sa.Column("quantity", sa.Integer(), server_default="0"),
            sa.Column("min_stock", sa.Integer(), server_default="5"),
            sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
            sqlite_autoincrement=True,
        )

    if not has_table(conn, "customers"):
        op.create_table(
            "customers",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.Text(), nullable=False),
            sa.Column("phone", sa.Text(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
            sqlite_autoincrement=True,
        )

    if not has_table(conn, "transactions"):
        op.create_table(
            "transactions",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("date", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
            sa.Column("customer_id", sa.Integer(), sa.ForeignKey("customers.id"), nullable=True),
            sa.Column("total_amount", sa.Float(), server_default="0"),
            sqlite_autoincrement=True,
        )

    if not has_table(conn, "transaction_items"):
        op.create_table(
            "transaction_items",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("transaction_id", sa.Integer(), sa.ForeignKey("transactions.id"), nullable=False),
            sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id"), nullable=False),
            sa.Column("quantity", sa.Integer(), nullable=False),
            sa.Column("unit_price", sa.Float(), nullable=False),
            sa.Column("line_total", sa.Float(), nullable=False),
            sqlite_autoincrement=True,
        )
