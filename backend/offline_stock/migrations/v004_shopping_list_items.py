"""Shopping list items linked to their list

Version: 4
The first item table was a flat checklist (free-text `quantity`, no list_id).
That cannot be fixed additively because every row needs a parent list, so
the legacy table is renamed aside, rebuilt under the canonical name, and its
rows copied into the default "General Restock" list. Stores that already had
list_id only receive the missing columns.

Every branch can be re-entered after a crash: a leftover aside table resumes
the copy, and rows are copied with INSERT OR IGNORE on their original ids.
"""

import sqlalchemy as sa

from .introspection import add_missing_columns, column_names, has_table, parse_leading_number


version = 4
description = "shopping_list_items with list_id, numeric quantities and pricing"

ITEMS_TABLE = "shopping_list_items"
LEGACY_ASIDE = "shopping_list_items_old"
DEFAULT_LIST_TITLE = "General Restock"


def upgrade(op, conn):
    if has_table(conn, LEGACY_ASIDE):
        _rebuild_from_legacy(op, conn)
        return

    if not has_table(conn, ITEMS_TABLE):
        _create_items_table(op)
        return

    if "list_id" not in column_names(conn, ITEMS_TABLE):
        op.rename_table(ITEMS_TABLE, LEGACY_ASIDE)
        _rebuild_from_legacy(op, conn)
        return

    add_missing_columns(op, conn, ITEMS_TABLE, [
        sa.Column("product_id", sa.Integer(), nullable=True),
        sa.Column("quantity_value", sa.Float(), server_default="1"),
        sa.Column("quantity_label", sa.Text(), nullable=True),
        sa.Column("estimated_unit_cost", sa.Float(), server_default="0"),
        sa.Column("sell_price", sa.Float(), server_default="0"),
        sa.Column("category", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_completed", sa.Integer(), server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    ])
    _translate_legacy_quantities(conn)


def _create_items_table(op):
    op.create_table(
        ITEMS_TABLE,
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("list_id", sa.Integer(), sa.ForeignKey("shopping_lists.id"), nullable=False),
        sa.Column(
            "product_id",
            sa.Integer(),
            sa.ForeignKey("products.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("quantity_value", sa.Float(), server_default="1"),
        sa.Column("quantity_label", sa.Text(), nullable=True),
        sa.Column("estimated_unit_cost", sa.Float(), server_default="0"),
        sa.Column("sell_price", sa.Float(), server_default="0"),
        sa.Column("category", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_completed", sa.Integer(), server_default="0"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP")),
        sqlite_autoincrement=True,
    )


def _default_list_id(conn) -> int:
    """Parent for legacy rows; reuses an existing "General Restock" list."""
    existing = conn.execute(
        sa.text("SELECT id FROM shopping_lists WHERE title = :title ORDER BY id ASC LIMIT 1"),
        {"title": DEFAULT_LIST_TITLE},
    ).scalar()
    if existing is not None:
        return existing

    conn.execute(
        sa.text("INSERT INTO shopping_lists (title, type, status) VALUES (:title, 'restock', 'active')"),
        {"title": DEFAULT_LIST_TITLE},
    )
    return conn.execute(
        sa.text("SELECT id FROM shopping_lists WHERE title = :title ORDER BY id ASC LIMIT 1"),
        {"title": DEFAULT_LIST_TITLE},
    ).scalar()


def _rebuild_from_legacy(op, conn):
    if not has_table(conn, ITEMS_TABLE):
        _create_items_table(op)

    legacy_columns = column_names(conn, LEGACY_ASIDE)

    def pick(column: str) -> str:
        return column if column in legacy_columns else "NULL"

    rows = conn.execute(sa.text(
        f"SELECT {pick('id')} AS id, {pick('name')} AS name, {pick('quantity')} AS quantity, "
        f"{pick('product_id')} AS product_id, {pick('notes')} AS notes, "
        f"{pick('is_completed')} AS is_completed, {pick('created_at')} AS created_at "
        f"FROM {LEGACY_ASIDE} ORDER BY id"
    )).mappings().all()

    if rows:
        list_id = _default_list_id(conn)
        for row in rows:
            raw_quantity = row["quantity"]
            label = str(raw_quantity).strip() if raw_quantity is not None else ""
            parsed = parse_leading_number(raw_quantity)
            conn.execute(
                sa.text(
                    f"INSERT OR IGNORE INTO {ITEMS_TABLE} "
                    "(id, list_id, product_id, name, quantity_value, quantity_label, notes, is_completed, created_at) "
                    "VALUES (:id, :list_id, :product_id, :name, :quantity_value, :quantity_label, :notes, "
                    ":is_completed, COALESCE(:created_at, CURRENT_TIMESTAMP))"
                ),
                {
                    "id": row["id"],
                    "list_id": list_id,
                    "product_id": _existing_product_id(conn, row["product_id"]),
                    "name": row["name"] or "Item",
                    "quantity_value": parsed if parsed is not None else 1,
                    "quantity_label": label or None,
                    "notes": row["notes"],
                    "is_completed": 1 if row["is_completed"] else 0,
                    "created_at": row["created_at"],
                },
            )

    op.drop_table(LEGACY_ASIDE)


def _existing_product_id(conn, product_id):
    if product_id is None:
        return None
    found = conn.execute(
        sa.text("SELECT id FROM products WHERE id = :id"), {"id": product_id}
    ).scalar()
    return found


def _translate_legacy_quantities(conn):
    """Stores that kept a free-text `quantity` next to list_id."""
    if "quantity" not in column_names(conn, ITEMS_TABLE):
        return

    rows = conn.execute(sa.text(
        f"SELECT id, quantity FROM {ITEMS_TABLE} "
        "WHERE quantity IS NOT NULL AND quantity_label IS NULL"
    )).mappings().all()
    for row in rows:
        raw_quantity = row["quantity"]
        label = str(raw_quantity).strip()
        if not label:
            continue
        parsed = parse_leading_number(raw_quantity)
        conn.execute(
            sa.text(f"UPDATE {ITEMS_TABLE} SET quantity_value = :value, quantity_label = :label WHERE id = :id"),
            {"value": parsed if parsed is not None else 1, "label": label, "id": row["id"]},
        )
