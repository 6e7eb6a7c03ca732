"""
Schema migrator tests: fresh stores, legacy shapes, idempotence, failures.
"""

import pytest
import sqlalchemy as sa

from offline_stock.errors import MigrationError
from offline_stock.extensions import db
from offline_stock.migrations import LATEST_VERSION, STEPS, v007_list_transfers
from offline_stock.models import ShoppingList, ShoppingListItem, Transaction
from offline_stock.models.metadata import SCHEMA_VERSION_KEY
from offline_stock.services import migration_service, seed_service
from offline_stock.services.metadata_service import get_metadata, set_metadata


def _schema_shape() -> dict:
    inspector = sa.inspect(db.session.connection())
    shape = {}
    for table in sorted(inspector.get_table_names()):
        columns = [(c["name"], str(c["type"])) for c in inspector.get_columns(table)]
        indexes = sorted(ix["name"] for ix in inspector.get_indexes(table) if ix.get("name"))
        shape[table] = (columns, indexes)
    return shape


def _reset_version(value: int) -> None:
    set_metadata(SCHEMA_VERSION_KEY, str(value))
    db.session.commit()


def _legacy_baseline():
    """Tables as the first release created them, before payment tracking."""
    for statement in (
        """CREATE TABLE products (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            barcode TEXT,
            category TEXT,
            buy_price REAL DEFAULT 0,
            sell_price REAL DEFAULT 0,
            quantity INTEGER DEFAULT 0,
            min_stock INTEGER DEFAULT 5,
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )""",
        """CREATE TABLE customers (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            phone TEXT,
            notes TEXT,
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )""",
        """CREATE TABLE transactions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            date DATETIME DEFAULT CURRENT_TIMESTAMP,
            customer_id INTEGER REFERENCES customers(id),
            total_amount REAL DEFAULT 0
        )""",
    ):
        db.session.execute(sa.text(statement))
    db.session.commit()


def test_fresh_store_is_at_latest_version(app):
    assert migration_service.current_schema_version() == LATEST_VERSION
    assert get_metadata(SCHEMA_VERSION_KEY) == str(LATEST_VERSION)

    tables = set(sa.inspect(db.session.connection()).get_table_names())
    for expected in (
        "products", "customers", "transactions", "transaction_items", "payment_logs",
        "shopping_lists", "shopping_list_items", "users", "metadata",
        "shopping_list_transfers", "shopping_list_transfer_lines",
    ):
        assert expected in tables


def test_second_run_changes_nothing(app):
    before = _schema_shape()

    assert migration_service.run_migrations() == []
    assert _schema_shape() == before


def test_replaying_every_step_is_idempotent(app):
    before = _schema_shape()

    _reset_version(0)
    applied = migration_service.run_migrations()

    assert applied == [step.version for step in STEPS]
    assert _schema_shape() == before
    assert migration_service.current_schema_version() == LATEST_VERSION


def test_legacy_fully_paid_sales_are_backfilled(bare_app):
    _legacy_baseline()
    db.session.execute(sa.text("INSERT INTO transactions (id, total_amount) VALUES (1, 50.0), (2, 0)"))
    db.session.commit()

    migration_service.run_migrations()

    first = db.session.get(Transaction, 1)
    assert first.payment_status == "fully_paid"
    assert first.paid_amount == 50.0
    assert first.outstanding == 0

    empty = db.session.get(Transaction, 2)
    assert empty.paid_amount == 0


def test_legacy_item_table_is_rebuilt_under_a_default_list(bare_app):
    _legacy_baseline()
    db.session.execute(sa.text("INSERT INTO products (id, name, quantity) VALUES (1, 'Sugar', 4)"))
    db.session.execute(sa.text("""CREATE TABLE shopping_list_items (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        quantity TEXT,
        product_id INTEGER,
        is_completed INTEGER DEFAULT 0,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )"""))
    db.session.execute(sa.text("""
        INSERT INTO shopping_list_items (id, name, quantity, product_id, is_completed) VALUES
            (1, 'Flour', '2 kg', NULL, 0),
            (2, 'Salt', 'abc', NULL, 1),
            (3, 'Sugar', NULL, 1, 0),
            (7, 'Rice', '1.5', 99, 0)
    """))
    db.session.commit()

    migration_service.run_migrations()

    inspector = sa.inspect(db.session.connection())
    assert not inspector.has_table("shopping_list_items_old")
    assert "list_id" in {c["name"] for c in inspector.get_columns("shopping_list_items")}

    default_list = db.session.query(ShoppingList).filter_by(title="General Restock").one()
    assert default_list.type == "restock"

    items = {item.id: item for item in db.session.query(ShoppingListItem).all()}
    assert sorted(items) == [1, 2, 3, 7]
    assert all(item.list_id == default_list.id for item in items.values())

    assert items[1].quantity_value == 2
    assert items[1].quantity_label == "2 kg"
    assert items[1].is_completed is False

    # Unparseable text keeps a quantity of one and the original label
    assert items[2].quantity_value == 1
    assert items[2].quantity_label == "abc"
    assert items[2].is_completed is True

    assert items[3].quantity_value == 1
    assert items[3].quantity_label is None
    assert items[3].product_id == 1

    # Link to a product that no longer exists is dropped
    assert items[7].quantity_value == 1.5
    assert items[7].product_id is None


def test_seed_reuses_the_rebuilt_default_list(bare_app):
    _legacy_baseline()
    db.session.execute(sa.text("CREATE TABLE shopping_list_items (id INTEGER PRIMARY KEY, name TEXT, quantity TEXT)"))
    db.session.execute(sa.text("INSERT INTO shopping_list_items (id, name, quantity) VALUES (1, 'Milk', '3')"))
    db.session.commit()

    migration_service.run_migrations()
    seed_service.ensure_seed_data()

    assert db.session.query(ShoppingList).filter_by(title="General Restock").count() == 1
    assert db.session.query(ShoppingList).filter_by(type="monthly_restock").count() == 1


def test_interrupted_rebuild_resumes_from_the_aside_table(bare_app):
    _legacy_baseline()
    db.session.execute(sa.text("CREATE TABLE shopping_list_items_old (id INTEGER PRIMARY KEY, name TEXT, quantity TEXT)"))
    db.session.execute(sa.text("INSERT INTO shopping_list_items_old (id, name, quantity) VALUES (4, 'Oil', '2 bottles')"))
    db.session.commit()

    migration_service.run_migrations()

    assert not sa.inspect(db.session.connection()).has_table("shopping_list_items_old")
    item = db.session.get(ShoppingListItem, 4)
    assert item.name == "Oil"
    assert item.quantity_value == 2
    assert item.quantity_label == "2 bottles"


def test_item_table_with_list_id_gets_missing_columns(bare_app):
    _legacy_baseline()
    db.session.execute(sa.text("""CREATE TABLE shopping_lists (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        type TEXT DEFAULT 'restock',
        status TEXT DEFAULT 'active',
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )"""))
    db.session.execute(sa.text("""CREATE TABLE shopping_list_items (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        list_id INTEGER NOT NULL REFERENCES shopping_lists(id),
        name TEXT NOT NULL,
        quantity TEXT,
        notes TEXT,
        is_completed INTEGER DEFAULT 0,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )"""))
    db.session.execute(sa.text("INSERT INTO shopping_lists (id, title) VALUES (1, 'Weekly')"))
    db.session.execute(sa.text(
        "INSERT INTO shopping_list_items (id, list_id, name, quantity) VALUES (1, 1, 'Eggs', '12 pcs'), (2, 1, 'Bread', '')"
    ))
    db.session.commit()

    migration_service.run_migrations()

    columns = {c["name"] for c in sa.inspect(db.session.connection()).get_columns("shopping_list_items")}
    for expected in ("product_id", "quantity_value", "quantity_label", "estimated_unit_cost", "sell_price", "category"):
        assert expected in columns
    list_columns = {c["name"] for c in sa.inspect(db.session.connection()).get_columns("shopping_lists")}
    assert {"priority", "notes", "customer_id", "due_date"} <= list_columns

    eggs = db.session.get(ShoppingListItem, 1)
    assert eggs.quantity_value == 12
    assert eggs.quantity_label == "12 pcs"
    bread = db.session.get(ShoppingListItem, 2)
    assert bread.quantity_value == 1
    assert bread.quantity_label is None

    # A replay must not overwrite values already translated
    eggs.quantity_value = 6
    db.session.commit()
    _reset_version(0)
    migration_service.run_migrations()
    assert db.session.get(ShoppingListItem, 1).quantity_value == 6


def test_unreadable_version_marker_reads_as_zero(app):
    set_metadata(SCHEMA_VERSION_KEY, "not-a-number")
    db.session.commit()

    assert migration_service.current_schema_version() == 0
    assert migration_service.run_migrations() == [step.version for step in STEPS]


def test_store_from_a_newer_app_is_refused(app):
    _reset_version(LATEST_VERSION + 1)

    with pytest.raises(MigrationError) as exc_info:
        migration_service.run_migrations()

    assert exc_info.value.details["version"] == LATEST_VERSION + 1


def test_failing_step_aborts_and_keeps_previous_marker(app, monkeypatch):
    _reset_version(v007_list_transfers.version - 1)

    def boom(op, conn):
        raise RuntimeError("disk full")

    monkeypatch.setattr(v007_list_transfers, "upgrade", boom)

    with pytest.raises(MigrationError) as exc_info:
        migration_service.run_migrations()

    assert exc_info.value.details["version"] == v007_list_transfers.version
    assert "disk full" in str(exc_info.value)
    assert migration_service.current_schema_version() == v007_list_transfers.version - 1
