"""
Seed gate: baseline rows exist exactly once, however many times the store opens.
"""

from offline_stock import create_app
from offline_stock.config import TestingConfig
from offline_stock.extensions import db
from offline_stock.models import ShoppingList, StoreMetadata, User
from offline_stock.models.metadata import SEED_VERSION_KEY
from offline_stock.services import auth_service, seed_service
from offline_stock.services.metadata_service import get_metadata


def _counts():
    return (
        db.session.query(User).filter(User.nickname == "admin").count(),
        db.session.query(ShoppingList).filter_by(type="monthly_restock").count(),
        db.session.query(ShoppingList).filter_by(type="restock").count(),
    )


def test_fresh_store_is_seeded(app):
    assert get_metadata(SEED_VERSION_KEY) == seed_service.SEED_VERSION
    assert _counts() == (1, 1, 1)

    restock = db.session.query(ShoppingList).filter_by(type="restock").one()
    assert restock.title == "General Restock"
    monthly = db.session.query(ShoppingList).filter_by(type="monthly_restock").one()
    assert monthly.title == "Monthly restock"


def test_gate_is_closed_once_marker_matches(app):
    assert seed_service.ensure_seed_data() is False
    assert _counts() == (1, 1, 1)


def test_crash_before_marker_write_is_safe_to_rerun(app):
    db.session.query(StoreMetadata).filter_by(key=SEED_VERSION_KEY).delete()
    db.session.commit()

    assert seed_service.ensure_seed_data() is True
    assert _counts() == (1, 1, 1)
    assert get_metadata(SEED_VERSION_KEY) == seed_service.SEED_VERSION


def test_existing_admin_is_matched_case_insensitively(app):
    user = db.session.query(User).one()
    user.nickname = "Admin"
    db.session.query(StoreMetadata).filter_by(key=SEED_VERSION_KEY).delete()
    db.session.commit()

    seed_service.ensure_seed_data()

    assert db.session.query(User).count() == 1


def test_default_admin_can_log_in(app):
    assert auth_service.authenticate("admin", "admin123") is not None
    assert auth_service.authenticate("ADMIN", "admin123") is not None
    assert auth_service.authenticate("admin", "wrong-password") is None
    assert auth_service.authenticate("nobody", "admin123") is None


def test_repeated_startups_seed_exactly_once(tmp_path):
    class FileStoreConfig(TestingConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'store.sqlite3'}"

    for _ in range(3):
        app = create_app(FileStoreConfig)

    with app.app_context():
        assert _counts() == (1, 1, 1)
        db.session.remove()
