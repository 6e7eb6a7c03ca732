# Overview: Seed / version gate; inserts baseline rows once per store lifetime.

"""
Baseline reference data.

Runs on every start but only does work when the stored seed_version differs
from SEED_VERSION. Every insert is guarded by an existence check on its
natural key (nickname, list type), so a crash before the marker is written
just means the next start re-checks and inserts nothing twice.
"""

from flask import current_app

from ..extensions import db
from ..models import ShoppingList
from ..models.metadata import SEED_VERSION_KEY
from ..models.shopping import LIST_STATUS_ACTIVE, LIST_TYPE_MONTHLY_RESTOCK, LIST_TYPE_RESTOCK
from ..store import unit_of_work
from offline_stock.time_utils import utcnow
from . import auth_service, reconciliation_service
from .metadata_service import get_metadata, set_metadata


SEED_VERSION = "baseline-v2"

DEFAULT_RESTOCK_TITLE = "General Restock"
DEFAULT_RESTOCK_NOTES = "Quick list to capture items you are low on"


def _ensure_admin() -> bool:
    nickname = current_app.config.get("DEFAULT_ADMIN_NICKNAME", "admin")
    if auth_service.find_user(nickname) is not None:
        return False
    auth_service.create_user(nickname, current_app.config["DEFAULT_ADMIN_PASSWORD"])
    current_app.logger.info("Seeded default user %s", nickname)
    return True


def _ensure_monthly_restock() -> bool:
    before = db.session.query(ShoppingList.id).filter(ShoppingList.type == LIST_TYPE_MONTHLY_RESTOCK).first()
    if before is not None:
        return False
    monthly = reconciliation_service._ensure_monthly_locked()
    current_app.logger.info("Seeded monthly restock list %s", monthly.id)
    return True


def _ensure_default_restock_list() -> bool:
    existing = db.session.query(ShoppingList.id).filter(ShoppingList.type == LIST_TYPE_RESTOCK).first()
    if existing is not None:
        return False
    shopping_list = ShoppingList(
        title=DEFAULT_RESTOCK_TITLE,
        type=LIST_TYPE_RESTOCK,
        status=LIST_STATUS_ACTIVE,
        priority="medium",
        notes=DEFAULT_RESTOCK_NOTES,
        created_at=utcnow(),
    )
    db.session.add(shopping_list)
    db.session.flush()
    current_app.logger.info("Seeded default restock list %s", shopping_list.id)
    return True


def ensure_seed_data() -> bool:
    """
    Insert any missing baseline rows and stamp the seed marker.

    Returns True when anything was written.
    """
    if get_metadata(SEED_VERSION_KEY) == SEED_VERSION:
        return False

    with unit_of_work():
        _ensure_admin()
        _ensure_monthly_restock()
        _ensure_default_restock_list()
        set_metadata(SEED_VERSION_KEY, SEED_VERSION)

    current_app.logger.info("Seed data at %s", SEED_VERSION)
    return True
