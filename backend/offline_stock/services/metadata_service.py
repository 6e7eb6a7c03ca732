# Overview: Read/write access to the metadata key/value markers.

from sqlalchemy import text

from ..extensions import db
from ..models import StoreMetadata


def ensure_metadata_table() -> None:
    """The marker table predates every versioned step, so it is created outside them."""
    db.session.execute(text(
        "CREATE TABLE IF NOT EXISTS metadata (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
    ))


def get_metadata(key: str) -> str | None:
    row = db.session.get(StoreMetadata, key)
    return row.value if row is not None else None


def set_metadata(key: str, value: str) -> None:
    """Upsert a marker. Caller commits."""
    row = db.session.get(StoreMetadata, key)
    if row is None:
        db.session.add(StoreMetadata(key=key, value=value))
    else:
        row.value = value
    db.session.flush()
