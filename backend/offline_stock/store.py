# Overview: Persistent store handle; opens the embedded SQLite store and brackets units of work.

"""
Store handle for the embedded SQLite database.

The core only needs three primitives from the backend: execute a statement,
run a query returning rows, and begin/commit/rollback. Everything else talks
to the Flask-SQLAlchemy session directly.

Single writer: the host runtime never interleaves two mutations, so there is
no locking here.
"""

from contextlib import contextmanager

from flask import current_app
from sqlalchemy import event, text

from .extensions import db


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys = ON")
    finally:
        cursor.close()


def is_in_memory() -> bool:
    url = db.engine.url
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def init_store(app) -> None:
    """
    Open the store for this app: enable SQLite foreign keys on every new
    connection and restore the last snapshot into an in-memory store.

    Must run inside an application context, before the first query.
    """
    if db.engine.dialect.name == "sqlite":
        event.listen(db.engine, "connect", _enable_foreign_keys)

    from .services import snapshot_service
    snapshot_service.load_snapshot()


def execute(sql: str, params: dict | None = None):
    """Execute a single statement inside the current session transaction."""
    return db.session.execute(text(sql), params or {})


def query(sql: str, params: dict | None = None) -> list[dict]:
    """Run a query and return its rows as plain dicts."""
    result = db.session.execute(text(sql), params or {})
    return [dict(row) for row in result.mappings().all()]


@contextmanager
def unit_of_work():
    """
    One logical operation: commit on success, roll back and re-raise on any
    exception. After a successful commit the snapshot persister runs; a
    snapshot write failure is logged, not raised.

    Nesting is not supported; services expose *_locked helpers that assume an
    enclosing unit of work instead.
    """
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    from .services import snapshot_service
    try:
        snapshot_service.save_snapshot()
    except OSError:
        # The work is committed; the next successful snapshot catches up
        current_app.logger.exception("Store snapshot failed after commit")


def describe_store() -> dict:
    """Backend details for the status endpoint and CLI."""
    return {
        "backend": db.engine.dialect.name,
        "database": db.engine.url.database or ":memory:",
        "in_memory": is_in_memory(),
        "snapshot_path": current_app.config.get("STORE_SNAPSHOT_PATH"),
    }
