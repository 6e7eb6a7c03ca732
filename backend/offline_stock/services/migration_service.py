# Overview: Schema migrator; applies the ordered, versioned steps above the stored schema_version.

"""
Schema migrator.

The stored integer `schema_version` selects which steps still have to run.
A store created by an app version that predates the marker reads as version
0 and gets every step; the steps introspect before changing anything, so
that is safe on any historical shape.

Each step commits together with its marker. DDL on SQLite is not rolled
back with the session, so a crash mid-step leaves the marker behind and the
step simply runs again on the next start.
"""

from alembic.migration import MigrationContext
from alembic.operations import Operations
from flask import current_app

from ..errors import MigrationError
from ..extensions import db
from ..migrations import LATEST_VERSION, STEPS
from ..models.metadata import SCHEMA_VERSION_KEY
from .metadata_service import ensure_metadata_table, get_metadata, set_metadata
from . import snapshot_service


def current_schema_version() -> int:
    ensure_metadata_table()
    raw = get_metadata(SCHEMA_VERSION_KEY)
    try:
        return int(raw)
    except (TypeError, ValueError):
        return 0


def latest_version() -> int:
    return LATEST_VERSION


def pending_steps() -> list:
    current = current_schema_version()
    return [step for step in STEPS if step.version > current]


def run_migrations() -> list[int]:
    """
    Bring the store to the latest schema.

    Returns the versions applied by this call (empty when already current).
    Raises MigrationError on any failure; startup must not continue.
    """
    try:
        current = current_schema_version()
        db.session.commit()
    except Exception as exc:
        db.session.rollback()
        raise MigrationError(
            f"Cannot read schema version: {exc}",
            details={"version": None},
        ) from exc

    if current > LATEST_VERSION:
        raise MigrationError(
            f"Store schema version {current} is newer than this app supports ({LATEST_VERSION})",
            details={"version": current, "latest": LATEST_VERSION},
        )

    applied = []
    for step in STEPS:
        if step.version <= current:
            continue

        try:
            conn = db.session.connection()
            op = Operations(MigrationContext.configure(conn))
            step.upgrade(op, conn)
            set_metadata(SCHEMA_VERSION_KEY, str(step.version))
            db.session.commit()
        except Exception as exc:
            db.session.rollback()
            raise MigrationError(
                f"Migration {step.version} ({step.description}) failed: {exc}",
                details={"version": step.version},
            ) from exc

        current_app.logger.info("Applied schema step %s: %s", step.version, step.description)
        applied.append(step.version)

    if applied:
        snapshot_service.save_snapshot()
    return applied
