# Overview: Snapshot persister; copies the whole store to durable storage after each unit of work.

"""
Whole-store snapshots.

Used as the durability layer of the in-memory backend: the snapshot file is
loaded when the store opens and rewritten after every committed unit of
work. A crash between a commit and its snapshot loses that unit of work
entirely; there is no partial durability.

For file-backed stores SQLite is already durable. A configured snapshot path
then acts as a rolling backup and is never loaded back.
"""

import os
import sqlite3

from flask import current_app

from ..extensions import db


def _snapshot_path() -> str | None:
    return current_app.config.get("STORE_SNAPSHOT_PATH")


def _driver_connection() -> sqlite3.Connection:
    return db.session.connection().connection.driver_connection


def load_snapshot() -> bool:
    """
    Restore the snapshot into an in-memory store.

    Returns True when a snapshot was loaded.
    """
    from ..store import is_in_memory

    path = _snapshot_path()
    if not path or not is_in_memory() or not os.path.exists(path):
        return False

    source = sqlite3.connect(path)
    try:
        source.backup(_driver_connection())
    finally:
        source.close()
    db.session.commit()

    current_app.logger.info("Restored store snapshot from %s", path)
    return True


def save_snapshot(force: bool = False) -> bool:
    """
    Write the whole store to the configured snapshot path.

    Written to a sibling temp file first and swapped in with os.replace, so a
    crash mid-write leaves the previous snapshot intact.
    """
    path = _snapshot_path()
    if not path:
        if force:
            raise ValueError("STORE_SNAPSHOT_PATH is not configured")
        return False

    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    tmp_path = f"{path}.tmp"

    target = sqlite3.connect(tmp_path)
    try:
        _driver_connection().backup(target)
    finally:
        target.close()
    os.replace(tmp_path, path)

    current_app.logger.debug("Wrote store snapshot to %s", path)
    return True
