from __future__ import annotations

from ..extensions import db


SCHEMA_VERSION_KEY = "schema_version"
SEED_VERSION_KEY = "seed_version"


class StoreMetadata(db.Model):
    """Key/value markers driving the schema migrator and the seed gate. Never exposed to UI."""
    __tablename__ = "metadata"

    key = db.Column(db.Text, primary_key=True)
    value = db.Column(db.Text, nullable=False)
