# backend/offline_stock/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite store kept in backend/instance/offline_stock.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "STORE_DATABASE_URI", #optional alternative location, "sqlite://" for in-memory
        "sqlite:///offline_stock.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Whole-store snapshot written after every committed unit of work.
    # Required for in-memory stores, optional backup for file-backed ones.
    STORE_SNAPSHOT_PATH = os.environ.get("STORE_SNAPSHOT_PATH") or None

    # Run the schema migrator and the seed gate inside create_app()
    STORE_AUTO_MIGRATE = True

    DEFAULT_ADMIN_NICKNAME = os.environ.get("DEFAULT_ADMIN_NICKNAME", "admin")
    DEFAULT_ADMIN_PASSWORD = os.environ.get("DEFAULT_ADMIN_PASSWORD", "admin123")

    BCRYPT_ROUNDS = 12


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    STORE_SNAPSHOT_PATH = None
    # Fast hashing; the seed gate hashes the default admin password on every fresh store
    BCRYPT_ROUNDS = 4
