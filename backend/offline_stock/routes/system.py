# backend/offline_stock/routes/system.py
"""
System health and store status endpoints.
"""

import time

from flask import Blueprint, current_app, jsonify

from ..extensions import db
from ..models import Product, ShoppingList
from ..models.metadata import SEED_VERSION_KEY
from ..services import migration_service
from ..services.metadata_service import get_metadata
from ..store import describe_store
from offline_stock.time_utils import utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api/system")


def check_store_health() -> dict:
    """Round-trip a couple of cheap queries against the store."""
    start_time = time.time()
    try:
        product_count = db.session.query(Product).count()
        list_count = db.session.query(ShoppingList).count()
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "products": product_count,
                "shopping_lists": list_count,
            },
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Store health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Store error",
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: store reachable
    - 503: store queries fail
    """
    store_health = check_store_health()
    http_status = 200 if store_health["status"] == "healthy" else 503
    return jsonify({
        "status": store_health["status"],
        "timestamp": utcnow().isoformat() + "Z",
        "checks": {"store": store_health},
    }), http_status


@system_bp.get("/store")
def store_status():
    """Backend, schema version and seed marker."""
    try:
        data = describe_store()
        data.update({
            "schema_version": migration_service.current_schema_version(),
            "latest_schema_version": migration_service.latest_version(),
            "seed_version": get_metadata(SEED_VERSION_KEY),
        })
        return jsonify(data), 200
    except Exception:
        current_app.logger.exception("Failed to read store status")
        return jsonify({"error": "Internal server error"}), 500
