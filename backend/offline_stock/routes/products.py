# backend/offline_stock/routes/products.py
"""Depot product API routes"""

from flask import Blueprint, current_app, jsonify, request

from ..errors import StockError
from ..services import inventory_service


products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("/")
def list_products_route():
    try:
        products = inventory_service.list_products(
            search=request.args.get("search"),
            category=request.args.get("category"),
        )
        return jsonify({"products": [p.to_dict() for p in products]}), 200
    except Exception:
        current_app.logger.exception("Failed to list products")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/categories")
def list_categories_route():
    try:
        return jsonify({"categories": inventory_service.list_categories()}), 200
    except Exception:
        current_app.logger.exception("Failed to list categories")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/low-stock")
def low_stock_route():
    """Products at or below their minimum stock."""
    try:
        products = inventory_service.low_stock_products()
        return jsonify({"products": [p.to_dict() for p in products]}), 200
    except Exception:
        current_app.logger.exception("Failed to list low stock products")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.post("/")
def create_product_route():
    try:
        product = inventory_service.create_product(request.get_json() or {})
        return jsonify({"product": product.to_dict()}), 201
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    try:
        product = inventory_service.get_product(product_id)
        return jsonify({"product": product.to_dict()}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to get product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.put("/<int:product_id>")
def update_product_route(product_id: int):
    try:
        product = inventory_service.update_product(product_id, request.get_json() or {})
        return jsonify({"product": product.to_dict()}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.post("/<int:product_id>/adjust")
def adjust_product_route(product_id: int):
    """
    Manual stock correction.

    Body: {"delta": int}. The result is clamped at zero.
    """
    try:
        data = request.get_json() or {}
        if "delta" not in data:
            return jsonify({"error": "delta required"}), 400
        product = inventory_service.adjust_product_quantity(product_id, data["delta"])
        return jsonify({"product": product.to_dict()}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to adjust product quantity")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.delete("/<int:product_id>")
def delete_product_route(product_id: int):
    try:
        inventory_service.delete_product(product_id)
        return jsonify({"deleted": True}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return jsonify({"error": "Internal server error"}), 500
