# backend/offline_stock/routes/customers.py
"""Customer API routes"""

from flask import Blueprint, current_app, jsonify, request

from ..errors import StockError
from ..services import customer_service, sales_service


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("/")
def list_customers_route():
    try:
        customers = customer_service.list_customers(search=request.args.get("search"))
        return jsonify({"customers": [c.to_dict() for c in customers]}), 200
    except Exception:
        current_app.logger.exception("Failed to list customers")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.post("/")
def create_customer_route():
    try:
        customer = customer_service.create_customer(request.get_json() or {})
        return jsonify({"customer": customer.to_dict()}), 201
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.put("/<int:customer_id>")
def update_customer_route(customer_id: int):
    try:
        customer = customer_service.update_customer(customer_id, request.get_json() or {})
        return jsonify({"customer": customer.to_dict()}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.delete("/<int:customer_id>")
def delete_customer_route(customer_id: int):
    """Lists and sales of the customer are kept, unassigned."""
    try:
        customer_service.delete_customer(customer_id)
        return jsonify({"deleted": True}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.get("/<int:customer_id>/summary")
def customer_summary_route(customer_id: int):
    """Total bought, paid, and still owed."""
    try:
        return jsonify(sales_service.customer_summary(customer_id)), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to build customer summary")
        return jsonify({"error": "Internal server error"}), 500
