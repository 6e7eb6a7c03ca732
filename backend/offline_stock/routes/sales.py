# backend/offline_stock/routes/sales.py
"""Sales and payment API routes"""

from flask import Blueprint, current_app, jsonify, request

from ..errors import StockError
from ..services import payment_service, sales_service


sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("/")
def complete_sale_route():
    """
    Complete a sale.

    Body:
    {
        "customer_id": int | null,
        "payment_status": "fully_paid" | "debt",
        "items": [{"product_id": int, "quantity": int, "unit_price": float?}]
    }
    """
    try:
        data = request.get_json() or {}
        transaction = sales_service.complete_sale(
            data.get("customer_id"),
            data.get("payment_status"),
            data.get("items") or [],
        )
        return jsonify({"transaction": transaction.to_dict(include_items=True)}), 201
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to complete sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/")
def list_sales_route():
    """Query: customer_id, only_debt=true, limit."""
    try:
        transactions = sales_service.list_transactions(
            customer_id=request.args.get("customer_id", type=int),
            only_debt=request.args.get("only_debt", "").lower() in ("1", "true", "yes"),
            limit=request.args.get("limit", type=int),
        )
        return jsonify({"transactions": [t.to_dict(include_items=True) for t in transactions]}), 200
    except Exception:
        current_app.logger.exception("Failed to list sales")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/summary")
def sales_summary_route():
    try:
        return jsonify(sales_service.sales_summary()), 200
    except Exception:
        current_app.logger.exception("Failed to build sales summary")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/<int:transaction_id>")
def get_sale_route(transaction_id: int):
    try:
        transaction = sales_service.get_transaction(transaction_id)
        data = transaction.to_dict(include_items=True)
        data["payments"] = [log.to_dict() for log in payment_service.list_payment_logs(transaction_id)]
        return jsonify({"transaction": data}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to get sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.post("/<int:transaction_id>/payments")
def log_payment_route(transaction_id: int):
    """Body: {"amount": float, "note": str?}"""
    try:
        data = request.get_json() or {}
        if data.get("amount") is None:
            return jsonify({"error": "amount required"}), 400
        log = payment_service.log_payment(transaction_id, data["amount"], data.get("note"))
        transaction = sales_service.get_transaction(transaction_id)
        return jsonify({
            "payment": log.to_dict(),
            "transaction": transaction.to_dict(),
        }), 201
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to log payment")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/payments")
def list_payments_route():
    try:
        logs = payment_service.list_payment_logs(request.args.get("transaction_id", type=int))
        return jsonify({"payments": [log.to_dict() for log in logs]}), 200
    except Exception:
        current_app.logger.exception("Failed to list payments")
        return jsonify({"error": "Internal server error"}), 500
