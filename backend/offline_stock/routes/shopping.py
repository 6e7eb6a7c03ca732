# backend/offline_stock/routes/shopping.py
"""
Shopping list API routes.

Lists, their items, list-to-depot transfers (and rollback of the latest
one), and the monthly restock list.
"""

from flask import Blueprint, current_app, jsonify, request

from ..errors import StockError
from ..services import reconciliation_service, shopping_service


shopping_bp = Blueprint("shopping", __name__, url_prefix="/api/shopping-lists")


def _list_payload(list_id: int) -> dict:
    shopping_list = shopping_service.get_list(list_id)
    data = shopping_list.to_dict()
    data["items"] = [item.to_dict() for item in shopping_service.list_items(list_id)]
    data["can_rollback"] = reconciliation_service.has_revertible_transfer(list_id)
    return data


# =============================================================================
# LISTS
# =============================================================================

@shopping_bp.get("/")
def list_lists_route():
    """Query: status, type."""
    try:
        # The monthly list must always be there for the lists screen
        reconciliation_service.ensure_monthly_restock_list()
        lists = shopping_service.list_lists(
            status=request.args.get("status"),
            list_type=request.args.get("type"),
        )
        return jsonify({"lists": lists}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to list shopping lists")
        return jsonify({"error": "Internal server error"}), 500


@shopping_bp.post("/")
def create_list_route():
    try:
        shopping_list = shopping_service.create_list(request.get_json() or {})
        return jsonify({"list": shopping_list.to_dict()}), 201
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create shopping list")
        return jsonify({"error": "Internal server error"}), 500


@shopping_bp.get("/<int:list_id>")
def get_list_route(list_id: int):
    try:
        return jsonify({"list": _list_payload(list_id)}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to get shopping list")
        return jsonify({"error": "Internal server error"}), 500


@shopping_bp.put("/<int:list_id>")
def update_list_route(list_id: int):
    try:
        shopping_list = shopping_service.update_list(list_id, request.get_json() or {})
        return jsonify({"list": shopping_list.to_dict()}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update shopping list")
        return jsonify({"error": "Internal server error"}), 500


@shopping_bp.delete("/<int:list_id>")
def delete_list_route(list_id: int):
    try:
        shopping_service.delete_list(list_id)
        return jsonify({"deleted": True}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete shopping list")
        return jsonify({"error": "Internal server error"}), 500


@shopping_bp.post("/<int:list_id>/status")
def set_status_route(list_id: int):
    """
    Body: {"status": "active" | "completed" | "archived"}

    Completing a list transfers its pending items into the depot.
    """
    try:
        data = request.get_json() or {}
        if not data.get("status"):
            return jsonify({"error": "status required"}), 400
        result = shopping_service.set_list_status(list_id, data["status"])
        return jsonify(result), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to change shopping list status")
        return jsonify({"error": "Internal server error"}), 500


@shopping_bp.post("/<int:list_id>/transfer")
def transfer_list_route(list_id: int):
    try:
        result = reconciliation_service.transfer_list_to_depot(list_id)
        return jsonify({"transfer": result.to_dict()}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to transfer shopping list")
        return jsonify({"error": "Internal server error"}), 500


@shopping_bp.get("/<int:list_id>/rollback")
def rollback_available_route(list_id: int):
    try:
        shopping_service.get_list(list_id)
        return jsonify({"available": reconciliation_service.has_revertible_transfer(list_id)}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to check transfer rollback")
        return jsonify({"error": "Internal server error"}), 500


@shopping_bp.post("/<int:list_id>/rollback")
def rollback_transfer_route(list_id: int):
    """Undo the latest transfer of the list."""
    try:
        result = reconciliation_service.rollback_latest_transfer(list_id)
        return jsonify({"rollback": result}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to roll back transfer")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# MONTHLY RESTOCK
# =============================================================================

@shopping_bp.get("/monthly-restock")
def monthly_restock_route():
    try:
        list_id = reconciliation_service.ensure_monthly_restock_list()
        return jsonify({"list": _list_payload(list_id)}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to load monthly restock list")
        return jsonify({"error": "Internal server error"}), 500


@shopping_bp.post("/monthly-restock/transfer")
def monthly_restock_transfer_route():
    """Transfer the monthly list into the depot and reset it."""
    try:
        result = reconciliation_service.transfer_monthly_restock()
        return jsonify({"transfer": result.to_dict()}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to transfer monthly restock list")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# ITEMS
# =============================================================================

@shopping_bp.get("/<int:list_id>/items")
def list_items_route(list_id: int):
    try:
        items = shopping_service.list_items(list_id)
        return jsonify({"items": [item.to_dict() for item in items]}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to list shopping list items")
        return jsonify({"error": "Internal server error"}), 500


@shopping_bp.post("/<int:list_id>/items")
def add_item_route(list_id: int):
    try:
        item = shopping_service.add_item(list_id, request.get_json() or {})
        return jsonify({"item": item.to_dict()}), 201
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to add shopping list item")
        return jsonify({"error": "Internal server error"}), 500


@shopping_bp.put("/items/<int:item_id>")
def update_item_route(item_id: int):
    try:
        item = shopping_service.update_item(item_id, request.get_json() or {})
        return jsonify({"item": item.to_dict()}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update shopping list item")
        return jsonify({"error": "Internal server error"}), 500


@shopping_bp.post("/items/<int:item_id>/toggle")
def toggle_item_route(item_id: int):
    """Body (optional): {"is_completed": bool}; without it the flag flips."""
    try:
        data = request.get_json(silent=True) or {}
        item = shopping_service.toggle_item(item_id, data.get("is_completed"))
        return jsonify({"item": item.to_dict()}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to toggle shopping list item")
        return jsonify({"error": "Internal server error"}), 500


@shopping_bp.delete("/items/<int:item_id>")
def delete_item_route(item_id: int):
    try:
        shopping_service.delete_item(item_id)
        return jsonify({"deleted": True}), 200
    except StockError as e:
        return jsonify({"error": str(e), "details": e.details}), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete shopping list item")
        return jsonify({"error": "Internal server error"}), 500
