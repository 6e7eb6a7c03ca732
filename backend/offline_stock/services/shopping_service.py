# Overview: Shopping list and item CRUD; list completion hands off to the reconciliation engine.

from sqlalchemy import case, func

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..migrations.introspection import parse_leading_number
from ..models import (
    Customer,
    Product,
    ShoppingList,
    ShoppingListItem,
    ShoppingListTransfer,
)
from ..models.shopping import (
    LIST_PRIORITIES,
    LIST_STATUS_ACTIVE,
    LIST_STATUS_COMPLETED,
    LIST_STATUSES,
    LIST_TYPE_MONTHLY_RESTOCK,
    LIST_TYPE_RESTOCK,
    LIST_TYPES,
)
from ..store import unit_of_work
from offline_stock.time_utils import parse_iso_datetime, utcnow
from . import reconciliation_service


def _clean_text(value) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _parse_non_negative(data: dict, key: str, default=0.0) -> float:
    raw = data.get(key, default)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be a number", details={"field": key})
    if value < 0:
        raise ValidationError(f"{key} cannot be negative", details={"field": key})
    return value


def _parse_due_date(raw):
    if raw is None or raw == "":
        return None
    try:
        return parse_iso_datetime(str(raw))
    except ValueError:
        raise ValidationError("due_date must be an ISO date", details={"field": "due_date"})


def _check_choice(value, allowed, field: str):
    if value not in allowed:
        raise ValidationError(
            f"Invalid {field}",
            details={"field": field, "value": value, "allowed": list(allowed)},
        )
    return value


def _check_customer(customer_id):
    if customer_id in (None, ""):
        return None
    if db.session.get(Customer, customer_id) is None:
        raise ValidationError("Customer not found", details={"customer_id": customer_id})
    return customer_id


def _check_product(product_id) -> Product | None:
    if product_id in (None, ""):
        return None
    product = db.session.get(Product, product_id)
    if product is None:
        raise ValidationError("Product not found", details={"product_id": product_id})
    return product


# =============================================================================
# LISTS
# =============================================================================

def get_list(list_id: int) -> ShoppingList:
    shopping_list = db.session.get(ShoppingList, list_id)
    if shopping_list is None:
        raise NotFoundError("Shopping list not found", details={"list_id": list_id})
    return shopping_list


def list_lists(status: str | None = None, list_type: str | None = None) -> list[dict]:
    """
    Lists with item counts and estimated totals, newest first.

    The estimate uses the item's own unit cost and falls back to the linked
    product's buy price when the item has none.
    """
    unit_cost = case(
        (func.coalesce(ShoppingListItem.estimated_unit_cost, 0) > 0, ShoppingListItem.estimated_unit_cost),
        else_=func.coalesce(Product.buy_price, 0),
    )
    is_done = ShoppingListItem.is_completed.is_(True)

    stats = (
        db.session.query(
            ShoppingListItem.list_id.label("list_id"),
            func.count(ShoppingListItem.id).label("item_count"),
            func.sum(case((is_done, 1), else_=0)).label("completed_count"),
            func.sum(func.coalesce(ShoppingListItem.quantity_value, 0) * unit_cost).label("estimated_total"),
            func.sum(
                case((is_done, 0), else_=func.coalesce(ShoppingListItem.quantity_value, 0) * unit_cost)
            ).label("pending_total"),
        )
        .outerjoin(Product, Product.id == ShoppingListItem.product_id)
        .group_by(ShoppingListItem.list_id)
        .subquery()
    )

    query = db.session.query(ShoppingList, stats).outerjoin(stats, stats.c.list_id == ShoppingList.id)
    if status:
        query = query.filter(ShoppingList.status == status)
    if list_type:
        query = query.filter(ShoppingList.type == list_type)
    rows = query.order_by(ShoppingList.created_at.desc(), ShoppingList.id.desc()).all()

    result = []
    for row in rows:
        shopping_list = row[0]
        item_count = row.item_count or 0
        completed_count = row.completed_count or 0
        data = shopping_list.to_dict()
        data.update({
            "item_count": item_count,
            "completed_count": completed_count,
            "pending_count": item_count - completed_count,
            "estimated_total": round(row.estimated_total or 0, 2),
            "pending_total": round(row.pending_total or 0, 2),
        })
        result.append(data)
    return result


def create_list(data: dict) -> ShoppingList:
    title = _clean_text(data.get("title"))
    if not title:
        raise ValidationError("List title is required", details={"field": "title"})

    list_type = _check_choice(data.get("type") or LIST_TYPE_RESTOCK, LIST_TYPES, "type")
    if list_type == LIST_TYPE_MONTHLY_RESTOCK:
        raise ValidationError("The monthly restock list is created automatically")

    shopping_list = ShoppingList(
        title=title,
        type=list_type,
        status=_check_choice(data.get("status") or LIST_STATUS_ACTIVE, LIST_STATUSES, "status"),
        priority=_check_choice(data.get("priority") or "medium", LIST_PRIORITIES, "priority"),
        notes=_clean_text(data.get("notes")),
        customer_id=_check_customer(data.get("customer_id")),
        due_date=_parse_due_date(data.get("due_date")),
        created_at=utcnow(),
    )
    with unit_of_work():
        db.session.add(shopping_list)
    return shopping_list


def update_list(list_id: int, data: dict) -> ShoppingList:
    """Edit list fields. Status changes go through set_list_status."""
    with unit_of_work():
        shopping_list = get_list(list_id)

        if "title" in data:
            title = _clean_text(data.get("title"))
            if not title:
                raise ValidationError("List title is required", details={"field": "title"})
            shopping_list.title = title

        if "type" in data:
            list_type = _check_choice(data.get("type"), LIST_TYPES, "type")
            if (list_type == LIST_TYPE_MONTHLY_RESTOCK) != shopping_list.is_monthly_restock:
                raise ValidationError("The monthly restock list type cannot be changed")
            shopping_list.type = list_type

        if "priority" in data:
            shopping_list.priority = _check_choice(data.get("priority"), LIST_PRIORITIES, "priority")
        if "notes" in data:
            shopping_list.notes = _clean_text(data.get("notes"))
        if "customer_id" in data:
            shopping_list.customer_id = _check_customer(data.get("customer_id"))
        if "due_date" in data:
            shopping_list.due_date = _parse_due_date(data.get("due_date"))
    return shopping_list


def delete_list(list_id: int) -> None:
    """Delete a list with its items and transfer journal. The monthly list stays."""
    with unit_of_work():
        shopping_list = get_list(list_id)
        if shopping_list.is_monthly_restock:
            raise ValidationError("The monthly restock list cannot be deleted")

        for transfer in db.session.query(ShoppingListTransfer).filter_by(list_id=list_id).all():
            db.session.delete(transfer)
        db.session.delete(shopping_list)


def set_list_status(list_id: int, status: str) -> dict:
    """
    Change a list's status.

    Completing a list first transfers its pending items into the depot, in
    the same unit of work. Any status change on the monthly list is a
    monthly restock transfer; the list itself stays active.
    """
    _check_choice(status, LIST_STATUSES, "status")

    shopping_list = get_list(list_id)
    if shopping_list.is_monthly_restock:
        if status != LIST_STATUS_COMPLETED:
            return {"list": shopping_list.to_dict(), "transfer": None}
        result = reconciliation_service.transfer_monthly_restock(list_id)
        return {"list": get_list(list_id).to_dict(), "transfer": result.to_dict()}

    def _op():
        target = get_list(list_id)
        transfer = None
        if status == LIST_STATUS_COMPLETED:
            transfer = reconciliation_service._transfer_list_locked(target)
        target.status = status
        return target, transfer

    target, transfer = reconciliation_service._run("List status change", _op)
    return {
        "list": target.to_dict(),
        "transfer": transfer.to_dict() if transfer is not None else None,
    }


# =============================================================================
# ITEMS
# =============================================================================

def get_item(item_id: int) -> ShoppingListItem:
    item = db.session.get(ShoppingListItem, item_id)
    if item is None:
        raise NotFoundError("Shopping list item not found", details={"item_id": item_id})
    return item


def list_items(list_id: int) -> list[ShoppingListItem]:
    """Pending items first, then by insertion order."""
    get_list(list_id)
    return (
        db.session.query(ShoppingListItem)
        .filter(ShoppingListItem.list_id == list_id)
        .order_by(func.coalesce(ShoppingListItem.is_completed, False).asc(), ShoppingListItem.id.asc())
        .all()
    )


def _apply_quantity(item: ShoppingListItem, data: dict) -> None:
    """
    quantity_value wins when given; a free-text quantity is kept as the label
    and parsed for a value ("2 kg" -> 2, "some" -> 1).
    """
    if data.get("quantity_value") not in (None, ""):
        item.quantity_value = _parse_non_negative(data, "quantity_value")
        if "quantity_label" in data:
            item.quantity_label = _clean_text(data.get("quantity_label"))
        return

    label = _clean_text(data.get("quantity_label"))
    if label is not None:
        parsed = parse_leading_number(label)
        item.quantity_value = parsed if parsed is not None and parsed >= 0 else 1
        item.quantity_label = label
    elif "quantity_label" in data:
        item.quantity_label = None


def _apply_item_fields(item: ShoppingListItem, data: dict, product: Product | None) -> None:
    if "category" in data:
        item.category = _clean_text(data.get("category"))
    if "notes" in data:
        item.notes = _clean_text(data.get("notes"))
    if "estimated_unit_cost" in data:
        item.estimated_unit_cost = _parse_non_negative(data, "estimated_unit_cost")
    if "sell_price" in data:
        item.sell_price = _parse_non_negative(data, "sell_price")

    if product is not None:
        # Unset fields are filled from the linked product
        if item.category is None:
            item.category = product.category
        if not item.estimated_unit_cost:
            item.estimated_unit_cost = product.buy_price or 0
        if not item.sell_price:
            item.sell_price = product.sell_price or 0


def add_item(list_id: int, data: dict) -> ShoppingListItem:
    with unit_of_work():
        shopping_list = get_list(list_id)
        product = _check_product(data.get("product_id"))

        name = _clean_text(data.get("name")) or (product.name if product is not None else None)
        if not name:
            raise ValidationError("Item name is required", details={"field": "name"})

        item = ShoppingListItem(
            list_id=shopping_list.id,
            product_id=product.id if product is not None else None,
            name=name,
            quantity_value=1,
            estimated_unit_cost=0,
            sell_price=0,
            is_completed=False,
            created_at=utcnow(),
        )
        _apply_quantity(item, data)
        _apply_item_fields(item, data, product)
        db.session.add(item)
    return item


def update_item(item_id: int, data: dict) -> ShoppingListItem:
    with unit_of_work():
        item = get_item(item_id)

        product = None
        if "product_id" in data:
            product = _check_product(data.get("product_id"))
            item.product_id = product.id if product is not None else None

        if "name" in data:
            name = _clean_text(data.get("name"))
            if not name:
                raise ValidationError("Item name is required", details={"field": "name"})
            item.name = name

        if "quantity_value" in data or "quantity_label" in data:
            _apply_quantity(item, data)
        _apply_item_fields(item, data, product)

        if "is_completed" in data:
            item.is_completed = bool(data.get("is_completed"))
    return item


def toggle_item(item_id: int, is_completed: bool | None = None) -> ShoppingListItem:
    """
    Flip (or set) an item's completed flag.

    Only the flag moves; stock is touched by list transfers alone.
    """
    with unit_of_work():
        item = get_item(item_id)
        if is_completed is None:
            is_completed = not bool(item.is_completed)
        item.is_completed = bool(is_completed)
    return item


def delete_item(item_id: int) -> None:
    with unit_of_work():
        item = get_item(item_id)
        db.session.delete(item)
