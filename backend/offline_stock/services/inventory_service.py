# Overview: Depot product operations; the products table is the source of truth for on-hand quantity.

"""
Depot products.

Direct edits go through here. Sale completion decrements stock in
sales_service, transfers increment or create products in
reconciliation_service; both inside their own unit of work.
"""

from sqlalchemy import or_

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import Product, ShoppingListItem, TransactionItem
from ..store import unit_of_work
from offline_stock.time_utils import utcnow


# =============================================================================
# VALIDATION
# =============================================================================

def _clean_text(value) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _parse_price(data: dict, key: str, default=0.0) -> float:
    raw = data.get(key, default)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be a number", details={"field": key})
    if value < 0:
        raise ValidationError(f"{key} cannot be negative", details={"field": key})
    return round(value, 2)


def _parse_count(data: dict, key: str, default: int = 0) -> int:
    raw = data.get(key, default)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be a whole number", details={"field": key})
    if value < 0:
        raise ValidationError(f"{key} cannot be negative", details={"field": key})
    return value


def _apply_fields(product: Product, data: dict, *, partial: bool) -> None:
    if not partial or "name" in data:
        name = _clean_text(data.get("name"))
        if not name:
            raise ValidationError("Product name is required", details={"field": "name"})
        product.name = name

    for key in ("barcode", "category"):
        if not partial or key in data:
            setattr(product, key, _clean_text(data.get(key)))

    for key in ("buy_price", "sell_price"):
        if not partial or key in data:
            setattr(product, key, _parse_price(data, key))

    if not partial or "quantity" in data:
        product.quantity = _parse_count(data, "quantity", 0)
    if not partial or "min_stock" in data:
        product.min_stock = _parse_count(data, "min_stock", 5)


# =============================================================================
# READS
# =============================================================================

def get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found", details={"product_id": product_id})
    return product


def list_products(search: str | None = None, category: str | None = None) -> list[Product]:
    """Products ordered by name; search matches name or barcode."""
    query = db.session.query(Product)
    search = _clean_text(search)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Product.name.ilike(pattern), Product.barcode.ilike(pattern)))
    category = _clean_text(category)
    if category:
        query = query.filter(Product.category == category)
    return query.order_by(Product.name.asc(), Product.id.asc()).all()


def list_categories() -> list[str]:
    rows = (
        db.session.query(Product.category)
        .filter(Product.category.isnot(None), Product.category != "")
        .distinct()
        .order_by(Product.category.asc())
        .all()
    )
    return [row[0] for row in rows]


def low_stock_products() -> list[Product]:
    return (
        db.session.query(Product)
        .filter(Product.quantity <= Product.min_stock)
        .order_by(Product.quantity.asc(), Product.name.asc())
        .all()
    )


# =============================================================================
# WRITES
# =============================================================================

def create_product(data: dict) -> Product:
    product = Product(created_at=utcnow())
    _apply_fields(product, data, partial=False)
    with unit_of_work():
        db.session.add(product)
    return product


def update_product(product_id: int, data: dict) -> Product:
    with unit_of_work():
        product = get_product(product_id)
        _apply_fields(product, data, partial=True)
    return product


def adjust_product_quantity(product_id: int, delta: int) -> Product:
    """Manual stock correction; never takes the quantity below zero."""
    try:
        delta = int(delta)
    except (TypeError, ValueError):
        raise ValidationError("delta must be a whole number", details={"field": "delta"})

    with unit_of_work():
        product = get_product(product_id)
        product.quantity = max((product.quantity or 0) + delta, 0)
    return product


def delete_product(product_id: int) -> None:
    """
    Delete a product that was never sold.

    Shopping-list items keep their row and lose the link (they become
    free-text items again).
    """
    with unit_of_work():
        product = get_product(product_id)
        sold = (
            db.session.query(TransactionItem.id)
            .filter(TransactionItem.product_id == product_id)
            .first()
        )
        if sold is not None:
            raise ValidationError(
                "Product has sales history and cannot be deleted",
                details={"product_id": product_id},
            )

        (
            db.session.query(ShoppingListItem)
            .filter(ShoppingListItem.product_id == product_id)
            .update({ShoppingListItem.product_id: None}, synchronize_session="fetch")
        )
        db.session.delete(product)
