# Overview: Shopping-list reconciliation; moves list quantities into depot stock and keeps the monthly restock list.

"""
Shopping-list reconciliation engine.

A transfer turns the pending items of a list into a stock intake: linked
items increment their product, unlinked items create a product and get
linked to it. Only pending items are touched, so a second transfer of the
same list is a no-op.

The monthly restock list is a singleton fed by completed sales. Transferring
it restocks what was sold, then zeroes the accumulator while keeping its item
rows (and their product links) for the next period.

Every public operation runs in one unit of work: a failure on any row rolls
the whole call back and surfaces as ReconciliationError, so re-running it is
always safe. The *_locked helpers assume the caller already opened the unit
of work (sale completion, list status changes, seeding).

Each transfer is journaled so the latest one of a list can be rolled back.
"""

from dataclasses import dataclass

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from ..errors import NotFoundError, ReconciliationError, StockError, ValidationError
from ..extensions import db
from ..migrations.introspection import parse_leading_number
from ..models import (
    Product,
    ShoppingList,
    ShoppingListItem,
    ShoppingListTransfer,
    ShoppingListTransferLine,
    TransactionItem,
)
from ..models.shopping import (
    LIST_STATUS_ACTIVE,
    LIST_TYPE_CUSTOMER_ORDER,
    LIST_TYPE_MONTHLY_RESTOCK,
)
from ..store import unit_of_work
from offline_stock.time_utils import utcnow


MONTHLY_RESTOCK_TITLE = "Monthly restock"
CUSTOMER_ORDER_CATEGORY = "Customer Order"
SHOPPING_LIST_CATEGORY = "Shopping List"


@dataclass
class TransferResult:
    updated_products: int = 0
    total_quantity: float = 0
    transfer_id: int | None = None
    reset_items: int = 0

    def to_dict(self) -> dict:
        return {
            "updated_products": self.updated_products,
            "total_quantity": _stock_amount(self.total_quantity),
            "transfer_id": self.transfer_id,
            "reset_items": self.reset_items,
        }


def _stock_amount(value):
    """Whole quantities stay ints; fractional ones pass through."""
    value = value or 0
    if float(value).is_integer():
        return int(value)
    return value


def _item_quantity(item: ShoppingListItem):
    """quantity_value when positive, else the numeric part of the label, else 0."""
    value = item.quantity_value or 0
    if value > 0:
        return value
    parsed = parse_leading_number(item.quantity_label)
    if parsed is not None and parsed > 0:
        return parsed
    return 0


def _pending_filter():
    return or_(ShoppingListItem.is_completed.is_(False), ShoppingListItem.is_completed.is_(None))


def _fallback_category(shopping_list: ShoppingList) -> str:
    title = (shopping_list.title or "").strip()
    if title:
        return title
    if shopping_list.type == LIST_TYPE_CUSTOMER_ORDER:
        return CUSTOMER_ORDER_CATEGORY
    return SHOPPING_LIST_CATEGORY


def _get_list(list_id: int) -> ShoppingList:
    shopping_list = db.session.get(ShoppingList, list_id)
    if shopping_list is None:
        raise NotFoundError("Shopping list not found", details={"list_id": list_id})
    return shopping_list


def _run(operation, func, *args, **kwargs):
    """Run func in one unit of work; row failures become ReconciliationError."""
    try:
        with unit_of_work():
            return func(*args, **kwargs)
    except StockError:
        raise
    except SQLAlchemyError as exc:
        raise ReconciliationError(
            f"{operation} failed and was rolled back: {exc}",
            details={"operation": operation},
        ) from exc


# ---------------------------------------------------------------------------
# Transfer
# ---------------------------------------------------------------------------

def _create_product_for_item(item: ShoppingListItem, quantity, fallback_category: str) -> Product:
    cost = item.estimated_unit_cost or 0
    sell = item.sell_price or 0
    category = (item.category or "").strip() or fallback_category

    product = Product(
        name=item.name,
        buy_price=cost if cost > 0 else 0,
        sell_price=sell if sell > 0 else (cost if cost > 0 else 0),
        quantity=_stock_amount(quantity),
        min_stock=0,
        category=category,
        barcode=None,
    )
    db.session.add(product)
    db.session.flush()
    return product


def _transfer_list_locked(shopping_list: ShoppingList) -> TransferResult:
    result = TransferResult()
    pending = (
        db.session.query(ShoppingListItem)
        .filter(ShoppingListItem.list_id == shopping_list.id)
        .filter(_pending_filter())
        .order_by(ShoppingListItem.id.asc())
        .all()
    )
    if not pending:
        return result

    transfer = ShoppingListTransfer(list_id=shopping_list.id, created_at=utcnow())
    db.session.add(transfer)
    db.session.flush()
    result.transfer_id = transfer.id

    fallback_category = _fallback_category(shopping_list)

    for item in pending:
        quantity = _item_quantity(item)
        line = ShoppingListTransferLine(
            transfer_id=transfer.id,
            item_id=item.id,
            product_id=item.product_id,
            quantity=0,
            created_product=False,
            previous_quantity_value=item.quantity_value,
        )
        db.session.add(line)

        if quantity > 0:
            product = db.session.get(Product, item.product_id) if item.product_id is not None else None
            if product is not None:
                product.quantity = _stock_amount((product.quantity or 0) + quantity)
            else:
                # Free-text item, or its product was deleted since it was linked
                product = _create_product_for_item(item, quantity, fallback_category)
                item.product_id = product.id
                line.created_product = True

            line.product_id = product.id
            line.quantity = quantity
            result.updated_products += 1
            result.total_quantity += quantity

        item.is_completed = True

    db.session.flush()
    return result


def transfer_list_to_depot(list_id: int) -> TransferResult:
    """
    Move every pending item of a list into depot stock and mark it completed.

    Zero-quantity items are completed without touching stock.
    """
    def _op():
        return _transfer_list_locked(_get_list(list_id))
    return _run("Transfer to depot", _op)


# ---------------------------------------------------------------------------
# Monthly restock list
# ---------------------------------------------------------------------------

def _ensure_monthly_locked() -> ShoppingList:
    monthly = (
        db.session.query(ShoppingList)
        .filter(ShoppingList.type == LIST_TYPE_MONTHLY_RESTOCK)
        .order_by(ShoppingList.id.asc())
        .first()
    )
    if monthly is not None:
        return monthly

    monthly = ShoppingList(
        title=MONTHLY_RESTOCK_TITLE,
        type=LIST_TYPE_MONTHLY_RESTOCK,
        status=LIST_STATUS_ACTIVE,
        priority="medium",
        created_at=utcnow(),
    )
    db.session.add(monthly)
    db.session.flush()
    return monthly


def ensure_monthly_restock_list() -> int:
    """Id of the singleton monthly restock list, created on first use."""
    def _op():
        return _ensure_monthly_locked().id
    return _run("Monthly restock list", _op)


def _aggregate_sold(items) -> dict[int, float]:
    totals: dict[int, float] = {}
    for entry in items:
        product_id = entry["product_id"]
        quantity = entry["quantity"] or 0
        if product_id is None or quantity <= 0:
            continue
        totals[product_id] = totals.get(product_id, 0) + quantity
    return totals


def _add_sold_quantities_locked(items) -> int:
    """
    Accumulate sold (product_id, quantity) pairs into the monthly list.

    One item per product: the pending one if any, otherwise a completed one
    from an earlier period is reopened with whatever quantity it still holds.
    Returns the number of products fed.
    """
    totals = _aggregate_sold(items)
    if not totals:
        return 0

    monthly = _ensure_monthly_locked()
    touched = 0

    for product_id, quantity in totals.items():
        product = db.session.get(Product, product_id)
        if product is None:
            continue

        base = (
            db.session.query(ShoppingListItem)
            .filter(ShoppingListItem.list_id == monthly.id)
            .filter(ShoppingListItem.product_id == product_id)
        )
        item = base.filter(_pending_filter()).order_by(ShoppingListItem.id.asc()).first()
        if item is None:
            item = base.order_by(ShoppingListItem.id.desc()).first()
            if item is not None:
                # Zero after a monthly reset; a hand-ticked item keeps its count
                item.is_completed = False

        if item is None:
            item = ShoppingListItem(
                list_id=monthly.id,
                product_id=product_id,
                quantity_value=0,
                is_completed=False,
                created_at=utcnow(),
            )
            db.session.add(item)

        item.quantity_value = _stock_amount((item.quantity_value or 0) + quantity)
        item.quantity_label = None
        item.name = product.name
        item.category = product.category
        item.estimated_unit_cost = product.buy_price or 0
        item.sell_price = product.sell_price or 0
        touched += 1

    db.session.flush()
    return touched


def add_sold_quantities_to_monthly_restock(items) -> int:
    """items: iterable of mappings with product_id and quantity."""
    items = list(items)
    return _run("Monthly restock accumulation", _add_sold_quantities_locked, items)


def _reset_monthly_locked(monthly: ShoppingList) -> int:
    items = db.session.query(ShoppingListItem).filter(ShoppingListItem.list_id == monthly.id).all()
    for item in items:
        item.is_completed = True
        item.quantity_value = 0
    db.session.flush()
    return len(items)


def _get_monthly(list_id: int | None) -> ShoppingList:
    if list_id is None:
        return _ensure_monthly_locked()
    shopping_list = _get_list(list_id)
    if not shopping_list.is_monthly_restock:
        raise ValidationError(
            "List is not the monthly restock list",
            details={"list_id": list_id, "type": shopping_list.type},
        )
    return shopping_list


def reset_monthly_restock_after_transfer(list_id: int | None = None) -> int:
    """Complete and zero every monthly item; the rows are kept for reuse."""
    def _op():
        return _reset_monthly_locked(_get_monthly(list_id))
    return _run("Monthly restock reset", _op)


def _transfer_monthly_locked(list_id: int | None = None) -> TransferResult:
    monthly = _get_monthly(list_id)
    result = _transfer_list_locked(monthly)
    result.reset_items = _reset_monthly_locked(monthly)
    return result


def transfer_monthly_restock(list_id: int | None = None) -> TransferResult:
    """Transfer the monthly list, then reset its accumulator."""
    return _run("Monthly restock transfer", _transfer_monthly_locked, list_id)


# ---------------------------------------------------------------------------
# Rollback
# ---------------------------------------------------------------------------

def _latest_transfer(list_id: int) -> ShoppingListTransfer | None:
    return (
        db.session.query(ShoppingListTransfer)
        .filter(ShoppingListTransfer.list_id == list_id)
        .filter(ShoppingListTransfer.reverted_at.is_(None))
        .order_by(ShoppingListTransfer.id.desc())
        .first()
    )


def has_revertible_transfer(list_id: int) -> bool:
    return _latest_transfer(list_id) is not None


def _validate_rollback(lines: list[ShoppingListTransferLine]) -> None:
    required: dict[int, float] = {}
    for line in lines:
        if line.product_id is None or not line.quantity:
            continue
        required[line.product_id] = required.get(line.product_id, 0) + line.quantity

    problems = []
    for product_id, quantity in required.items():
        product = db.session.get(Product, product_id)
        on_hand = (product.quantity or 0) if product is not None else None
        if product is None or on_hand < quantity:
            problems.append({
                "product_id": product_id,
                "required_quantity": _stock_amount(quantity),
                "on_hand": on_hand,
            })

    if problems:
        raise ValidationError(
            "Insufficient stock to roll back transfer",
            details={"items": problems},
        )


def _rollback_latest_locked(list_id: int) -> dict:
    shopping_list = _get_list(list_id)
    transfer = _latest_transfer(list_id)
    if transfer is None:
        raise ValidationError("No transfer to roll back", details={"list_id": list_id})

    lines = list(transfer.lines)
    _validate_rollback(lines)

    restored_products = 0
    restored_quantity = 0
    created_products = []

    for line in lines:
        if line.product_id is not None and line.quantity:
            product = db.session.get(Product, line.product_id)
            product.quantity = _stock_amount((product.quantity or 0) - line.quantity)
            restored_products += 1
            restored_quantity += line.quantity
            if line.created_product:
                created_products.append(product)

        item = db.session.get(ShoppingListItem, line.item_id)
        if item is None:
            continue

        previous = line.previous_quantity_value or 0
        if shopping_list.is_monthly_restock:
            # Sales since the transfer have accumulated on top of the reset item
            item.quantity_value = _stock_amount((item.quantity_value or 0) + previous)
        else:
            item.quantity_value = line.previous_quantity_value
        item.is_completed = False

    db.session.flush()

    removed = 0
    for product in created_products:
        if (product.quantity or 0) != 0:
            continue
        has_sales = (
            db.session.query(TransactionItem.id)
            .filter(TransactionItem.product_id == product.id)
            .first()
            is not None
        )
        if has_sales:
            continue
        (
            db.session.query(ShoppingListItem)
            .filter(ShoppingListItem.product_id == product.id)
            .update({ShoppingListItem.product_id: None}, synchronize_session="fetch")
        )
        db.session.delete(product)
        removed += 1

    transfer.reverted_at = utcnow()
    db.session.flush()

    return {
        "transfer_id": transfer.id,
        "restored_products": restored_products,
        "restored_quantity": _stock_amount(restored_quantity),
        "removed_products": removed,
    }


def rollback_latest_transfer(list_id: int) -> dict:
    """
    Undo the most recent un-reverted transfer of a list.

    Refused with ValidationError (and nothing changed) when any product it
    stocked no longer holds enough to take the quantity back.
    """
    return _run("Transfer rollback", _rollback_latest_locked, list_id)
