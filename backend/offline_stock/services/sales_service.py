# Overview: Sale completion and sales reads; the only place stock is decremented.

"""
Sale completion.

A sale is validated completely before anything is written: cart, payment
status, quantities, prices, customer, and on-hand stock per product (lines
for the same product are summed first). The writes then happen in one unit
of work: transaction row, its items, the stock decrements, the payment log
entry for money taken at the till, and the monthly restock accumulation.
Either all of it exists afterwards or none of it does.
"""

from sqlalchemy import func

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import Customer, PaymentLog, Product, Transaction, TransactionItem
from ..store import unit_of_work
from offline_stock.time_utils import utcnow
from . import reconciliation_service


PAYMENT_FULLY_PAID = "fully_paid"
PAYMENT_DEBT = "debt"
PAYMENT_STATUSES = (PAYMENT_FULLY_PAID, PAYMENT_DEBT)

SALE_PAID_NOTE = "Sale paid in full"


def _parse_quantity(raw, index: int) -> int:
    if isinstance(raw, bool):
        raw = None
    try:
        quantity = int(raw)
    except (TypeError, ValueError):
        quantity = None
    if quantity is None or quantity <= 0 or (isinstance(raw, float) and not raw.is_integer()):
        raise ValidationError(
            "Quantity must be a positive whole number",
            details={"line": index, "quantity": raw},
        )
    return quantity


def _parse_unit_price(raw, product: Product, index: int) -> float:
    if raw is None or raw == "":
        return round(product.sell_price or 0, 2)
    try:
        price = float(raw)
    except (TypeError, ValueError):
        raise ValidationError("Unit price must be a number", details={"line": index, "unit_price": raw})
    if price < 0:
        raise ValidationError("Unit price cannot be negative", details={"line": index, "unit_price": raw})
    return round(price, 2)


def _validate_on_hand(lines: list[dict]) -> None:
    product_totals: dict[int, int] = {}
    for line in lines:
        product_id = line["product"].id
        product_totals[product_id] = product_totals.get(product_id, 0) + line["quantity"]

    insufficient = []
    for product_id, qty in product_totals.items():
        on_hand = db.session.get(Product, product_id).quantity or 0
        if on_hand < qty:
            insufficient.append({
                "product_id": product_id,
                "requested_quantity": qty,
                "on_hand": on_hand,
            })

    if insufficient:
        raise ValidationError(
            "Insufficient stock to complete sale",
            details={"items": insufficient},
        )


def _resolve_lines(items) -> list[dict]:
    if not items:
        raise ValidationError("Cart is empty")

    lines = []
    for index, entry in enumerate(items):
        product_id = entry.get("product_id")
        product = db.session.get(Product, product_id) if product_id is not None else None
        if product is None:
            raise ValidationError("Product not found", details={"line": index, "product_id": product_id})

        quantity = _parse_quantity(entry.get("quantity"), index)
        unit_price = _parse_unit_price(entry.get("unit_price"), product, index)
        lines.append({
            "product": product,
            "quantity": quantity,
            "unit_price": unit_price,
            "line_total": round(quantity * unit_price, 2),
        })
    return lines


def complete_sale(customer_id: int | None, payment_status: str, items) -> Transaction:
    """
    Record a sale and take its quantities off the shelf.

    items: sequence of mappings with product_id, quantity and optional
    unit_price (defaults to the product's sell price).

    Raises ValidationError before any write for an empty cart, an unknown
    payment status, product or customer, a bad quantity or price, or
    insufficient stock.
    """
    payment_status = payment_status or PAYMENT_FULLY_PAID
    if payment_status not in PAYMENT_STATUSES:
        raise ValidationError(
            "Unknown payment status",
            details={"payment_status": payment_status, "allowed": list(PAYMENT_STATUSES)},
        )

    items = list(items or [])
    lines = _resolve_lines(items)

    if customer_id is not None and db.session.get(Customer, customer_id) is None:
        raise ValidationError("Customer not found", details={"customer_id": customer_id})

    _validate_on_hand(lines)

    total = round(sum(line["line_total"] for line in lines), 2)
    paid = total if payment_status == PAYMENT_FULLY_PAID else 0.0
    now = utcnow()

    with unit_of_work():
        transaction = Transaction(
            date=now,
            customer_id=customer_id,
            total_amount=total,
            payment_status=payment_status,
            paid_amount=paid,
        )
        db.session.add(transaction)
        db.session.flush()

        for line in lines:
            product = line["product"]
            db.session.add(TransactionItem(
                transaction_id=transaction.id,
                product_id=product.id,
                quantity=line["quantity"],
                unit_price=line["unit_price"],
                line_total=line["line_total"],
            ))
            product.quantity = (product.quantity or 0) - line["quantity"]

        if paid > 0:
            db.session.add(PaymentLog(
                transaction_id=transaction.id,
                amount=paid,
                note=SALE_PAID_NOTE,
                created_at=now,
            ))

        db.session.flush()
        reconciliation_service._add_sold_quantities_locked(
            {"product_id": line["product"].id, "quantity": line["quantity"]} for line in lines
        )

    return transaction


# =============================================================================
# READS (history, export)
# =============================================================================

def get_transaction(transaction_id: int) -> Transaction:
    transaction = db.session.get(Transaction, transaction_id)
    if transaction is None:
        raise NotFoundError("Transaction not found", details={"transaction_id": transaction_id})
    return transaction


def list_transactions(
    customer_id: int | None = None,
    only_debt: bool = False,
    limit: int | None = None,
) -> list[Transaction]:
    """Newest first."""
    query = db.session.query(Transaction)
    if customer_id is not None:
        query = query.filter(Transaction.customer_id == customer_id)
    if only_debt:
        query = query.filter(func.coalesce(Transaction.paid_amount, 0) < Transaction.total_amount)
    query = query.order_by(Transaction.date.desc(), Transaction.id.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


def _totals(query) -> dict:
    total, paid, count = query.with_entities(
        func.coalesce(func.sum(Transaction.total_amount), 0),
        func.coalesce(func.sum(Transaction.paid_amount), 0),
        func.count(Transaction.id),
    ).one()
    total = round(total or 0, 2)
    paid = round(paid or 0, 2)
    return {
        "transactions": count,
        "total_amount": total,
        "paid_amount": paid,
        "debt": max(round(total - paid, 2), 0.0),
    }


def sales_summary() -> dict:
    return _totals(db.session.query(Transaction))


def customer_summary(customer_id: int) -> dict:
    customer = db.session.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError("Customer not found", details={"customer_id": customer_id})
    summary = _totals(db.session.query(Transaction).filter(Transaction.customer_id == customer_id))
    summary["customer"] = customer.to_dict()
    return summary
