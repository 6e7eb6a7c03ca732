# Overview: Customer operations; deletion nulls references from lists and sales first.

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import Customer, ShoppingList, Transaction
from ..store import unit_of_work
from offline_stock.time_utils import utcnow


def _clean_text(value) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def get_customer(customer_id: int) -> Customer:
    customer = db.session.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError("Customer not found", details={"customer_id": customer_id})
    return customer


def list_customers(search: str | None = None) -> list[Customer]:
    query = db.session.query(Customer)
    search = _clean_text(search)
    if search:
        query = query.filter(Customer.name.ilike(f"%{search}%"))
    return query.order_by(Customer.name.asc(), Customer.id.asc()).all()


def create_customer(data: dict) -> Customer:
    name = _clean_text(data.get("name"))
    if not name:
        raise ValidationError("Customer name is required", details={"field": "name"})

    customer = Customer(
        name=name,
        phone=_clean_text(data.get("phone")),
        notes=_clean_text(data.get("notes")),
        created_at=utcnow(),
    )
    with unit_of_work():
        db.session.add(customer)
    return customer


def update_customer(customer_id: int, data: dict) -> Customer:
    with unit_of_work():
        customer = get_customer(customer_id)
        if "name" in data:
            name = _clean_text(data.get("name"))
            if not name:
                raise ValidationError("Customer name is required", details={"field": "name"})
            customer.name = name
        if "phone" in data:
            customer.phone = _clean_text(data.get("phone"))
        if "notes" in data:
            customer.notes = _clean_text(data.get("notes"))
    return customer


def delete_customer(customer_id: int) -> None:
    """
    Delete a customer.

    Lists and sales stay; their customer_id is cleared first so the delete
    does not trip the foreign keys.
    """
    with unit_of_work():
        customer = get_customer(customer_id)
        (
            db.session.query(ShoppingList)
            .filter(ShoppingList.customer_id == customer_id)
            .update({ShoppingList.customer_id: None}, synchronize_session="fetch")
        )
        (
            db.session.query(Transaction)
            .filter(Transaction.customer_id == customer_id)
            .update({Transaction.customer_id: None}, synchronize_session="fetch")
        )
        db.session.delete(customer)
