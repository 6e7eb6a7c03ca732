"""
Sale completion: validation before writes, stock conservation, atomicity.
"""

import pytest

from offline_stock.errors import ValidationError
from offline_stock.extensions import db
from offline_stock.models import PaymentLog, Product, ShoppingList, ShoppingListItem, Transaction, TransactionItem
from offline_stock.services import reconciliation_service, sales_service


def _monthly_items():
    monthly = db.session.query(ShoppingList).filter_by(type="monthly_restock").one()
    return db.session.query(ShoppingListItem).filter_by(list_id=monthly.id).all()


def test_sale_decrements_stock_exactly(app, widget):
    transaction = sales_service.complete_sale(None, "fully_paid", [{"product_id": widget.id, "quantity": 3}])

    assert db.session.get(Product, widget.id).quantity == 7
    assert transaction.total_amount == 12.0
    assert transaction.paid_amount == 12.0
    assert transaction.payment_status == "fully_paid"

    items = db.session.query(TransactionItem).filter_by(transaction_id=transaction.id).all()
    assert len(items) == 1
    assert items[0].unit_price == 4.0
    assert items[0].line_total == 12.0

    logs = db.session.query(PaymentLog).filter_by(transaction_id=transaction.id).all()
    assert [(log.amount, log.note) for log in logs] == [(12.0, "Sale paid in full")]


def test_unit_price_can_be_overridden(app, widget, gadget):
    transaction = sales_service.complete_sale(None, "fully_paid", [
        {"product_id": widget.id, "quantity": 2, "unit_price": 3.5},
        {"product_id": gadget.id, "quantity": 1},
    ])

    assert transaction.total_amount == 32.0
    assert db.session.get(Product, gadget.id).quantity == 2


def test_insufficient_stock_rejects_whole_sale(app, widget, gadget):
    with pytest.raises(ValidationError) as exc_info:
        sales_service.complete_sale(None, "fully_paid", [
            {"product_id": gadget.id, "quantity": 1},
            {"product_id": widget.id, "quantity": 11},
        ])

    assert exc_info.value.details["items"][0]["product_id"] == widget.id
    assert db.session.get(Product, widget.id).quantity == 10
    assert db.session.get(Product, gadget.id).quantity == 3
    assert db.session.query(Transaction).count() == 0


def test_lines_for_the_same_product_are_summed(app, widget):
    with pytest.raises(ValidationError):
        sales_service.complete_sale(None, "fully_paid", [
            {"product_id": widget.id, "quantity": 6},
            {"product_id": widget.id, "quantity": 5},
        ])

    assert db.session.get(Product, widget.id).quantity == 10


@pytest.mark.parametrize("items", [
    [],
    [{"product_id": 999, "quantity": 1}],
    [{"quantity": 1}],
])
def test_bad_cart_is_rejected_before_any_write(app, widget, items):
    with pytest.raises(ValidationError):
        sales_service.complete_sale(None, "fully_paid", items)

    assert db.session.query(Transaction).count() == 0


@pytest.mark.parametrize("line", [
    {"quantity": 0},
    {"quantity": -2},
    {"quantity": 1.5},
    {"quantity": "two"},
    {"quantity": 1, "unit_price": -1},
])
def test_bad_line_is_rejected(app, widget, line):
    with pytest.raises(ValidationError):
        sales_service.complete_sale(None, "fully_paid", [dict(line, product_id=widget.id)])

    assert db.session.get(Product, widget.id).quantity == 10


def test_unknown_payment_status_and_customer(app, widget):
    with pytest.raises(ValidationError):
        sales_service.complete_sale(None, "on_credit", [{"product_id": widget.id, "quantity": 1}])
    with pytest.raises(ValidationError):
        sales_service.complete_sale(12345, "debt", [{"product_id": widget.id, "quantity": 1}])

    assert db.session.query(Transaction).count() == 0


def test_failure_midway_leaves_no_rows(app, widget, monkeypatch):
    def fail(items):
        raise RuntimeError("accumulator exploded")

    monkeypatch.setattr(reconciliation_service, "_add_sold_quantities_locked", fail)

    with pytest.raises(RuntimeError):
        sales_service.complete_sale(None, "fully_paid", [{"product_id": widget.id, "quantity": 4}])

    assert db.session.get(Product, widget.id).quantity == 10
    assert db.session.query(Transaction).count() == 0
    assert db.session.query(TransactionItem).count() == 0
    assert db.session.query(PaymentLog).count() == 0


def test_sold_quantities_accumulate_in_one_monthly_item(app, widget):
    sales_service.complete_sale(None, "fully_paid", [{"product_id": widget.id, "quantity": 1}])
    sales_service.complete_sale(None, "debt", [{"product_id": widget.id, "quantity": 2}])

    items = _monthly_items()
    assert len(items) == 1
    assert items[0].product_id == widget.id
    assert items[0].quantity_value == 3
    assert items[0].is_completed is False
    assert items[0].name == "Widget"
    assert items[0].estimated_unit_cost == 2.5
    assert items[0].sell_price == 4.0
    assert items[0].category == "Hardware"


def test_sales_summary_and_history(app, widget, customer):
    sales_service.complete_sale(customer.id, "debt", [{"product_id": widget.id, "quantity": 2}])
    sales_service.complete_sale(None, "fully_paid", [{"product_id": widget.id, "quantity": 1}])

    summary = sales_service.sales_summary()
    assert summary == {"transactions": 2, "total_amount": 12.0, "paid_amount": 4.0, "debt": 8.0}

    debts = sales_service.list_transactions(only_debt=True)
    assert [t.customer_id for t in debts] == [customer.id]

    customer_totals = sales_service.customer_summary(customer.id)
    assert customer_totals["debt"] == 8.0
    assert customer_totals["customer"]["name"] == "Ana Popescu"
