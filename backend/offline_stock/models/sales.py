from __future__ import annotations

from ..extensions import db
from offline_stock.time_utils import utcnow, to_utc_z


class Transaction(db.Model):
    """
    Completed sale.

    Created together with its items and the matching stock decrements.
    Afterwards only paid_amount / payment_status move, through payment logging.
    Invariant: 0 <= paid_amount <= total_amount.
    """
    __tablename__ = "transactions"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.DateTime, nullable=True, default=utcnow, server_default=db.func.now())
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True)
    total_amount = db.Column(db.Float, nullable=True, default=0)

    # fully_paid | debt (descriptive; derivable from paid_amount < total_amount)
    payment_status = db.Column(db.Text, nullable=True, default="fully_paid")
    paid_amount = db.Column(db.Float, nullable=True, default=0)

    customer = db.relationship("Customer", backref=db.backref("transactions", lazy=True))
    items = db.relationship(
        "TransactionItem",
        backref="transaction",
        lazy=True,
        order_by="TransactionItem.id",
    )

    @property
    def outstanding(self) -> float:
        return max(round((self.total_amount or 0) - (self.paid_amount or 0), 2), 0.0)

    def to_dict(self, include_items: bool = False) -> dict:
        data = {
            "id": self.id,
            "date": to_utc_z(self.date),
            "customer_id": self.customer_id,
            "customer_name": self.customer.name if self.customer else None,
            "total_amount": self.total_amount or 0,
            "paid_amount": self.paid_amount or 0,
            "outstanding": self.outstanding,
            "payment_status": "debt" if self.outstanding > 0 else "fully_paid",
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class TransactionItem(db.Model):
    """Immutable sale line, owned by its transaction."""
    __tablename__ = "transaction_items"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(db.Integer, db.ForeignKey("transactions.id"), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Float, nullable=False)
    line_total = db.Column(db.Float, nullable=False)

    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "transaction_id": self.transaction_id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "line_total": self.line_total,
        }


class PaymentLog(db.Model):
    """Append-only record of money received against a transaction."""
    __tablename__ = "payment_logs"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(db.Integer, db.ForeignKey("transactions.id"), nullable=False)
    amount = db.Column(db.Float, nullable=False)
    note = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=True, default=utcnow, server_default=db.func.now())

    transaction = db.relationship("Transaction", backref=db.backref("payment_logs", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "transaction_id": self.transaction_id,
            "amount": self.amount,
            "note": self.note,
            "customer_name": (
                self.transaction.customer.name
                if self.transaction is not None and self.transaction.customer is not None
                else None
            ),
            "created_at": to_utc_z(self.created_at),
        }
