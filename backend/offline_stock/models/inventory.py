from __future__ import annotations

from ..extensions import db
from offline_stock.time_utils import utcnow, to_utc_z


class Product(db.Model):
    """
    Depot product: the authoritative on-hand quantity lives here.

    quantity is mutated by direct edits, sale completion (decrement) and
    shopping-list transfers (increment or creation). It is meant to stay >= 0;
    the sales service enforces that before decrementing, the database does not.
    """
    __tablename__ = "products"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.Text, nullable=False)
    barcode = db.Column(db.Text, nullable=True)
    category = db.Column(db.Text, nullable=True)

    buy_price = db.Column(db.Float, nullable=True, default=0)
    sell_price = db.Column(db.Float, nullable=True, default=0)

    quantity = db.Column(db.Integer, nullable=True, default=0)
    min_stock = db.Column(db.Integer, nullable=True, default=5)

    created_at = db.Column(db.DateTime, nullable=True, default=utcnow, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} quantity={self.quantity}>"

    @property
    def is_low_stock(self) -> bool:
        return (self.quantity or 0) <= (self.min_stock or 0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "barcode": self.barcode,
            "category": self.category,
            "buy_price": self.buy_price or 0,
            "sell_price": self.sell_price or 0,
            "quantity": self.quantity or 0,
            "min_stock": self.min_stock or 0,
            "is_low_stock": self.is_low_stock,
            "created_at": to_utc_z(self.created_at),
        }
