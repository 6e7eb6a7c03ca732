from __future__ import annotations

from ..extensions import db
from offline_stock.time_utils import utcnow, to_utc_z


LIST_TYPE_RESTOCK = "restock"
LIST_TYPE_CUSTOMER_ORDER = "customer_order"
LIST_TYPE_MONTHLY_RESTOCK = "monthly_restock"
LIST_TYPES = (LIST_TYPE_RESTOCK, LIST_TYPE_CUSTOMER_ORDER, LIST_TYPE_MONTHLY_RESTOCK)

LIST_STATUS_ACTIVE = "active"
LIST_STATUS_COMPLETED = "completed"
LIST_STATUS_ARCHIVED = "archived"
LIST_STATUSES = (LIST_STATUS_ACTIVE, LIST_STATUS_COMPLETED, LIST_STATUS_ARCHIVED)

LIST_PRIORITIES = ("low", "medium", "high")


class ShoppingList(db.Model):
    """
    Procurement / order intent.

    Exactly one list of type monthly_restock exists; it is created lazily and
    fed by completed sales.
    """
    __tablename__ = "shopping_lists"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.Text, nullable=False)
    type = db.Column(db.Text, nullable=True, default=LIST_TYPE_RESTOCK)
    status = db.Column(db.Text, nullable=True, default=LIST_STATUS_ACTIVE)
    priority = db.Column(db.Text, nullable=True, default="medium")
    notes = db.Column(db.Text, nullable=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True)
    due_date = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=True, default=utcnow, server_default=db.func.now())

    customer = db.relationship("Customer", backref=db.backref("shopping_lists", lazy=True))
    items = db.relationship(
        "ShoppingListItem",
        backref="shopping_list",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="ShoppingListItem.id",
    )

    @property
    def is_monthly_restock(self) -> bool:
        return self.type == LIST_TYPE_MONTHLY_RESTOCK

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type or LIST_TYPE_RESTOCK,
            "status": self.status or LIST_STATUS_ACTIVE,
            "priority": self.priority or "medium",
            "notes": self.notes,
            "customer_id": self.customer_id,
            "customer_name": self.customer.name if self.customer else None,
            "due_date": to_utc_z(self.due_date),
            "created_at": to_utc_z(self.created_at),
        }


class ShoppingListItem(db.Model):
    """
    Line of a shopping list.

    product_id is a weak lookup reference: NULL means a free-text item that
    has not been mapped to a depot product yet. Deleting a product nulls it.
    """
    __tablename__ = "shopping_list_items"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = db.Column(db.Integer, primary_key=True)
    list_id = db.Column(db.Integer, db.ForeignKey("shopping_lists.id"), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    name = db.Column(db.Text, nullable=False)
    quantity_value = db.Column(db.Float, nullable=True, default=1)
    quantity_label = db.Column(db.Text, nullable=True)
    estimated_unit_cost = db.Column(db.Float, nullable=True, default=0)
    sell_price = db.Column(db.Float, nullable=True, default=0)
    category = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    is_completed = db.Column(db.Boolean, nullable=True, default=False)
    created_at = db.Column(db.DateTime, nullable=True, default=utcnow, server_default=db.func.now())

    product = db.relationship("Product")

    def to_dict(self) -> dict:
        product = self.product
        return {
            "id": self.id,
            "list_id": self.list_id,
            "product_id": self.product_id,
            "name": self.name,
            "quantity_value": self.quantity_value or 0,
            "quantity_label": self.quantity_label,
            "estimated_unit_cost": self.estimated_unit_cost or 0,
            "sell_price": self.sell_price or 0,
            "category": self.category,
            "notes": self.notes,
            "is_completed": bool(self.is_completed),
            "created_at": to_utc_z(self.created_at),
            "product_name": product.name if product else None,
            "product_quantity": product.quantity if product else None,
        }


class ShoppingListTransfer(db.Model):
    """Journal entry for one list-to-depot transfer; reverted_at is set on rollback."""
    __tablename__ = "shopping_list_transfers"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = db.Column(db.Integer, primary_key=True)
    list_id = db.Column(db.Integer, nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=True, default=utcnow, server_default=db.func.now())
    reverted_at = db.Column(db.DateTime, nullable=True)

    lines = db.relationship(
        "ShoppingListTransferLine",
        backref="transfer",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="ShoppingListTransferLine.id",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "list_id": self.list_id,
            "created_at": to_utc_z(self.created_at),
            "reverted_at": to_utc_z(self.reverted_at),
            "lines": [line.to_dict() for line in self.lines],
        }


class ShoppingListTransferLine(db.Model):
    """
    One item touched by a transfer.

    item_id / product_id are plain integers: the journal must survive item or
    product deletion.
    """
    __tablename__ = "shopping_list_transfer_lines"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = db.Column(db.Integer, primary_key=True)
    transfer_id = db.Column(db.Integer, db.ForeignKey("shopping_list_transfers.id"), nullable=False, index=True)
    item_id = db.Column(db.Integer, nullable=False)
    product_id = db.Column(db.Integer, nullable=True)
    quantity = db.Column(db.Float, nullable=False, default=0)
    created_product = db.Column(db.Boolean, nullable=False, default=False)
    previous_quantity_value = db.Column(db.Float, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "transfer_id": self.transfer_id,
            "item_id": self.item_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "created_product": bool(self.created_product),
            "previous_quantity_value": self.previous_quantity_value,
        }
