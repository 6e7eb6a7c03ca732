from __future__ import annotations

from ..extensions import db
from offline_stock.time_utils import utcnow, to_utc_z


class Customer(db.Model):
    """Customer referenced (nullable) by sales transactions and shopping lists."""
    __tablename__ = "customers"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.Text, nullable=False)
    phone = db.Column(db.Text, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=True, default=utcnow, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
        }
