from __future__ import annotations

from ..extensions import db
from offline_stock.time_utils import utcnow, to_utc_z


class User(db.Model):
    """
    Local account. Only the seed gate creates one (the default administrator);
    the password column holds a bcrypt hash.
    """
    __tablename__ = "users"
    __table_args__ = ({"sqlite_autoincrement": True},)

    id = db.Column(db.Integer, primary_key=True)
    nickname = db.Column(db.Text, nullable=False, unique=True)
    password = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=True, default=utcnow, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nickname": self.nickname,
            "created_at": to_utc_z(self.created_at),
        }
