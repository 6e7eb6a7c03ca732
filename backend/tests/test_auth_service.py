import pytest

from offline_stock.errors import ValidationError
from offline_stock.extensions import db
from offline_stock.models import User
from offline_stock.services import auth_service
from offline_stock.services.auth_service import PasswordValidationError


def test_hash_and_verify(app):
    hashed = auth_service.hash_password("secret-pass")

    assert hashed != "secret-pass"
    assert hashed.startswith("$2")
    assert auth_service.verify_password("secret-pass", hashed) is True
    assert auth_service.verify_password("other-pass", hashed) is False


def test_short_password_is_rejected(app):
    with pytest.raises(PasswordValidationError):
        auth_service.hash_password("abc")


def test_verify_rejects_non_bcrypt_hash(app):
    assert auth_service.verify_password("admin123", "admin123") is False
    assert auth_service.verify_password("", "whatever") is False


def test_nickname_is_unique_ignoring_case(app):
    auth_service.create_user("cashier", "cashier1")
    db.session.commit()

    with pytest.raises(ValidationError):
        auth_service.create_user("CASHIER", "cashier2")

    assert db.session.query(User).filter(User.nickname == "cashier").count() == 1
    assert auth_service.authenticate("Cashier", "cashier1").nickname == "cashier"
