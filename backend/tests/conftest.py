"""
Pytest fixtures for offline stock backend tests.

Every test gets its own app with a fresh in-memory store that has been
migrated and seeded exactly like a real start.
"""

import pytest

from offline_stock import create_app
from offline_stock.config import TestingConfig
from offline_stock.extensions import db
from offline_stock.models import Customer, Product


class LegacyStoreConfig(TestingConfig):
    """Opens the store without migrating, so a test can lay down an old shape first."""
    STORE_AUTO_MIGRATE = False


@pytest.fixture(scope='function')
def app():
    """Create application for testing."""
    app = create_app(TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()


@pytest.fixture(scope='function')
def bare_app():
    """Application over an empty, unmigrated store."""
    app = create_app(LegacyStoreConfig)
    with app.app_context():
        yield app
        db.session.remove()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def widget(app):
    """Product(name="Widget", quantity=10)."""
    product = Product(name="Widget", category="Hardware", buy_price=2.5, sell_price=4.0, quantity=10, min_stock=2)
    db.session.add(product)
    db.session.commit()
    return product


@pytest.fixture(scope='function')
def gadget(app):
    product = Product(name="Gadget", category="Hardware", buy_price=10.0, sell_price=25.0, quantity=3, min_stock=1)
    db.session.add(product)
    db.session.commit()
    return product


@pytest.fixture(scope='function')
def customer(app):
    customer = Customer(name="Ana Popescu", phone="0700000000")
    db.session.add(customer)
    db.session.commit()
    return customer
