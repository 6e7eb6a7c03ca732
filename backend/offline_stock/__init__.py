# backend/offline_stock/__init__.py
from flask import Flask

from .config import Config
from .extensions import db


def create_app(config_object=None) -> Flask:
    """
    Build the app and open its store.

    Opening runs, in order: store handle (foreign keys, snapshot restore),
    schema migrator, seed gate. A MigrationError propagates: the app must
    not start on a store in an unknown shape.
    """
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object or Config)

    # Initialize extensions
    db.init_app(app)

    # Import models so the mapper registry is complete before the first query
    from . import models  # noqa: F401

    from .store import init_store
    from .services import migration_service, seed_service

    with app.app_context():
        init_store(app)
        if app.config.get("STORE_AUTO_MIGRATE", True):
            migration_service.run_migrations()
            seed_service.ensure_seed_data()

    # Register blueprints
    from .routes.system import system_bp
    from .routes.products import products_bp
    from .routes.customers import customers_bp
    from .routes.sales import sales_bp
    from .routes.shopping import shopping_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(shopping_bp)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
