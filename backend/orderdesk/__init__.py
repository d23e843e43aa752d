import logging

from flask import Flask
from orderdesk.config import config
from dotenv import load_dotenv
from orderdesk.extensions import init_extension

load_dotenv()

def create_app(config_name="default"):
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))

    init_extension(app)

    # Import models for Flask-Migrate to discover them
    # This must be done after db initialization
    with app.app_context():
        from orderdesk.core.models import StoredState
        from orderdesk.blueprints.users.models import User
        from orderdesk.blueprints.stores.models import Store, StoreUser
        from orderdesk.blueprints.rbac.models import Role
        from orderdesk.blueprints.customers.models import Customer, Address
        from orderdesk.blueprints.products.models import Category, Product, ComplementGroup, ComplementOption
        from orderdesk.blueprints.tags.models import Tag
        from orderdesk.blueprints.orders.models import Order, OrderItem

    # Initialize security middleware and error handlers
    from orderdesk.core.middleware import init_middleware
    init_middleware(app)

    # Initialize CLI commands
    from orderdesk.cli import init_cli
    init_cli(app)

    # Register API blueprints
    from orderdesk.blueprints.api.v1 import api_v1
    app.register_blueprint(api_v1)

    # Register health check blueprint (at root level, bypasses auth)
    from orderdesk.blueprints.health.routes import health_bp
    app.register_blueprint(health_bp)

    app.logger.debug("Application created with %s config", config_name)

    return app
