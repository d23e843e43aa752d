from flask import Blueprint

api_v1 = Blueprint('api_v1', __name__, url_prefix='/api/v1')

# Register child blueprints
from orderdesk.blueprints.auth.routes import auth_bp
from orderdesk.blueprints.users.routes import users_bp
from orderdesk.blueprints.stores.routes import stores_bp
from orderdesk.blueprints.rbac.routes import rbac_bp
from orderdesk.blueprints.customers.routes import customers_bp
from orderdesk.blueprints.products.routes import products_bp
from orderdesk.blueprints.tags.routes import tags_bp
from orderdesk.blueprints.wizard.routes import wizard_bp
from orderdesk.blueprints.orders.routes import orders_bp
from orderdesk.blueprints.dashboard.routes import dashboard_bp

api_v1.register_blueprint(auth_bp)
api_v1.register_blueprint(users_bp)
api_v1.register_blueprint(stores_bp)
api_v1.register_blueprint(rbac_bp)
api_v1.register_blueprint(customers_bp)
api_v1.register_blueprint(products_bp)
api_v1.register_blueprint(tags_bp)
api_v1.register_blueprint(wizard_bp)
api_v1.register_blueprint(orders_bp)
api_v1.register_blueprint(dashboard_bp)
