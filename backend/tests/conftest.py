"""
Pytest fixtures for testing the order management backend.

Provides:
- Flask app and test client
- Database setup/teardown
- Roles, stores and users with their store links
- A small catalog, customers and orders
- Authentication helpers
"""

import pytest
from datetime import date
from decimal import Decimal

from orderdesk import create_app
from orderdesk.extensions import db
from orderdesk.blueprints.users.models import User
from orderdesk.blueprints.stores.models import Store, StoreUser
from orderdesk.blueprints.rbac.models import Role
from orderdesk.blueprints.rbac.services import RoleService
from orderdesk.blueprints.customers.models import Customer, Address
from orderdesk.blueprints.products.models import Category, Product, ComplementGroup, ComplementOption
from orderdesk.blueprints.tags.models import Tag
from orderdesk.blueprints.orders.models import (
    Order,
    OrderItem,
    DeliveryType,
    PaymentStatus,
    FulfillmentStatus,
)
from orderdesk.core.constants import MANAGER_ROLE, ATTENDANT_ROLE
from orderdesk.core.permissions import PermissionContext, normalize_permissions
from orderdesk.core.utils import generate_access_token


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def app():
    """Create application instance for testing."""
    app = create_app("testing")

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope="function")
def client(app):
    """Create test client."""
    return app.test_client()


# =============================================================================
# Roles
# =============================================================================

@pytest.fixture
def roles(app):
    """The default Manager and Attendant roles."""
    RoleService.seed_default_roles()
    return {role.name: role for role in Role.query.all()}


@pytest.fixture
def manager_role(roles):
    return roles[MANAGER_ROLE]


@pytest.fixture
def attendant_role(roles):
    return roles[ATTENDANT_ROLE]


@pytest.fixture
def readonly_role(app):
    """A role that can only look at orders and customers."""
    role = Role(
        name="Viewer",
        description="Read only",
        permissions=normalize_permissions({"orders": ["read"], "customers": ["read"]}),
    )
    db.session.add(role)
    db.session.commit()
    return role


# =============================================================================
# Users and Stores
# =============================================================================

@pytest.fixture
def user_password():
    """Default password for test users."""
    return "TestPassword123!"


def _make_user(email, name, password, **kwargs):
    user = User(email=email, full_name=name, is_active=kwargs.pop("is_active", True), **kwargs)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def store(app):
    store = Store(name="Main Bakery", slug="main-bakery", is_active=True)
    db.session.add(store)
    db.session.commit()
    return store


@pytest.fixture
def second_store(app):
    """A second store for isolation tests."""
    store = Store(name="Other Bakery", slug="other-bakery", is_active=True)
    db.session.add(store)
    db.session.commit()
    return store


@pytest.fixture
def manager(app, store, manager_role, user_password):
    user = _make_user("manager@example.com", "Mary Manager", user_password)
    db.session.add(StoreUser(user_id=user.id, store_id=store.id, role_id=manager_role.id))
    db.session.commit()
    return user


@pytest.fixture
def attendant(app, store, attendant_role, user_password):
    user = _make_user("attendant@example.com", "Andy Attendant", user_password)
    db.session.add(StoreUser(user_id=user.id, store_id=store.id, role_id=attendant_role.id))
    db.session.commit()
    return user


@pytest.fixture
def viewer(app, store, readonly_role, user_password):
    user = _make_user("viewer@example.com", "Vic Viewer", user_password)
    db.session.add(StoreUser(user_id=user.id, store_id=store.id, role_id=readonly_role.id))
    db.session.commit()
    return user


@pytest.fixture
def outsider(app, second_store, manager_role, user_password):
    """Manager of the second store only."""
    user = _make_user("outsider@example.com", "Olga Outsider", user_password)
    db.session.add(StoreUser(user_id=user.id, store_id=second_store.id, role_id=manager_role.id))
    db.session.commit()
    return user


@pytest.fixture
def platform_admin(app, user_password):
    return _make_user("admin@example.com", "Ada Admin", user_password, is_platform_admin=True)


@pytest.fixture
def inactive_user(app, user_password):
    return _make_user("inactive@example.com", "Ina Inactive", user_password, is_active=False)


# =============================================================================
# Authentication Helpers
# =============================================================================

def auth_headers_for(user, store_slug=None):
    headers = {
        "Authorization": f"Bearer {generate_access_token(user.id, user.is_platform_admin)}",
        "Content-Type": "application/json",
    }
    if store_slug:
        headers["X-Store-Slug"] = store_slug
    return headers


@pytest.fixture
def manager_headers(manager, store):
    return auth_headers_for(manager, store.slug)


@pytest.fixture
def attendant_headers(attendant, store):
    return auth_headers_for(attendant, store.slug)


@pytest.fixture
def viewer_headers(viewer, store):
    return auth_headers_for(viewer, store.slug)


@pytest.fixture
def admin_headers(platform_admin):
    return auth_headers_for(platform_admin)


@pytest.fixture
def manager_context(manager, store, manager_role):
    """Service-level context equivalent to the manager's requests."""
    return PermissionContext(
        user_id=manager.id,
        user_name=manager.full_name,
        store_id=store.id,
        store_slug=store.slug,
        role_name=manager_role.name,
        permissions=normalize_permissions(manager_role.permissions),
    )


# =============================================================================
# Catalog, Customers and Orders
# =============================================================================

@pytest.fixture
def topping_group(store):
    group = ComplementGroup(store_id=store.id, name="Topping", is_required=True)
    db.session.add(group)
    db.session.flush()
    db.session.add_all([
        ComplementOption(group_id=group.id, name="Ganache", additional_price=Decimal("0.00"), position=0),
        ComplementOption(group_id=group.id, name="Strawberries", additional_price=Decimal("12.50"), position=1),
    ])
    db.session.commit()
    return group


@pytest.fixture
def category(store):
    category = Category(store_id=store.id, name="Cakes")
    db.session.add(category)
    db.session.commit()
    return category


@pytest.fixture
def cake(store, category, topping_group):
    """A product whose single complement slot is required."""
    product = Product(
        store_id=store.id,
        category_id=category.id,
        name="Chocolate cake",
        price=Decimal("50.00"),
        is_active=True,
        complement_group_ids=[str(topping_group.id)],
    )
    db.session.add(product)
    db.session.commit()
    return product


@pytest.fixture
def pie(store):
    product = Product(store_id=store.id, name="Chicken pie", price=Decimal("30.00"), is_active=True)
    db.session.add(product)
    db.session.commit()
    return product


@pytest.fixture
def customer(store):
    customer = Customer(store_id=store.id, name="Maria Souza", phone="11987654321")
    db.session.add(customer)
    db.session.commit()
    return customer


@pytest.fixture
def address(customer):
    address = Address(
        customer_id=customer.id,
        street="Rua das Flores",
        number="120",
        neighborhood="Centro",
        city="Sao Paulo",
        state="SP",
        postal_code="01001000",
        is_principal=True,
    )
    db.session.add(address)
    db.session.commit()
    return address


@pytest.fixture
def tag(store):
    tag = Tag(store_id=store.id, name="Birthday", color="#ec4899")
    db.session.add(tag)
    db.session.commit()
    return tag


def make_order(store, customer, number=1, delivery_date=None, delivery_time="10:00",
               payment_status=PaymentStatus.UNPAID, fulfillment_status=FulfillmentStatus.NOT_DELIVERED,
               total=Decimal("30.00")):
    order = Order(
        store_id=store.id,
        order_number=number,
        customer_id=customer.id,
        delivery_type=DeliveryType.PICKUP,
        delivery_date=delivery_date or date.today(),
        delivery_time=delivery_time,
        subtotal=total,
        shipping_fee=Decimal("0.00"),
        discount=Decimal("0.00"),
        total=total,
        payment_status=payment_status,
        fulfillment_status=fulfillment_status,
        created_by_name="Fixture",
    )
    order.items = [
        OrderItem(product_name="Chicken pie", quantity=1, unit_price=total, complements=[], position=0)
    ]
    db.session.add(order)
    db.session.commit()
    return order


@pytest.fixture
def order(store, customer):
    return make_order(store, customer)
