"""
Seed commands for populating the database with initial data.

Usage:
    flask seed roles    # Create the Manager and Attendant roles
    flask seed demo     # Seed a demo store with staff, catalog and customers
"""
from decimal import Decimal

import click

from orderdesk.extensions import db
from orderdesk.core.constants import MANAGER_ROLE, ATTENDANT_ROLE


DEMO_CATALOG = {
    "Cakes": [
        ("Chocolate cake", Decimal("80.00"), True),
        ("Carrot cake", Decimal("65.00"), True),
    ],
    "Savory": [
        ("Chicken pie", Decimal("45.00"), False),
        ("Cheese bread (dozen)", Decimal("18.00"), False),
    ],
}

DEMO_CUSTOMERS = [
    ("Maria Souza", "11987654321", ("Rua das Flores", "120", "Centro", "Sao Paulo", "SP", "01001000")),
    ("Joao Lima", "21998765432", ("Avenida Atlantica", "1500", "Copacabana", "Rio de Janeiro", "RJ", "22021001")),
]


def register_seed_commands(app):
    """Register seed-related CLI commands."""

    @app.cli.group()
    def seed():
        """Seed database with initial data."""
        pass

    @seed.command('roles')
    def seed_roles():
        """Create the default roles. Existing roles are left untouched."""
        from orderdesk.blueprints.rbac.services import RoleService

        created = RoleService.seed_default_roles()
        click.echo(f"Roles seeded: {created} created")

    @seed.command('demo')
    @click.option('--store-name', default='Demo Bakery', help='Name for the demo store')
    @click.option('--store-slug', default='demo', help='Slug for the demo store')
    @click.option('--password', default='demo1234', help='Password for demo users')
    def seed_demo(store_name, store_slug, password):
        """Seed a store with a manager, an attendant, products and customers."""
        from orderdesk.blueprints.users.models import User
        from orderdesk.blueprints.stores.models import Store, StoreUser
        from orderdesk.blueprints.rbac.models import Role
        from orderdesk.blueprints.rbac.services import RoleService
        from orderdesk.blueprints.products.models import Category, Product, ComplementGroup, ComplementOption
        from orderdesk.blueprints.customers.models import Customer, Address
        from orderdesk.blueprints.tags.models import Tag

        if Store.query.filter_by(slug=store_slug).first():
            click.echo(f"Error: Store with slug '{store_slug}' already exists.", err=True)
            raise SystemExit(1)

        RoleService.seed_default_roles()
        roles = {role.name: role for role in Role.query.all()}

        store = Store(name=store_name, slug=store_slug, is_active=True)
        db.session.add(store)
        db.session.flush()

        staff = [
            (f"manager@{store_slug}.com", "Demo Manager", MANAGER_ROLE),
            (f"attendant@{store_slug}.com", "Demo Attendant", ATTENDANT_ROLE),
        ]
        for email, name, role_name in staff:
            user = User.query.filter_by(email=email).first()
            if not user:
                user = User(email=email, full_name=name, is_active=True)
                user.set_password(password)
                db.session.add(user)
                db.session.flush()
            db.session.add(StoreUser(user_id=user.id, store_id=store.id, role_id=roles[role_name].id))
            click.echo(f"  User: {email} ({role_name})")

        toppings = ComplementGroup(store_id=store.id, name="Topping", is_required=True)
        db.session.add(toppings)
        db.session.flush()
        for position, (name, price) in enumerate([("Ganache", Decimal("0.00")), ("Strawberries", Decimal("12.00"))]):
            db.session.add(ComplementOption(group_id=toppings.id, name=name, additional_price=price, position=position))

        product_count = 0
        for category_name, products in DEMO_CATALOG.items():
            category = Category(store_id=store.id, name=category_name)
            db.session.add(category)
            db.session.flush()
            for name, price, with_topping in products:
                db.session.add(Product(
                    store_id=store.id,
                    category_id=category.id,
                    name=name,
                    price=price,
                    is_active=True,
                    complement_group_ids=[str(toppings.id)] if with_topping else [],
                ))
                product_count += 1

        for name, phone, (street, number, neighborhood, city, state, postal_code) in DEMO_CUSTOMERS:
            customer = Customer(store_id=store.id, name=name, phone=phone)
            db.session.add(customer)
            db.session.flush()
            db.session.add(Address(
                customer_id=customer.id,
                street=street,
                number=number,
                neighborhood=neighborhood,
                city=city,
                state=state,
                postal_code=postal_code,
                is_principal=True,
            ))

        for name, color in [("Birthday", "#ec4899"), ("Urgent", "#ef4444")]:
            db.session.add(Tag(store_id=store.id, name=name, color=color))

        db.session.commit()

        click.echo("\n" + "=" * 50)
        click.echo("Demo data seeded")
        click.echo("=" * 50)
        click.echo(f"Store:     {store.name} (X-Store-Slug: {store.slug})")
        click.echo(f"Products:  {product_count}")
        click.echo(f"Customers: {len(DEMO_CUSTOMERS)}")
        click.echo(f"Password:  {password}")
