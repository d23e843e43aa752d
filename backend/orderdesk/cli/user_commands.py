"""
User management CLI commands.

Usage:
    flask users create-admin                          # Bootstrap a platform administrator
    flask users create <email> --store <slug> --role Attendant
    flask users link <email> --store <slug> --role Manager
    flask users list                                  # List all users
    flask users list --store <slug>                   # List users of a store
"""
import click

from orderdesk.extensions import db


def _find_store(slug):
    from orderdesk.blueprints.stores.models import Store

    store = Store.query.filter_by(slug=slug).first()
    if not store:
        click.echo(f"Error: Store '{slug}' not found.", err=True)
        raise SystemExit(1)
    return store


def _find_role(name):
    from orderdesk.blueprints.rbac.models import Role

    role = Role.query.filter_by(name=name).first()
    if not role:
        click.echo(f"Error: Role '{name}' not found. Run 'flask seed roles' first.", err=True)
        raise SystemExit(1)
    return role


def _link(user, store, role):
    from orderdesk.blueprints.stores.models import StoreUser

    link = StoreUser.query.filter_by(user_id=user.id, store_id=store.id).first()
    if link:
        link.role_id = role.id
    else:
        db.session.add(StoreUser(user_id=user.id, store_id=store.id, role_id=role.id))


def register_user_commands(app):
    """Register user-related CLI commands."""

    @app.cli.group()
    def users():
        """User management commands."""
        pass

    @users.command('create-admin')
    @click.option('--email', prompt='Admin email', help='Email for the administrator')
    @click.option('--name', prompt='Full name', help='Full name of the administrator')
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
    def create_admin(email, name, password):
        """Create a platform administrator.

        Administrators manage stores and staff and hold every permission
        in every store. The default roles are seeded as well.
        """
        from orderdesk.blueprints.users.models import User
        from orderdesk.blueprints.rbac.services import RoleService

        email = email.strip().lower()
        if User.query.filter_by(email=email).first():
            click.echo(f"Error: User with email '{email}' already exists.", err=True)
            raise SystemExit(1)

        user = User(email=email, full_name=name, is_active=True, is_platform_admin=True)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()

        created = RoleService.seed_default_roles()

        click.echo(f"Platform administrator created: {user.email}")
        if created:
            click.echo(f"Default roles created: {created}")

    @users.command('create')
    @click.argument('email')
    @click.option('--store', '-s', required=True, help='Store slug')
    @click.option('--role', '-r', required=True, help='Role name (e.g. Manager, Attendant)')
    @click.option('--name', '-n', default=None, help='Full name (defaults to the email local part)')
    @click.option('--password', '-p', prompt=True, hide_input=True, confirmation_prompt=True)
    def create_user(email, store, role, name, password):
        """Create a user and link them to a store.

        EMAIL: Email address for the new user
        """
        from orderdesk.blueprints.users.models import User

        email = email.strip().lower()
        if User.query.filter_by(email=email).first():
            click.echo(f"Error: User with email '{email}' already exists.", err=True)
            raise SystemExit(1)

        store_obj = _find_store(store)
        role_obj = _find_role(role)

        user = User(email=email, full_name=name or email.split('@')[0], is_active=True)
        user.set_password(password)
        db.session.add(user)
        db.session.flush()

        _link(user, store_obj, role_obj)
        db.session.commit()

        click.echo(f"User created: {user.email} ({role_obj.name} in {store_obj.slug})")

    @users.command('link')
    @click.argument('email')
    @click.option('--store', '-s', required=True, help='Store slug')
    @click.option('--role', '-r', required=True, help='Role name')
    def link_user(email, store, role):
        """Link an existing user to a store, or change their role there."""
        from orderdesk.blueprints.users.models import User

        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user:
            click.echo(f"Error: User '{email}' not found.", err=True)
            raise SystemExit(1)

        store_obj = _find_store(store)
        role_obj = _find_role(role)

        _link(user, store_obj, role_obj)
        db.session.commit()

        click.echo(f"{user.email} is now {role_obj.name} in {store_obj.slug}")

    @users.command('list')
    @click.option('--store', '-s', default=None, help='Only users of this store')
    def list_users(store):
        """List users with their stores and roles."""
        from orderdesk.blueprints.users.models import User
        from orderdesk.blueprints.stores.models import StoreUser

        if store:
            store_obj = _find_store(store)
            links = StoreUser.query.filter_by(store_id=store_obj.id).all()
            if not links:
                click.echo(f"No users in store '{store_obj.slug}'.")
                return
            for link in sorted(links, key=lambda l: l.user.email):
                status = "active" if link.user.is_active else "inactive"
                click.echo(f"  {link.user.email:<35} {link.role.name:<12} {status}")
            return

        all_users = User.query.order_by(User.email).all()
        if not all_users:
            click.echo("No users found.")
            return

        for user in all_users:
            flags = []
            if user.is_platform_admin:
                flags.append("admin")
            if not user.is_active:
                flags.append("inactive")
            stores = ", ".join(f"{a.store.slug}:{a.role.name}" for a in user.store_assignments) or "-"
            suffix = f" [{', '.join(flags)}]" if flags else ""
            click.echo(f"  {user.email:<35} {stores}{suffix}")
