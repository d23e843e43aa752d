import click
from orderdesk.extensions import db


def register_db_commands(app):
    # Schema management without migrations, for local setups and tests

    @app.cli.group()
    def db_commands():
        """Database related commands."""
        pass

    @db_commands.command('create')
    def create_db():
        """Create the database tables."""
        db.create_all()
        click.echo("Database tables created.")

    @db_commands.command('drop')
    @click.confirmation_option(prompt='Drop every table, including orders?')
    def drop_db():
        """Drop the database tables."""
        db.drop_all()
        click.echo("Database tables dropped.")

    @db_commands.command('reset')
    @click.confirmation_option(prompt='Drop and recreate every table?')
    def reset_db():
        """Drop and recreate the tables, then seed the default roles."""
        from orderdesk.blueprints.rbac.services import RoleService

        db.drop_all()
        db.create_all()
        created = RoleService.seed_default_roles()
        click.echo(f"Database has been reset ({created} default roles).")
