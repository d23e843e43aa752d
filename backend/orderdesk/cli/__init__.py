"""
CLI commands for the backend application.

Available command groups:
    flask db-commands   Database management (create, drop, reset)
    flask seed          Seed data (roles, demo)
    flask users         User management (create-admin, create, link, list)

Usage examples:
    flask users create-admin          # Bootstrap the first platform administrator
    flask seed demo                   # Seed a demo store
    flask users list --store demo
"""


def init_cli(app):
    """Initialize all CLI command groups."""
    from orderdesk.cli.db_commands import register_db_commands
    from orderdesk.cli.seed_commands import register_seed_commands
    from orderdesk.cli.user_commands import register_user_commands

    register_db_commands(app)
    register_seed_commands(app)
    register_user_commands(app)
