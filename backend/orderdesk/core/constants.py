"""
Permission constants for the role matrix.

A role's permissions are a map of module -> action set, where an action set
holds a boolean per action. Modules and actions are code-defined.

Usage:
    from orderdesk.core.constants import Modules, Actions

    @require_permission(Modules.ORDERS, Actions.CREATE)
    def create_order():
        ...
"""


class Modules:
    """Application areas a role can be granted access to."""

    DASHBOARD = "dashboard"
    ORDERS = "orders"
    CUSTOMERS = "customers"
    PRODUCTS = "products"
    SETTINGS = "settings"


class Actions:
    """Actions a role can perform inside a module."""

    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    STATUS = "status"   # change payment / fulfillment status
    PRINT = "print"


ALL_MODULES = (
    Modules.DASHBOARD,
    Modules.ORDERS,
    Modules.CUSTOMERS,
    Modules.PRODUCTS,
    Modules.SETTINGS,
)

ALL_ACTIONS = (
    Actions.READ,
    Actions.CREATE,
    Actions.UPDATE,
    Actions.DELETE,
    Actions.STATUS,
    Actions.PRINT,
)

# Grants every action of a module, or every module when used as the whole map
WILDCARD = "*"

# Module names still found in roles saved by older clients
MODULE_ALIASES = {
    "pedidos": Modules.ORDERS,
    "clientes": Modules.CUSTOMERS,
    "produtos": Modules.PRODUCTS,
    "configuracoes": Modules.SETTINGS,
}

ACTION_ALIASES = {
    "view": Actions.READ,
    "visualizar": Actions.READ,
    "criar": Actions.CREATE,
    "edit": Actions.UPDATE,
    "editar": Actions.UPDATE,
    "manage": Actions.DELETE,
    "gerenciar": Actions.DELETE,
    "excluir": Actions.DELETE,
    "imprimir": Actions.PRINT,
}

# Keys of the legacy three-level shape (view / edit / manage)
LEGACY_VIEW_KEYS = ("view", "visualizar")
LEGACY_EDIT_KEYS = ("edit", "editar")
LEGACY_MANAGE_KEYS = ("manage", "gerenciar", "excluir")
LEGACY_KEYS = LEGACY_VIEW_KEYS + LEGACY_EDIT_KEYS + LEGACY_MANAGE_KEYS


MANAGER_ROLE = "Manager"
ATTENDANT_ROLE = "Attendant"

# Seeded by `flask seed roles`; new roles cannot be created through the API.
DEFAULT_ROLES = {
    MANAGER_ROLE: {
        "description": "Runs the store: full access to orders, customers and products.",
        "permissions": {
            Modules.DASHBOARD: [Actions.READ],
            Modules.ORDERS: WILDCARD,
            Modules.CUSTOMERS: WILDCARD,
            Modules.PRODUCTS: WILDCARD,
            Modules.SETTINGS: [Actions.READ, Actions.UPDATE],
        },
    },
    ATTENDANT_ROLE: {
        "description": "Takes orders at the counter and keeps customers up to date.",
        "permissions": {
            Modules.DASHBOARD: [],
            Modules.ORDERS: [Actions.READ, Actions.CREATE, Actions.UPDATE, Actions.STATUS],
            Modules.CUSTOMERS: [Actions.READ, Actions.CREATE, Actions.UPDATE],
            Modules.PRODUCTS: [Actions.READ],
            Modules.SETTINGS: [],
        },
    },
}


BRAZILIAN_STATES = (
    "AC", "AL", "AP", "AM", "BA", "CE", "DF", "ES", "GO", "MA", "MT", "MS", "MG", "PA",
    "PB", "PR", "PE", "PI", "RJ", "RN", "RS", "RO", "RR", "SC", "SP", "SE", "TO",
)

PHONE_DIGITS = 11
POSTAL_CODE_DIGITS = 8
