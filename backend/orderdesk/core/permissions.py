"""
Permission matrix evaluation and the role editor's rule engine.

Everything in this module is pure: no database access, no request context.
Permission maps are plain dicts of ``module -> {action: bool}``. Maps coming
from storage or from clients go through :func:`normalize_permissions` first;
the evaluator still tolerates raw shapes so a stale row can never raise.

Implication rules inside one module's action set:

    delete => update => create => read
    status => read
    print  => read
"""

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional
from uuid import UUID

from orderdesk.core.constants import (
    ACTION_ALIASES,
    ALL_ACTIONS,
    ALL_MODULES,
    LEGACY_EDIT_KEYS,
    LEGACY_KEYS,
    LEGACY_MANAGE_KEYS,
    LEGACY_VIEW_KEYS,
    MODULE_ALIASES,
    WILDCARD,
    Actions,
)

ActionSet = Dict[str, bool]
PermissionMap = Dict[str, ActionSet]


def canonical_module(module: str) -> str:
    return MODULE_ALIASES.get(module, module)


def canonical_action(action: str) -> str:
    return ACTION_ALIASES.get(action, action)


def empty_action_set() -> ActionSet:
    return {action: False for action in ALL_ACTIONS}


def full_action_set() -> ActionSet:
    return {action: True for action in ALL_ACTIONS}


def close_action_set(actions: ActionSet) -> ActionSet:
    """Return a copy of ``actions`` with every implied action switched on."""
    closed = dict(actions)
    if closed.get(Actions.DELETE):
        closed[Actions.UPDATE] = True
    if closed.get(Actions.UPDATE):
        closed[Actions.CREATE] = True
    if closed.get(Actions.CREATE) or closed.get(Actions.STATUS) or closed.get(Actions.PRINT):
        closed[Actions.READ] = True
    return closed


def _from_legacy(raw: dict) -> ActionSet:
    view = any(raw.get(key) for key in LEGACY_VIEW_KEYS)
    edit = any(raw.get(key) for key in LEGACY_EDIT_KEYS)
    manage = any(raw.get(key) for key in LEGACY_MANAGE_KEYS)

    # Each level includes the ones below it
    edit = edit or manage
    view = view or edit

    return {
        Actions.READ: view,
        Actions.CREATE: edit,
        Actions.UPDATE: edit,
        Actions.DELETE: manage,
        Actions.STATUS: edit,
        Actions.PRINT: view,
    }


def normalize_action_set(raw: Any) -> ActionSet:
    """
    Convert any accepted representation of one module's permissions.

    Accepted shapes:
        "*"                               every action
        ["read", "create", ...]           listed actions ("*" grants all)
        {"view": .., "edit": .., ...}     legacy three-level object
        {"read": .., "update": .., ...}   six-action object

    Anything else normalizes to no access.
    """
    if raw == WILDCARD:
        return full_action_set()

    if isinstance(raw, (list, tuple, set)):
        names = {canonical_action(str(item)) for item in raw}
        if WILDCARD in names:
            return full_action_set()
        actions = {action: action in names for action in ALL_ACTIONS}
        return close_action_set(actions)

    if isinstance(raw, dict):
        if any(key in raw for key in LEGACY_KEYS) and not any(key in raw for key in ALL_ACTIONS):
            return close_action_set(_from_legacy(raw))

        actions = empty_action_set()
        for key, value in raw.items():
            action = canonical_action(key)
            if action in actions:
                actions[action] = actions[action] or bool(value)
        return close_action_set(actions)

    return empty_action_set()


def normalize_permissions(raw: Any) -> PermissionMap:
    """
    Normalize a stored or submitted permission map to the canonical shape.

    The result always contains every known module, each with every action.
    Module aliases are resolved and unknown modules are dropped.
    """
    if raw == WILDCARD:
        return {module: full_action_set() for module in ALL_MODULES}

    normalized = {module: empty_action_set() for module in ALL_MODULES}
    if not isinstance(raw, dict):
        return normalized

    for key, value in raw.items():
        module = canonical_module(key)
        if module not in normalized:
            continue
        current = normalized[module]
        incoming = normalize_action_set(value)
        normalized[module] = {
            action: current[action] or incoming[action] for action in ALL_ACTIONS
        }
    return normalized


def has_permission(
    permissions: Optional[dict],
    module: str,
    action: str,
    is_platform_admin: bool = False,
) -> bool:
    """
    Decide whether a permission map allows ``action`` on ``module``.

    Args:
        permissions: Permission map (normalized or raw)
        module: Module name, aliases accepted
        action: Action name, aliases accepted
        is_platform_admin: Platform administrators are allowed everything

    Returns:
        True if allowed. Never raises.
    """
    if is_platform_admin:
        return True
    if not isinstance(permissions, dict):
        return False

    module = canonical_module(module)
    entry = permissions.get(module)
    if entry is None:
        # Rows written before the alias rename still use the old module key
        for alias, target in MODULE_ALIASES.items():
            if target == module and alias in permissions:
                entry = permissions[alias]
                break
    if entry is None:
        return False
    if entry == WILDCARD:
        return True

    if not isinstance(entry, dict) or any(key in entry for key in LEGACY_KEYS):
        entry = normalize_action_set(entry)

    action = canonical_action(action)
    if action == Actions.READ:
        return bool(entry.get(Actions.READ) or entry.get(Actions.UPDATE) or entry.get(Actions.DELETE))
    if action == Actions.UPDATE:
        return bool(entry.get(Actions.UPDATE) or entry.get(Actions.DELETE))
    return bool(entry.get(action))


def apply_permission_change(current: dict, module: str, action: str, value: bool) -> PermissionMap:
    """
    Toggle one checkbox of the role editor and apply the cascade rules.

    Turning an action on switches on everything it implies; turning one off
    switches off everything that implies it. The input map is not modified.
    Unknown modules or actions leave the map unchanged.

    Args:
        current: Permission map being edited
        module: Module whose action is toggled
        action: Toggled action
        value: New checkbox state

    Returns:
        A new permission map
    """
    updated = deepcopy(current) if isinstance(current, dict) else {}
    module = canonical_module(module)
    action = canonical_action(action)

    if module not in ALL_MODULES or action not in ALL_ACTIONS:
        return updated

    existing = updated.get(module)
    if isinstance(existing, dict) and not any(key in existing for key in LEGACY_KEYS):
        actions = empty_action_set()
        actions.update({k: bool(v) for k, v in existing.items() if k in actions})
    else:
        actions = normalize_action_set(existing)

    actions[action] = bool(value)

    if action == Actions.DELETE:
        if value:
            actions[Actions.UPDATE] = True
            actions[Actions.CREATE] = True
            actions[Actions.READ] = True
    elif action == Actions.UPDATE:
        if value:
            actions[Actions.CREATE] = True
            actions[Actions.READ] = True
        else:
            actions[Actions.DELETE] = False
    elif action == Actions.CREATE:
        if value:
            actions[Actions.READ] = True
        else:
            actions[Actions.UPDATE] = False
            actions[Actions.DELETE] = False
    elif action == Actions.READ:
        if not value:
            actions[Actions.CREATE] = False
            actions[Actions.UPDATE] = False
            actions[Actions.DELETE] = False
            actions[Actions.STATUS] = False
            actions[Actions.PRINT] = False
    elif value:
        # status and print only need read
        actions[Actions.READ] = True

    updated[module] = actions
    return updated


def disabled_actions(actions: Optional[ActionSet]) -> FrozenSet[str]:
    """
    Checkboxes the role editor renders as disabled for one module.

    An action is locked on while a stronger action that implies it is on.
    """
    actions = actions or {}
    locked = set()
    if actions.get(Actions.CREATE) or actions.get(Actions.UPDATE) or actions.get(Actions.DELETE):
        locked.add(Actions.READ)
    if actions.get(Actions.UPDATE) or actions.get(Actions.DELETE):
        locked.add(Actions.CREATE)
    if actions.get(Actions.DELETE):
        locked.add(Actions.UPDATE)
    return frozenset(locked)


def permission_level(actions: Optional[ActionSet]) -> str:
    """Summarize an action set as ``delete``, ``update``, ``read`` or ``none``."""
    actions = actions or {}
    if actions.get(Actions.DELETE):
        return Actions.DELETE
    if actions.get(Actions.UPDATE):
        return Actions.UPDATE
    if actions.get(Actions.READ):
        return Actions.READ
    return "none"


@dataclass(frozen=True)
class PermissionContext:
    """
    Who is acting, in which store, with which permissions.

    Built once per request by the store middleware and passed explicitly to
    services and the order wizard.
    """
    user_id: UUID
    user_name: str
    is_platform_admin: bool = False
    store_id: Optional[UUID] = None
    store_slug: Optional[str] = None
    role_name: Optional[str] = None
    permissions: PermissionMap = field(default_factory=dict)

    def can(self, module: str, action: str) -> bool:
        return has_permission(self.permissions, module, action, self.is_platform_admin)
