"""
View decorators reading the PermissionContext built by the middleware.

- @jwt_required            any signed-in user
- @require_store           a store selected with X-Store-Slug
- @require_permission      the role in that store grants module.action
- @require_platform_admin  platform administrators only
"""

from functools import wraps
from typing import Union, List

from flask import g

from orderdesk.core.permissions import PermissionContext
from orderdesk.core.exceptions import (
    UnauthorizedError,
    ForbiddenError,
    InsufficientPermissionsError,
    PlatformAdminRequiredError,
)


def current_context() -> PermissionContext:
    """
    Return the request's PermissionContext.

    Raises:
        UnauthorizedError: If no authenticated user in context
    """
    context = getattr(g, "permission_context", None)
    if context is None:
        raise UnauthorizedError()
    return context


def jwt_required(f):
    """Mark a view as needing a signed-in user. AuthMiddleware does the token work."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        current_context()
        return f(*args, **kwargs)
    return decorated_function


def require_store(f):
    """
    Decorator that ensures store context exists (X-Store-Slug header provided).

    Raises:
        UnauthorizedError: If no authenticated user
        ForbiddenError: If no store context
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        context = current_context()
        if context.store_id is None:
            raise ForbiddenError("Store context required. Provide X-Store-Slug header.")
        return f(*args, **kwargs)
    return decorated_function


def require_permission(module: str, action: Union[str, List[str]]):
    """
    Decorator factory that checks the user's role permissions in the current store.

    Args:
        module: Module name (e.g. Modules.ORDERS)
        action: Action name, or list of actions of which at least one is needed

    Usage:
        @require_permission(Modules.ORDERS, Actions.CREATE)
        def create_order():
            ...

        @require_permission(Modules.ORDERS, [Actions.CREATE, Actions.UPDATE])
        def wizard_step():
            ...

    Raises:
        UnauthorizedError: If no authenticated user
        ForbiddenError: If no store context
        InsufficientPermissionsError: If the role lacks every listed action
    """
    actions = [action] if isinstance(action, str) else list(action)

    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            context = current_context()
            if context.store_id is None:
                raise ForbiddenError("Store context required. Provide X-Store-Slug header.")

            if not any(context.can(module, a) for a in actions):
                raise InsufficientPermissionsError(
                    required_permission=f"{module}.{actions[0]}" if len(actions) == 1 else None
                )

            return f(*args, **kwargs)
        return decorated_function
    return decorator


def require_platform_admin(f):
    """
    Decorator for store and user administration across the platform.

    Raises:
        UnauthorizedError: If no authenticated user
        PlatformAdminRequiredError: If the user is not a platform administrator
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        context = current_context()
        if not context.is_platform_admin:
            raise PlatformAdminRequiredError()
        return f(*args, **kwargs)
    return decorated_function
