"""
Request checkpoints and JSON error responses.

Every request to the API passes two ``before_request`` hooks, in order:

    AuthMiddleware    Bearer token -> g.user
    StoreMiddleware   X-Store-Slug -> g.permission_context

Views read the outcome through ``orderdesk.core.decorators``. A request
without the store header still gets a context, carrying only the user.
"""

from typing import Optional
from uuid import UUID

from flask import g, request, jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError

from orderdesk.extensions import db
from orderdesk.core.constants import WILDCARD
from orderdesk.core.permissions import PermissionContext, normalize_permissions
from orderdesk.core.utils import decode_token, TokenExpiredError as JWTTokenExpiredError, InvalidTokenError as JWTInvalidTokenError
from orderdesk.core.exceptions import (
    APIError,
    UnauthorizedError,
    TokenExpiredError,
    InvalidTokenError,
    StoreAccessDeniedError,
    StoreNotFoundError,
    UserNotFoundError,
    UserInactiveError,
)


def bearer_token() -> Optional[str]:
    """The token of an ``Authorization: Bearer <token>`` header, if well formed."""
    scheme, _, token = request.headers.get("Authorization", "").strip().partition(" ")
    if scheme.lower() != "bearer" or not token or " " in token.strip():
        return None
    return token.strip()


def load_user(user_id: str):
    """
    The active user a token was issued to.

    Tokens outlive account changes, so the flag is checked on every request.
    """
    from orderdesk.blueprints.users.models import User

    try:
        user = db.session.get(User, UUID(user_id))
    except ValueError:
        raise InvalidTokenError("Malformed user claim")

    if user is None:
        raise UserNotFoundError()
    if not user.is_active:
        raise UserInactiveError()
    return user


def load_store_context(slug: str, user) -> PermissionContext:
    """
    Build the PermissionContext of ``user`` inside the store ``slug``.

    An inactive store is reported exactly like a missing one. Platform
    administrators need no link and receive every permission; for everyone
    else the role of their link is normalized here, once per request.
    """
    from orderdesk.blueprints.stores.models import Store, StoreUser

    store = db.session.query(Store).filter(Store.slug == slug, Store.is_active.is_(True)).first()
    if store is None:
        raise StoreNotFoundError()

    base = dict(user_id=user.id, user_name=user.full_name, store_id=store.id, store_slug=store.slug)

    if user.is_platform_admin:
        return PermissionContext(is_platform_admin=True, permissions=normalize_permissions(WILDCARD), **base)

    link = db.session.query(StoreUser).filter_by(user_id=user.id, store_id=store.id).first()
    if link is None:
        raise StoreAccessDeniedError()

    return PermissionContext(
        role_name=link.role.name,
        permissions=normalize_permissions(link.role.permissions),
        **base
    )


class AuthMiddleware:
    """Reject requests without a valid access token; set ``g.user``."""

    PUBLIC_PATHS = frozenset(["/api/v1/auth/login"])
    PUBLIC_PREFIXES = ("/health", "/static/")

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        app.before_request(self.before_request)

    def is_public(self, path: str) -> bool:
        return path in self.PUBLIC_PATHS or path.startswith(self.PUBLIC_PREFIXES)

    def before_request(self):
        g.user = None
        g.store_slug = None
        g.permission_context = None

        # Preflight requests never carry credentials
        if request.method == "OPTIONS" or self.is_public(request.path):
            return None

        token = bearer_token()
        if token is None:
            raise UnauthorizedError("Missing or malformed Authorization header")

        try:
            claims = decode_token(token)
        except JWTTokenExpiredError:
            raise TokenExpiredError()
        except JWTInvalidTokenError as e:
            raise InvalidTokenError(str(e))

        if claims.get("type") != "access" or not claims.get("user_id"):
            raise InvalidTokenError("Not an access token")

        g.user = load_user(claims["user_id"])
        return None


class StoreMiddleware:
    """Turn the X-Store-Slug header into ``g.permission_context``."""

    HEADER = "X-Store-Slug"

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        app.before_request(self.before_request)

    def before_request(self):
        user = getattr(g, "user", None)
        if user is None:
            return None

        slug = (request.headers.get(self.HEADER) or "").strip().lower()
        if slug:
            g.permission_context = load_store_context(slug, user)
            g.store_slug = g.permission_context.store_slug
        else:
            g.permission_context = PermissionContext(
                user_id=user.id,
                user_name=user.full_name,
                is_platform_admin=user.is_platform_admin,
            )
        return None


def _error(code: str, message: str, status: int):
    return jsonify({"error": code, "message": message}), status


def register_error_handlers(app):
    """Every error leaves the API as ``{"error", "message"}`` JSON."""

    @app.errorhandler(APIError)
    def handle_api_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        current_app.logger.exception("Database error on %s %s", request.method, request.path)
        return _error("database_error", "The change could not be saved. Please try again.", 500)

    @app.errorhandler(404)
    def handle_not_found(error):
        return _error("not_found", "No such endpoint", 404)

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return _error("method_not_allowed", f"{request.method} is not supported here", 405)

    @app.errorhandler(500)
    def handle_internal_error(error):
        return _error("internal_error", "Something went wrong on our side", 500)


def init_middleware(app):
    register_error_handlers(app)

    # The store checkpoint reads g.user, so it is registered second
    AuthMiddleware(app)
    StoreMiddleware(app)
