"""
Shared helpers: JWT access tokens, digit normalization, money rounding and
pagination arithmetic.

Tokens are encoded with PyJWT. Only short-lived access tokens are issued;
signing in again is how a session is renewed.
"""

import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from uuid import UUID, uuid4

import jwt
from flask import current_app


class TokenExpiredError(Exception):
    """The token's ``exp`` claim is in the past."""


class InvalidTokenError(Exception):
    """Bad signature, wrong algorithm or not a JWT at all."""


def _token_settings():
    config = current_app.config
    return config["JWT_SECRET_KEY"], config["JWT_ALGORITHM"], config["JWT_ACCESS_TOKEN_EXPIRES"]


def generate_access_token(user_id: UUID, is_platform_admin: bool = False) -> str:
    """
    Sign an access token for ``user_id`` valid for JWT_ACCESS_TOKEN_EXPIRES seconds.

    The admin flag is informational for clients; requests re-read it from
    the user row.
    """
    secret, algorithm, lifetime = _token_settings()
    issued = datetime.now(timezone.utc)

    claims = {
        "jti": uuid4().hex,
        "type": "access",
        "user_id": str(user_id),
        "is_platform_admin": bool(is_platform_admin),
        "iat": issued,
        "exp": issued + timedelta(seconds=lifetime),
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


def decode_token(token: str) -> dict:
    """Verified claims of ``token``; PyJWT failures are mapped to our two errors."""
    secret, algorithm, _ = _token_settings()
    try:
        return jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError(f"Invalid token: {e}")


def only_digits(value: Optional[str]) -> str:
    """Strip everything but digits: "(11) 98765-4321" -> "11987654321"."""
    return re.sub(r"\D", "", value or "")


def safe_search_term(value: Optional[str]) -> str:
    """Remove characters that would change the meaning of a LIKE pattern."""
    return (value or "").replace("%", "").replace("'", "").replace("_", "").strip()


CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    """Round to cents, half up. Accepts Decimal, int, float or numeric strings."""
    if value is None or value == "":
        return Decimal("0.00")
    if isinstance(value, float):
        value = repr(value)
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def page_count(total: int, per_page: int) -> int:
    return (total + per_page - 1) // per_page if total > 0 else 1


def page_size(requested: Optional[int]) -> int:
    """The page size to use: DEFAULT_PAGE_SIZE when not given, never above MAX_PAGE_SIZE."""
    config = current_app.config
    return min(requested or config["DEFAULT_PAGE_SIZE"], config["MAX_PAGE_SIZE"])
