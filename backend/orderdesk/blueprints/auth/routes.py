"""
Authentication routes.
"""

from flask import Blueprint, request, jsonify
from marshmallow import ValidationError

from orderdesk.blueprints.auth.services import AuthService
from orderdesk.blueprints.auth.schemas import LoginSchema, TokenResponseSchema
from orderdesk.core.exceptions import ValidationError as AppValidationError

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


@auth_bp.route("/login", methods=["POST"])
def login():
    """
    Sign in with email and password.

    Request body:
        email: User email
        password: User password

    Returns:
        Access token and the user. Pick a store with the X-Store-Slug
        header on subsequent requests.
    """
    try:
        data = LoginSchema().load(request.get_json() or {})
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    result = AuthService.login(data["email"], data["password"])
    return jsonify(TokenResponseSchema().dump(result)), 200
