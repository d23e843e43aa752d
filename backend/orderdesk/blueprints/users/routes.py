"""
User routes: own profile and store membership management.
"""

from flask import Blueprint, request, jsonify
from marshmallow import ValidationError

from orderdesk.blueprints.users.services import UserService
from orderdesk.blueprints.users.schemas import (
    AssignRoleSchema,
    ChangePasswordSchema,
    CreateMemberSchema,
    ProfileResponseSchema,
    StoreMemberSchema,
    UpdateMemberSchema,
)
from orderdesk.core.constants import Modules, Actions
from orderdesk.core.decorators import jwt_required, require_permission, current_context
from orderdesk.core.exceptions import ValidationError as AppValidationError

users_bp = Blueprint("users", __name__, url_prefix="/users")


def _load(schema, payload):
    try:
        return schema.load(payload)
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)


@users_bp.route("/me", methods=["GET"])
@jwt_required
def get_me():
    """
    Profile of the signed-in user.

    Returns:
        User, the stores they can open and, with X-Store-Slug, their role
        and permissions in that store
    """
    profile = UserService.get_profile(current_context())
    return jsonify(ProfileResponseSchema().dump(profile)), 200


@users_bp.route("", methods=["GET"])
@require_permission(Modules.SETTINGS, Actions.READ)
def list_store_users():
    """Members of the current store with their roles."""
    links = UserService.list_store_users(current_context())
    return jsonify({"users": StoreMemberSchema(many=True).dump(links)}), 200


@users_bp.route("/<uuid:user_id>/role", methods=["PUT"])
@require_permission(Modules.SETTINGS, Actions.UPDATE)
def assign_role(user_id):
    """
    Change a member's role in the current store.

    Request body:
        role_id: Role UUID
    """
    data = _load(AssignRoleSchema(), request.get_json() or {})

    link = UserService.assign_role(current_context(), user_id, data["role_id"])
    return jsonify(StoreMemberSchema().dump(link)), 200


@users_bp.route("/me/password", methods=["PUT"])
@jwt_required
def change_password():
    """
    Change the signed-in user's password.

    Request body:
        current_password: Password in use now
        new_password: At least 6 characters
        confirm_password: Must equal new_password
    """
    data = _load(ChangePasswordSchema(), request.get_json() or {})

    UserService.change_password(current_context(), data["current_password"], data["new_password"])
    return jsonify({"message": "Password changed"}), 200


@users_bp.route("", methods=["POST"])
@require_permission(Modules.SETTINGS, Actions.UPDATE)
def create_member():
    """
    Create a staff account in the current store.

    Request body:
        email: Login email, must be unused
        password: Initial password
        full_name: Defaults to the part of the email before "@"
        role_id: Role in this store
    """
    data = _load(CreateMemberSchema(), request.get_json() or {})

    link = UserService.create_member(
        current_context(),
        email=data["email"],
        password=data["password"],
        role_id=data["role_id"],
        full_name=data.get("full_name")
    )
    return jsonify(StoreMemberSchema().dump(link)), 201


@users_bp.route("/<uuid:user_id>", methods=["PUT"])
@require_permission(Modules.SETTINGS, Actions.UPDATE)
def update_member(user_id):
    """Change a member's full_name or email."""
    data = _load(UpdateMemberSchema(), request.get_json() or {})

    link = UserService.update_member(current_context(), user_id, **data)
    return jsonify(StoreMemberSchema().dump(link)), 200


@users_bp.route("/<uuid:user_id>", methods=["DELETE"])
@require_permission(Modules.SETTINGS, Actions.UPDATE)
def remove_member(user_id):
    """Remove a member from the current store. Their account is kept."""
    UserService.remove_member(current_context(), user_id)
    return jsonify({"message": "User removed from store"}), 200
