"""
Role management routes.

Roles form a fixed set seeded with the application. Their names and
permission matrices can be edited; creating and deleting roles is refused.
"""

from flask import Blueprint, request, jsonify
from marshmallow import ValidationError

from orderdesk.blueprints.rbac.services import RoleService, describe_role
from orderdesk.blueprints.rbac.schemas import RoleResponseSchema, UpdateRoleSchema, PermissionChangeSchema
from orderdesk.core.constants import Modules, Actions
from orderdesk.core.decorators import require_permission, current_context
from orderdesk.core.exceptions import ValidationError as AppValidationError, RoleMutationNotSupportedError

rbac_bp = Blueprint("rbac", __name__)


@rbac_bp.route("/roles", methods=["GET"])
@require_permission(Modules.SETTINGS, Actions.READ)
def list_roles():
    """
    List all roles.

    Returns:
        Roles with normalized permissions, per-module level and the
        checkboxes the editor shows disabled
    """
    roles = [describe_role(role) for role in RoleService.list_roles()]
    return jsonify({"roles": RoleResponseSchema(many=True).dump(roles)}), 200


@rbac_bp.route("/roles/<uuid:role_id>", methods=["GET"])
@require_permission(Modules.SETTINGS, Actions.READ)
def get_role(role_id):
    role = RoleService.get_role(role_id)
    return jsonify(RoleResponseSchema().dump(describe_role(role))), 200


@rbac_bp.route("/roles/<uuid:role_id>", methods=["PUT"])
@require_permission(Modules.SETTINGS, Actions.UPDATE)
def update_role(role_id):
    """
    Update a role's name, description or permissions.

    Request body:
        name: New name (optional)
        description: New description (optional)
        permissions: Full matrix in any accepted shape (optional)
    """
    try:
        data = UpdateRoleSchema().load(request.get_json() or {})
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    role = RoleService.update_role(current_context(), role_id, **data)
    return jsonify(RoleResponseSchema().dump(describe_role(role))), 200


@rbac_bp.route("/roles", methods=["POST"])
@require_permission(Modules.SETTINGS, Actions.UPDATE)
def create_role():
    raise RoleMutationNotSupportedError()


@rbac_bp.route("/roles/<uuid:role_id>", methods=["DELETE"])
@require_permission(Modules.SETTINGS, Actions.UPDATE)
def delete_role(role_id):
    raise RoleMutationNotSupportedError()


@rbac_bp.route("/roles/preview-change", methods=["POST"])
@require_permission(Modules.SETTINGS, Actions.READ)
def preview_permission_change():
    """
    Apply one checkbox toggle to a matrix without saving it.

    Request body:
        permissions: Matrix being edited
        module: Module of the checkbox
        action: Action of the checkbox
        value: New checkbox state

    Returns:
        The matrix after the cascade rules, plus disabled checkboxes
    """
    try:
        data = PermissionChangeSchema().load(request.get_json() or {})
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    result = RoleService.preview_change(data["permissions"], data["module"], data["action"], data["value"])
    return jsonify(result), 200
