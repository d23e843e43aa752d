"""
Role service: reading and editing the fixed set of roles.
"""

from typing import List, Optional
from uuid import UUID

from flask import current_app

from orderdesk.extensions import db
from orderdesk.blueprints.rbac.models import Role
from orderdesk.core.constants import DEFAULT_ROLES, ALL_MODULES
from orderdesk.core.permissions import (
    PermissionContext,
    apply_permission_change,
    disabled_actions,
    normalize_permissions,
    permission_level,
)
from orderdesk.core.exceptions import RoleNotFoundError, DuplicateResourceError


def describe_role(role: Role) -> dict:
    """Role with normalized permissions and a per-module level summary."""
    permissions = normalize_permissions(role.permissions)
    return {
        "id": role.id,
        "name": role.name,
        "description": role.description,
        "permissions": permissions,
        "levels": {module: permission_level(permissions[module]) for module in ALL_MODULES},
        "disabled": {module: sorted(disabled_actions(permissions[module])) for module in ALL_MODULES},
        "updated_at": role.updated_at,
    }


class RoleService:
    """Service handling role operations."""

    @staticmethod
    def list_roles() -> List[Role]:
        return db.session.query(Role).order_by(Role.name.asc()).all()

    @staticmethod
    def get_role(role_id: UUID) -> Role:
        """
        Raises:
            RoleNotFoundError: If role not found
        """
        role = db.session.get(Role, role_id)
        if not role:
            raise RoleNotFoundError()
        return role

    @staticmethod
    def update_role(
        context: PermissionContext,
        role_id: UUID,
        name: Optional[str] = None,
        description: Optional[str] = None,
        permissions: Optional[dict] = None
    ) -> Role:
        """
        Rename a role or replace its permission matrix.

        Permissions in any accepted shape are normalized before being
        stored, so reloading the role reproduces the same matrix.

        Raises:
            RoleNotFoundError: If role not found
            DuplicateResourceError: If another role already has the name
        """
        role = RoleService.get_role(role_id)

        if name is not None and name.strip() != role.name:
            name = name.strip()
            taken = db.session.query(Role).filter(Role.name == name, Role.id != role.id).first()
            if taken:
                raise DuplicateResourceError(f"Role '{name}' already exists")
            role.name = name

        if description is not None:
            role.description = description

        if permissions is not None:
            role.permissions = normalize_permissions(permissions)

        db.session.commit()

        current_app.logger.info("Role %s updated by %s", role.name, context.user_name)
        return role

    @staticmethod
    def preview_change(permissions: dict, module: str, action: str, value: bool) -> dict:
        """
        Run one checkbox toggle through the editor rules without saving.

        Returns:
            Dict with the resulting permissions and the disabled checkboxes
        """
        updated = apply_permission_change(normalize_permissions(permissions), module, action, value)
        return {
            "permissions": updated,
            "disabled": {m: sorted(disabled_actions(updated.get(m))) for m in ALL_MODULES},
        }

    @staticmethod
    def seed_default_roles() -> int:
        """Create the default roles that do not exist yet. Returns how many were created."""
        created = 0
        for name, definition in DEFAULT_ROLES.items():
            if db.session.query(Role).filter(Role.name == name).first():
                continue
            db.session.add(Role(
                name=name,
                description=definition["description"],
                permissions=normalize_permissions(definition["permissions"]),
            ))
            created += 1
        db.session.commit()
        return created
