"""
Role schemas for request/response validation.
"""

from marshmallow import Schema, fields, validate

from orderdesk.core.constants import ALL_MODULES, ALL_ACTIONS, MODULE_ALIASES, ACTION_ALIASES


class RoleResponseSchema(Schema):
    id = fields.UUID()
    name = fields.String()
    description = fields.String(allow_none=True)
    permissions = fields.Dict(keys=fields.String(), values=fields.Dict(keys=fields.String(), values=fields.Boolean()))
    levels = fields.Dict(keys=fields.String(), values=fields.String())
    disabled = fields.Dict(keys=fields.String(), values=fields.List(fields.String()))
    updated_at = fields.DateTime()


class UpdateRoleSchema(Schema):
    """Permissions may use any accepted shape: wildcard, action list, legacy or six-action object."""
    name = fields.String(validate=validate.Length(min=1, max=100))
    description = fields.String(allow_none=True)
    permissions = fields.Raw()


class PermissionChangeSchema(Schema):
    permissions = fields.Raw(load_default=dict)
    module = fields.String(required=True, validate=validate.OneOf(ALL_MODULES + tuple(MODULE_ALIASES)))
    action = fields.String(required=True, validate=validate.OneOf(ALL_ACTIONS + tuple(ACTION_ALIASES)))
    value = fields.Boolean(required=True)
