"""
User schemas for request/response validation.
"""

from marshmallow import Schema, fields, validate, validates_schema, ValidationError


class UserResponseSchema(Schema):
    """Schema for user data in responses."""
    id = fields.UUID()
    email = fields.Email()
    full_name = fields.String()
    is_active = fields.Boolean()
    is_platform_admin = fields.Boolean()


class ProfileStoreSchema(Schema):
    id = fields.UUID()
    name = fields.String()
    slug = fields.String()
    role = fields.String(allow_none=True)


class CurrentStoreSchema(Schema):
    store_slug = fields.String()
    role = fields.String(allow_none=True)
    permissions = fields.Dict(keys=fields.String(), values=fields.Dict(keys=fields.String(), values=fields.Boolean()))


class ProfileResponseSchema(Schema):
    id = fields.UUID()
    email = fields.Email()
    full_name = fields.String()
    is_platform_admin = fields.Boolean()
    stores = fields.List(fields.Nested(ProfileStoreSchema))
    current_store = fields.Nested(CurrentStoreSchema, allow_none=True)


class RoleBriefSchema(Schema):
    id = fields.UUID()
    name = fields.String()


class StoreMemberSchema(Schema):
    """A user's link to a store, with their role there."""
    id = fields.UUID()
    user = fields.Nested(UserResponseSchema)
    role = fields.Nested(RoleBriefSchema)
    created_at = fields.DateTime()


class AssignRoleSchema(Schema):
    role_id = fields.UUID(required=True)


class CreateMemberSchema(Schema):
    """A new staff account for the current store."""
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=6))
    full_name = fields.String(validate=validate.Length(max=255), load_default=None)
    role_id = fields.UUID(required=True)


class UpdateMemberSchema(Schema):
    full_name = fields.String(validate=validate.Length(min=1, max=255))
    email = fields.Email()


class ChangePasswordSchema(Schema):
    current_password = fields.String(required=True, load_only=True)
    new_password = fields.String(
        required=True,
        load_only=True,
        validate=validate.Length(min=6, error="Password must be at least 6 characters")
    )
    confirm_password = fields.String(required=True, load_only=True)

    @validates_schema
    def validate_confirmation(self, data, **kwargs):
        if data.get("new_password") != data.get("confirm_password"):
            raise ValidationError("Passwords do not match.", field_name="confirm_password")
