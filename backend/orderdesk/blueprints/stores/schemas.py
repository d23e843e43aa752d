"""
Store administration payloads.
"""

from marshmallow import Schema, fields, validate


class StoreResponseSchema(Schema):
    """A store as shown to platform administrators."""
    id = fields.UUID()
    name = fields.String()
    slug = fields.String()
    is_active = fields.Boolean()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class CreateStoreSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=255))
    slug = fields.String(validate=validate.Length(min=1, max=100), load_default=None)


class UpdateStoreSchema(Schema):
    name = fields.String(validate=validate.Length(min=1, max=255))
    slug = fields.String(validate=validate.Length(min=1, max=100))
    is_active = fields.Boolean()


class StoreListResponseSchema(Schema):
    stores = fields.List(fields.Nested(StoreResponseSchema))
    total = fields.Integer()
    page = fields.Integer()
    per_page = fields.Integer()
    pages = fields.Integer()


class StoreListQuerySchema(Schema):
    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    per_page = fields.Integer(load_default=20, validate=validate.Range(min=1, max=100))
    search = fields.String(load_default=None)
    is_active = fields.Boolean(load_default=None)


class CreateStoreUserSchema(Schema):
    """A new staff account, linked to the given stores with one role."""
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=6))
    full_name = fields.String(validate=validate.Length(max=255), load_default=None)
    role_id = fields.UUID(required=True)
    store_ids = fields.List(fields.UUID(), required=True, validate=validate.Length(min=1))


class LinkUserSchema(Schema):
    user_id = fields.UUID(required=True)
    role_id = fields.UUID(required=True)
