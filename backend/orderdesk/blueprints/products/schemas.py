"""
Catalog schemas for request/response validation.
"""

from marshmallow import Schema, fields, validate


class CategoryResponseSchema(Schema):
    id = fields.UUID()
    name = fields.String()


class CategorySchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=255))


class ProductResponseSchema(Schema):
    """Schema for product data in responses."""
    id = fields.UUID()
    name = fields.String()
    price = fields.Decimal(places=2, as_string=True)
    is_active = fields.Boolean()
    category_id = fields.UUID(allow_none=True)
    category = fields.Nested(CategoryResponseSchema, allow_none=True)
    complement_group_ids = fields.List(fields.String())
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class CreateProductSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=255))
    price = fields.Decimal(required=True, places=2, validate=validate.Range(min=0))
    is_active = fields.Boolean(load_default=True)
    category_id = fields.UUID(load_default=None, allow_none=True)
    complement_group_ids = fields.List(fields.UUID(), load_default=list)


class UpdateProductSchema(Schema):
    name = fields.String(validate=validate.Length(min=1, max=255))
    price = fields.Decimal(places=2, validate=validate.Range(min=0))
    is_active = fields.Boolean()
    category_id = fields.UUID(allow_none=True)
    complement_group_ids = fields.List(fields.UUID())


class ProductListQuerySchema(Schema):
    name = fields.String(load_default=None)
    category_id = fields.UUID(load_default=None)
    is_active = fields.Boolean(load_default=None)


class ComplementOptionResponseSchema(Schema):
    id = fields.UUID()
    name = fields.String()
    additional_price = fields.Decimal(places=2, as_string=True)
    position = fields.Integer()


class ComplementGroupResponseSchema(Schema):
    id = fields.UUID()
    name = fields.String()
    is_required = fields.Boolean()
    options = fields.List(fields.Nested(ComplementOptionResponseSchema))


class ComplementOptionSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=255))
    additional_price = fields.Decimal(load_default=0, places=2, validate=validate.Range(min=0))


class CreateComplementGroupSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=255))
    is_required = fields.Boolean(load_default=False)
    options = fields.List(fields.Nested(ComplementOptionSchema), load_default=list)


class UpdateComplementGroupSchema(Schema):
    name = fields.String(validate=validate.Length(min=1, max=255))
    is_required = fields.Boolean()
    options = fields.List(fields.Nested(ComplementOptionSchema))
