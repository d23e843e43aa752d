"""
Tag schemas for request/response validation.
"""

from marshmallow import Schema, fields, validate

HEX_COLOR = validate.Regexp(r"^#[0-9a-fA-F]{6}$", error="Color must be a hex value like #ff8800")


class TagResponseSchema(Schema):
    id = fields.UUID()
    name = fields.String()
    color = fields.String()


class CreateTagSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    color = fields.String(load_default="#6b7280", validate=HEX_COLOR)


class UpdateTagSchema(Schema):
    name = fields.String(validate=validate.Length(min=1, max=100))
    color = fields.String(validate=HEX_COLOR)
