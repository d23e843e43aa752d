"""
Authentication schemas.
"""

from marshmallow import Schema, fields

from orderdesk.blueprints.users.schemas import UserResponseSchema


class LoginSchema(Schema):
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)


class TokenResponseSchema(Schema):
    access_token = fields.String()
    token_type = fields.String()
    expires_in = fields.Integer()
    user = fields.Nested(UserResponseSchema)
