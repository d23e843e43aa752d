"""
Customer schemas for request/response validation.
"""

from marshmallow import Schema, fields, validate

from orderdesk.core.constants import BRAZILIAN_STATES


class AddressResponseSchema(Schema):
    id = fields.UUID()
    customer_id = fields.UUID()
    street = fields.String()
    number = fields.String()
    complement = fields.String(allow_none=True)
    neighborhood = fields.String(allow_none=True)
    city = fields.String()
    state = fields.String()
    postal_code = fields.String(allow_none=True)
    is_principal = fields.Boolean()


class CustomerResponseSchema(Schema):
    """Schema for customer data in responses."""
    id = fields.UUID()
    name = fields.String()
    phone = fields.String()
    email = fields.String(allow_none=True)
    note = fields.String(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class TagBriefSchema(Schema):
    id = fields.UUID()
    name = fields.String()
    color = fields.String()


class CustomerSummarySchema(Schema):
    order_count = fields.Integer()
    total_spent = fields.Decimal(places=2, as_string=True)
    average_ticket = fields.Decimal(places=2, as_string=True)
    tags = fields.List(fields.Nested(TagBriefSchema))


class CustomerDetailResponseSchema(CustomerResponseSchema):
    """Customer with addresses and order summary."""
    addresses = fields.List(fields.Nested(AddressResponseSchema))
    summary = fields.Nested(CustomerSummarySchema)


class CustomerListResponseSchema(Schema):
    customers = fields.List(fields.Nested(CustomerResponseSchema))
    total = fields.Integer()
    page = fields.Integer()
    per_page = fields.Integer()
    pages = fields.Integer()


class CustomerListQuerySchema(Schema):
    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    per_page = fields.Integer(load_default=None, validate=validate.Range(min=1))
    search = fields.String(load_default=None)


class CreateCustomerSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=255))
    phone = fields.String(required=True, validate=validate.Length(min=1, max=30))
    email = fields.Email(load_default=None, allow_none=True)
    note = fields.String(load_default=None, allow_none=True)


class UpdateCustomerSchema(Schema):
    name = fields.String(validate=validate.Length(min=1, max=255))
    phone = fields.String(validate=validate.Length(min=1, max=30))
    email = fields.Email(allow_none=True)
    note = fields.String(allow_none=True)


class AddressSchema(Schema):
    """Schema for creating an address."""
    street = fields.String(required=True, validate=validate.Length(min=1, max=255))
    number = fields.String(required=True, validate=validate.Length(min=1, max=20))
    complement = fields.String(load_default=None, allow_none=True)
    neighborhood = fields.String(load_default=None, allow_none=True)
    city = fields.String(required=True, validate=validate.Length(min=1, max=255))
    state = fields.String(required=True, validate=validate.OneOf(BRAZILIAN_STATES))
    postal_code = fields.String(load_default=None, allow_none=True)
    is_principal = fields.Boolean(load_default=False)


class UpdateAddressSchema(Schema):
    street = fields.String(validate=validate.Length(min=1, max=255))
    number = fields.String(validate=validate.Length(min=1, max=20))
    complement = fields.String(allow_none=True)
    neighborhood = fields.String(allow_none=True)
    city = fields.String(validate=validate.Length(min=1, max=255))
    state = fields.String(validate=validate.OneOf(BRAZILIAN_STATES))
    postal_code = fields.String(allow_none=True)
    is_principal = fields.Boolean()


class PhoneLookupQuerySchema(Schema):
    phone = fields.String(required=True)
