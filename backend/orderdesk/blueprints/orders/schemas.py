"""
Order schemas for request/response validation.
"""

from marshmallow import Schema, fields, validate, validates_schema, ValidationError

from orderdesk.blueprints.orders.models import DeliveryType, PaymentStatus, FulfillmentStatus
from orderdesk.blueprints.orders.services import SCOPE_OPEN, SCOPE_COMPLETED

TIME_FORMAT = validate.Regexp(r"^([01]\d|2[0-3]):[0-5]\d$", error="Time must be HH:MM")


class CustomerBriefSchema(Schema):
    id = fields.UUID()
    name = fields.String()
    phone = fields.String()


class AddressBriefSchema(Schema):
    id = fields.UUID()
    street = fields.String()
    number = fields.String()
    complement = fields.String(allow_none=True)
    neighborhood = fields.String(allow_none=True)
    city = fields.String()
    state = fields.String()
    postal_code = fields.String(allow_none=True)


class TagBriefSchema(Schema):
    id = fields.UUID()
    name = fields.String()
    color = fields.String()


class ComplementSnapshotSchema(Schema):
    id = fields.String()
    name = fields.String()
    additional_price = fields.String()
    group_id = fields.String()
    group_name = fields.String()


class OrderItemResponseSchema(Schema):
    id = fields.UUID()
    product_id = fields.UUID(allow_none=True)
    product_name = fields.String()
    quantity = fields.Integer()
    unit_price = fields.Decimal(places=2, as_string=True)
    line_total = fields.Decimal(places=2, as_string=True)
    note = fields.String(allow_none=True)
    complements = fields.List(fields.Nested(ComplementSnapshotSchema))


class OrderSummarySchema(Schema):
    """Order row for lists and the board."""
    id = fields.UUID()
    order_number = fields.Integer()
    customer = fields.Nested(CustomerBriefSchema)
    delivery_type = fields.Enum(DeliveryType, by_value=True)
    delivery_date = fields.Date(allow_none=True)
    delivery_time = fields.String(allow_none=True)
    total = fields.Decimal(places=2, as_string=True)
    payment_status = fields.Enum(PaymentStatus, by_value=True)
    fulfillment_status = fields.Enum(FulfillmentStatus, by_value=True)
    tags = fields.List(fields.Nested(TagBriefSchema))


class OrderDetailSchema(OrderSummarySchema):
    """Full order with items, address and money breakdown."""
    customer_id = fields.UUID()
    address_id = fields.UUID(allow_none=True)
    address = fields.Nested(AddressBriefSchema, attribute="delivery_address_snapshot", allow_none=True)
    items = fields.List(fields.Nested(OrderItemResponseSchema))
    subtotal = fields.Decimal(places=2, as_string=True)
    shipping_fee = fields.Decimal(places=2, as_string=True)
    discount = fields.Decimal(places=2, as_string=True)
    note = fields.String(allow_none=True)
    created_by_name = fields.String(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class OrderListResponseSchema(Schema):
    orders = fields.List(fields.Nested(OrderSummarySchema))
    total = fields.Integer()
    page = fields.Integer()
    per_page = fields.Integer()
    pages = fields.Integer()


class OrderListQuerySchema(Schema):
    """Schema for order list query parameters."""
    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    per_page = fields.Integer(load_default=None, validate=validate.Range(min=1))
    search = fields.String(load_default=None)
    payment_status = fields.Enum(PaymentStatus, by_value=True, load_default=None)
    fulfillment_status = fields.Enum(FulfillmentStatus, by_value=True, load_default=None)
    delivery_type = fields.Enum(DeliveryType, by_value=True, load_default=None)
    scope = fields.String(load_default=None, validate=validate.OneOf([SCOPE_OPEN, SCOPE_COMPLETED]))
    date_from = fields.Date(load_default=None)
    date_to = fields.Date(load_default=None)
    tag_ids = fields.List(fields.UUID(), load_default=None)
    customer_id = fields.UUID(load_default=None)


class OrderItemInputSchema(Schema):
    product_id = fields.UUID(required=True)
    quantity = fields.Integer(load_default=1, validate=validate.Range(min=1))
    note = fields.String(load_default=None, allow_none=True)
    # slot_id -> option_id
    selections = fields.Dict(keys=fields.String(), values=fields.String(), load_default=dict)


class OrderWriteSchema(Schema):
    """Schema for creating or fully replacing an order."""
    customer_id = fields.UUID(required=True)
    delivery_type = fields.Enum(DeliveryType, by_value=True, load_default=DeliveryType.PICKUP)
    delivery_date = fields.Date(required=True)
    delivery_time = fields.String(required=True, validate=TIME_FORMAT)
    address_id = fields.UUID(load_default=None, allow_none=True)
    items = fields.List(fields.Nested(OrderItemInputSchema), required=True, validate=validate.Length(min=1))
    shipping_fee = fields.Decimal(load_default=0, places=2)
    discount = fields.Decimal(load_default=0, places=2)
    payment_status = fields.Enum(PaymentStatus, by_value=True, load_default=PaymentStatus.UNPAID)
    fulfillment_status = fields.Enum(FulfillmentStatus, by_value=True, load_default=FulfillmentStatus.NOT_DELIVERED)
    note = fields.String(load_default=None, allow_none=True)
    tag_ids = fields.List(fields.UUID(), load_default=list)


class OrderStatusSchema(Schema):
    payment_status = fields.Enum(PaymentStatus, by_value=True)
    fulfillment_status = fields.Enum(FulfillmentStatus, by_value=True)
    tag_ids = fields.List(fields.UUID())

    @validates_schema
    def validate_not_empty(self, data, **kwargs):
        if not data:
            raise ValidationError("Provide payment_status, fulfillment_status or tag_ids")


class OrderTagsSchema(Schema):
    tag_ids = fields.List(fields.UUID(), required=True)


class BoardQuerySchema(Schema):
    today = fields.Date(load_default=None)


class OpenOrderSchema(Schema):
    order_id = fields.UUID(required=True)
