"""
Order wizard schemas for request validation.

Dates and enums are validated here and handed to the wizard as the plain
strings it keeps in the draft.
"""

from marshmallow import Schema, fields, validate, post_load

from orderdesk.blueprints.orders.schemas import TIME_FORMAT
from orderdesk.core.constants import BRAZILIAN_STATES


class StartWizardSchema(Schema):
    order_id = fields.UUID(load_default=None, allow_none=True)


class PhoneSchema(Schema):
    phone = fields.String(required=True)


class QuickRegisterSchema(Schema):
    name = fields.String(required=True)
    phone = fields.String(required=True)


class WizardAddressSchema(Schema):
    street = fields.String(load_default="")
    number = fields.String(load_default="")
    complement = fields.String(load_default=None, allow_none=True)
    neighborhood = fields.String(load_default=None, allow_none=True)
    city = fields.String(load_default="")
    state = fields.String(load_default="", validate=validate.OneOf(("",) + BRAZILIAN_STATES))
    postal_code = fields.String(load_default=None, allow_none=True)


class DeliveryDetailsSchema(Schema):
    delivery_type = fields.String(validate=validate.OneOf(["pickup", "delivery"]))
    delivery_date = fields.Date()
    delivery_time = fields.String(validate=TIME_FORMAT)
    address_id = fields.UUID(allow_none=True)

    @post_load
    def to_draft(self, data, **kwargs):
        if "delivery_date" in data:
            data["delivery_date"] = data["delivery_date"].isoformat()
        if data.get("address_id") is not None:
            data["address_id"] = str(data["address_id"])
        return data


class AddItemSchema(Schema):
    product_id = fields.UUID(required=True)
    quantity = fields.Integer(load_default=1, validate=validate.Range(min=1))
    note = fields.String(load_default=None, allow_none=True)
    selections = fields.Dict(keys=fields.String(), values=fields.String(), load_default=dict)


class PaymentSchema(Schema):
    shipping_fee = fields.Decimal(places=2, validate=validate.Range(min=0))
    discount = fields.Decimal(places=2, validate=validate.Range(min=0))
    payment_status = fields.String(validate=validate.OneOf(["Paid", "Unpaid"]))
    fulfillment_status = fields.String(validate=validate.OneOf(["Delivered", "Not Delivered"]))
    note = fields.String(allow_none=True)
    tag_ids = fields.List(fields.UUID())

    @post_load
    def to_draft(self, data, **kwargs):
        for money in ("shipping_fee", "discount"):
            if money in data:
                data[money] = str(data[money])
        if "tag_ids" in data:
            data["tag_ids"] = [str(tid) for tid in data["tag_ids"]]
        return data
