from marshmallow import Schema, fields, validates_schema, ValidationError


class SummaryQuerySchema(Schema):
    date_from = fields.Date(load_default=None)
    date_to = fields.Date(load_default=None)

    @validates_schema
    def validate_range(self, data, **kwargs):
        if data.get("date_from") and data.get("date_to") and data["date_from"] > data["date_to"]:
            raise ValidationError("date_from must not be after date_to", "date_from")


class SummaryResponseSchema(Schema):
    date_from = fields.Date(allow_none=True)
    date_to = fields.Date(allow_none=True)
    order_count = fields.Integer()
    order_total = fields.Decimal(places=2, as_string=True)
    open_orders = fields.Integer()
    delivered_unpaid = fields.Integer()
    customer_count = fields.Integer()
