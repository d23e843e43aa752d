"""
Collaborators of the order wizard.

``OrderGateway`` lists what the wizard needs from the outside world; values
crossing it are JSON-friendly dicts (ids and amounts as strings) so they can
be stored in the draft as-is. ``DatabaseOrderGateway`` implements it on top
of the application services for one PermissionContext.
"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from orderdesk.blueprints.customers.services import CustomerService
from orderdesk.blueprints.orders.models import DeliveryType, PaymentStatus, FulfillmentStatus
from orderdesk.blueprints.orders.services import OrderService
from orderdesk.core.permissions import PermissionContext
from orderdesk.core.postal import lookup_postal_code


class OrderGateway:
    """Interface the wizard depends on."""

    def find_customer_by_phone(self, phone: str) -> Optional[dict]:
        raise NotImplementedError

    def create_customer(self, name: str, phone: str) -> dict:
        raise NotImplementedError

    def list_addresses(self, customer_id: str) -> List[dict]:
        raise NotImplementedError

    def create_address(self, customer_id: str, fields: dict) -> dict:
        raise NotImplementedError

    def lookup_postal_code(self, code: str) -> dict:
        raise NotImplementedError

    def product_slots(self, product_id) -> dict:
        raise NotImplementedError

    def build_item(self, product_id, quantity: int, note: Optional[str], selections: dict) -> dict:
        raise NotImplementedError

    def load_order(self, order_id) -> dict:
        raise NotImplementedError

    def create_order(self, header: dict, items: List[dict]) -> dict:
        raise NotImplementedError

    def replace_order(self, order_id, header: dict, items: List[dict]) -> dict:
        raise NotImplementedError


def customer_dict(customer) -> dict:
    return {"id": str(customer.id), "name": customer.name, "phone": customer.phone}


def address_dict(address) -> dict:
    return {
        "id": str(address.id),
        "street": address.street,
        "number": address.number,
        "complement": address.complement,
        "neighborhood": address.neighborhood,
        "city": address.city,
        "state": address.state,
        "postal_code": address.postal_code,
        "is_principal": address.is_principal,
    }


class DatabaseOrderGateway(OrderGateway):
    """Gateway backed by the store's database rows."""

    def __init__(self, context: PermissionContext):
        self.context = context

    def find_customer_by_phone(self, phone):
        customer = CustomerService.find_by_phone(self.context, phone)
        return customer_dict(customer) if customer else None

    def create_customer(self, name, phone):
        return customer_dict(CustomerService.create_customer(self.context, name=name, phone=phone))

    def list_addresses(self, customer_id):
        return [address_dict(a) for a in CustomerService.list_addresses(self.context, UUID(str(customer_id)))]

    def create_address(self, customer_id, fields):
        address = CustomerService.create_address(self.context, UUID(str(customer_id)), fields)
        return address_dict(address)

    def lookup_postal_code(self, code):
        return lookup_postal_code(code)

    def product_slots(self, product_id):
        result = OrderService.product_slots(self.context, UUID(str(product_id)))
        product = result["product"]
        slots = [
            dict(slot, options=[dict(o, additional_price=str(o["additional_price"])) for o in slot["options"]])
            for slot in result["slots"]
        ]
        return {
            "product": {"id": str(product.id), "name": product.name, "price": str(product.price)},
            "slots": slots,
        }

    def build_item(self, product_id, quantity, note, selections):
        return OrderService.build_item(self.context, UUID(str(product_id)), quantity, note, selections)

    def load_order(self, order_id):
        order = OrderService.get_order(self.context, UUID(str(order_id)))
        return {
            "customer": customer_dict(order.customer),
            "delivery_type": order.delivery_type.value,
            "delivery_date": order.delivery_date.isoformat() if order.delivery_date else "",
            "delivery_time": order.delivery_time or "",
            "address_id": str(order.address_id) if order.address_id else None,
            "items": [
                {
                    "id": item.id.hex,
                    "product_id": str(item.product_id) if item.product_id else None,
                    "product_name": item.product_name,
                    "quantity": item.quantity,
                    "note": item.note,
                    "selections": {},
                    "complements": item.complements or [],
                    "unit_price": str(item.unit_price),
                    "line_total": str(item.line_total),
                }
                for item in order.items
            ],
            "shipping_fee": str(order.shipping_fee),
            "discount": str(order.discount),
            "payment_status": order.payment_status.value,
            "fulfillment_status": order.fulfillment_status.value,
            "note": order.note,
            "tag_ids": [str(tag.id) for tag in order.tags],
        }

    @staticmethod
    def _service_data(header: dict) -> dict:
        return {
            "customer_id": UUID(header["customer_id"]),
            "delivery_type": DeliveryType(header["delivery_type"]),
            "delivery_date": date.fromisoformat(header["delivery_date"]),
            "delivery_time": header["delivery_time"],
            "address_id": UUID(header["address_id"]) if header.get("address_id") else None,
            "shipping_fee": header["shipping_fee"],
            "discount": header["discount"],
            "payment_status": PaymentStatus(header["payment_status"]),
            "fulfillment_status": FulfillmentStatus(header["fulfillment_status"]),
            "note": header.get("note"),
            "tag_ids": header.get("tag_ids") or [],
        }

    def create_order(self, header, items):
        order = OrderService.create_order(self.context, self._service_data(header), items)
        return {"id": str(order.id), "order_number": order.order_number}

    def replace_order(self, order_id, header, items):
        order = OrderService.replace_order(self.context, UUID(str(order_id)), self._service_data(header), items)
        return {"id": str(order.id), "order_number": order.order_number}
