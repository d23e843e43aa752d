"""
Order service with business logic for orders, their items and tag links.

Creating or replacing an order writes the header, the items and the tag
links in one transaction: either all of them are saved or none is.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, List, Iterable
from uuid import UUID, uuid4

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from orderdesk.extensions import db
from orderdesk.blueprints.orders.models import (
    Order,
    OrderItem,
    DeliveryType,
    PaymentStatus,
    FulfillmentStatus,
)
from orderdesk.blueprints.orders import pricing
from orderdesk.blueprints.orders.board import partition_orders
from orderdesk.blueprints.customers.models import Customer, Address
from orderdesk.blueprints.products.services import ProductService, ComplementGroupService
from orderdesk.blueprints.tags.models import Tag
from orderdesk.blueprints.tags.services import TagService
from orderdesk.core.permissions import PermissionContext
from orderdesk.core.utils import only_digits, safe_search_term, to_money, page_count
from orderdesk.core.exceptions import (
    OrderNotFoundError,
    CustomerNotFoundError,
    ValidationError,
    BadRequestError,
)

SCOPE_OPEN = "open"
SCOPE_COMPLETED = "completed"


def _is_completed():
    return db.and_(
        Order.payment_status == PaymentStatus.PAID,
        Order.fulfillment_status == FulfillmentStatus.DELIVERED
    )


def address_snapshot(address: Optional[Address]) -> Optional[dict]:
    if address is None:
        return None
    return {
        "id": str(address.id),
        "street": address.street,
        "number": address.number,
        "complement": address.complement,
        "neighborhood": address.neighborhood,
        "city": address.city,
        "state": address.state,
        "postal_code": address.postal_code,
    }


class OrderService:
    """Service handling order operations within one store."""

    @staticmethod
    def list_orders(
        context: PermissionContext,
        page: int = 1,
        per_page: int = 50,
        search: Optional[str] = None,
        payment_status: Optional[PaymentStatus] = None,
        fulfillment_status: Optional[FulfillmentStatus] = None,
        delivery_type: Optional[DeliveryType] = None,
        scope: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        tag_ids: Optional[List[UUID]] = None,
        customer_id: Optional[UUID] = None
    ) -> dict:
        """
        List orders with filters and pagination.

        Args:
            context: Acting user and store
            page: Page number (1-indexed)
            per_page: Items per page
            search: Order number when numeric, otherwise customer name
            payment_status: Filter by payment status
            fulfillment_status: Filter by fulfillment status
            delivery_type: Filter by pickup/delivery
            scope: "open" (not both paid and delivered) or "completed"
            date_from: Earliest delivery date, inclusive
            date_to: Latest delivery date, inclusive
            tag_ids: Orders carrying any of these tags
            customer_id: Orders of one customer

        Returns:
            Dict with orders list and pagination info
        """
        query = db.session.query(Order).filter(Order.store_id == context.store_id)

        term = safe_search_term(search)
        if term:
            if only_digits(term) == term:
                query = query.join(Customer, Customer.id == Order.customer_id).filter(
                    db.or_(
                        Order.order_number == int(term),
                        Customer.phone.like(f"%{only_digits(term)}%")
                    )
                )
            else:
                query = query.join(Customer, Customer.id == Order.customer_id).filter(
                    Customer.name.ilike(f"%{term}%")
                )

        if payment_status is not None:
            query = query.filter(Order.payment_status == payment_status)
        if fulfillment_status is not None:
            query = query.filter(Order.fulfillment_status == fulfillment_status)
        if delivery_type is not None:
            query = query.filter(Order.delivery_type == delivery_type)

        if scope == SCOPE_COMPLETED:
            query = query.filter(_is_completed())
        elif scope == SCOPE_OPEN:
            query = query.filter(db.not_(_is_completed()))

        if date_from is not None:
            query = query.filter(Order.delivery_date >= date_from)
        if date_to is not None:
            query = query.filter(Order.delivery_date <= date_to)
        if tag_ids:
            query = query.filter(Order.tags.any(Tag.id.in_(tag_ids)))
        if customer_id is not None:
            query = query.filter(Order.customer_id == customer_id)

        total = query.count()

        orders = query.order_by(
            Order.delivery_date.desc(),
            Order.delivery_time.desc(),
            Order.order_number.desc()
        ).offset((page - 1) * per_page).limit(per_page).all()

        return {
            "orders": orders,
            "total": total,
            "page": page,
            "per_page": per_page,
            "pages": page_count(total, per_page),
        }

    @staticmethod
    def get_order(context: PermissionContext, order_id: UUID) -> Order:
        """
        Raises:
            OrderNotFoundError: If not found in the current store
        """
        order = db.session.query(Order).filter(
            Order.id == order_id,
            Order.store_id == context.store_id
        ).first()

        if not order:
            raise OrderNotFoundError()

        return order

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    @staticmethod
    def product_slots(context: PermissionContext, product_id: UUID) -> dict:
        """The product with one complement selection slot per group reference."""
        product = ProductService.get_product(context, product_id)
        groups = ComplementGroupService.groups_by_id(context, product.complement_group_ids)
        return {
            "product": product,
            "slots": pricing.complement_slots(product.complement_group_ids, groups),
        }

    @staticmethod
    def build_item(
        context: PermissionContext,
        product_id: UUID,
        quantity: int,
        note: Optional[str] = None,
        selections: Optional[dict] = None
    ) -> dict:
        """
        Price one line from the catalog.

        Returns:
            Item dict with a line id, product snapshot, chosen complements,
            unit_price and line_total (as strings with two decimals)

        Raises:
            ProductNotFoundError: If the product is not the store's
            ValidationError: If inactive, quantity < 1, or a required complement is missing
        """
        if quantity is None or int(quantity) < 1:
            raise ValidationError("Validation failed", errors={"quantity": ["Quantity must be at least 1"]})

        result = OrderService.product_slots(context, product_id)
        product = result["product"]
        if not product.is_active:
            raise ValidationError("Validation failed", errors={"product_id": ["Product is not available"]})

        complements = pricing.resolve_complements(result["slots"], selections or {})
        price = pricing.unit_price(product.price, complements)

        return {
            "id": uuid4().hex,
            "product_id": str(product.id),
            "product_name": product.name,
            "quantity": int(quantity),
            "note": note or None,
            "selections": {k: str(v) for k, v in (selections or {}).items() if v},
            "complements": complements,
            "unit_price": str(price),
            "line_total": str(pricing.line_total(price, quantity)),
        }

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(context: PermissionContext, data: dict, items: List[dict]):
        """
        Check an order before anything is written.

        Returns:
            Tuple (customer, address, tags, totals)
        """
        errors = {}

        customer = db.session.query(Customer).filter(
            Customer.id == data.get("customer_id"),
            Customer.store_id == context.store_id
        ).first()
        if not customer:
            raise CustomerNotFoundError()

        if not items:
            errors["items"] = ["Add at least one item"]
        if not data.get("delivery_date"):
            errors["delivery_date"] = ["Delivery date is required"]
        if not data.get("delivery_time"):
            errors["delivery_time"] = ["Delivery time is required"]

        shipping_fee = to_money(data.get("shipping_fee"))
        discount = to_money(data.get("discount"))
        if shipping_fee < 0:
            errors["shipping_fee"] = ["Shipping fee cannot be negative"]
        if discount < 0:
            errors["discount"] = ["Discount cannot be negative"]

        address = None
        delivery_type = data.get("delivery_type") or DeliveryType.PICKUP
        if delivery_type == DeliveryType.DELIVERY:
            if shipping_fee <= 0:
                errors["shipping_fee"] = ["Shipping fee is required for delivery orders"]
            if not data.get("address_id"):
                errors["address_id"] = ["Delivery address is required"]
            else:
                address = db.session.query(Address).filter(
                    Address.id == data["address_id"],
                    Address.customer_id == customer.id
                ).first()
                if not address:
                    errors["address_id"] = ["Address does not belong to the customer"]

        totals = pricing.order_totals(items, shipping_fee, discount)
        if items and totals["total"] < 0:
            errors["discount"] = ["Discount cannot exceed the order value"]

        if errors:
            raise ValidationError("Validation failed", errors=errors)

        tags = TagService.resolve_tags(context, data.get("tag_ids") or [])

        return customer, address, tags, totals

    @staticmethod
    def _apply(order: Order, data: dict, items: List[dict], customer, address, tags, totals):
        order.customer_id = customer.id
        order.delivery_type = data.get("delivery_type") or DeliveryType.PICKUP
        order.delivery_date = data["delivery_date"]
        order.delivery_time = data["delivery_time"]
        order.address_id = address.id if address else None
        order.delivery_address_snapshot = address_snapshot(address)
        order.subtotal = totals["subtotal"]
        order.shipping_fee = totals["shipping_fee"]
        order.discount = totals["discount"]
        order.total = totals["total"]
        order.payment_status = data.get("payment_status") or PaymentStatus.UNPAID
        order.fulfillment_status = data.get("fulfillment_status") or FulfillmentStatus.NOT_DELIVERED
        order.note = data.get("note")
        order.items = [
            OrderItem(
                product_id=UUID(str(item["product_id"])) if item.get("product_id") else None,
                product_name=item["product_name"],
                quantity=int(item["quantity"]),
                unit_price=to_money(item["unit_price"]),
                note=item.get("note"),
                complements=item.get("complements") or [],
                position=position,
            )
            for position, item in enumerate(items)
        ]
        order.tags = tags

    @staticmethod
    def _next_order_number(store_id) -> int:
        current = db.session.query(func.max(Order.order_number)).filter(
            Order.store_id == store_id
        ).scalar()
        return (current or 0) + 1

    @staticmethod
    def create_order(context: PermissionContext, data: dict, items: List[dict]) -> Order:
        """
        Create an order with its items and tags in a single transaction.

        Args:
            context: Acting user and store
            data: Header fields (customer_id, delivery_type, delivery_date,
                delivery_time, address_id, shipping_fee, discount,
                payment_status, fulfillment_status, note, tag_ids)
            items: Priced items as returned by ``build_item``

        Returns:
            The created Order

        Raises:
            ValidationError: Before any write, if the order is invalid
        """
        customer, address, tags, totals = OrderService._validate(context, data, items)

        order = Order(
            store_id=context.store_id,
            created_by=context.user_id,
            updated_by=context.user_id,
            created_by_name=context.user_name,
        )
        OrderService._apply(order, data, items, customer, address, tags, totals)

        try:
            order.order_number = OrderService._next_order_number(context.store_id)
            db.session.add(order)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception("Failed to create order in store %s", context.store_slug)
            raise

        current_app.logger.info(
            "Order #%s created in store %s by %s (total %s)",
            order.order_number, context.store_slug, context.user_name, order.total
        )
        return order

    @staticmethod
    def replace_order(context: PermissionContext, order_id: UUID, data: dict, items: List[dict]) -> Order:
        """
        Overwrite an order's header fields, items and tags in one transaction.
        The order number and creator attribution are kept.

        Raises:
            OrderNotFoundError: If order not found
            ValidationError: Before any write, if the order is invalid
        """
        order = OrderService.get_order(context, order_id)
        customer, address, tags, totals = OrderService._validate(context, data, items)

        try:
            OrderService._apply(order, data, items, customer, address, tags, totals)
            order.updated_by = context.user_id
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception("Failed to update order %s in store %s", order_id, context.store_slug)
            raise

        current_app.logger.info("Order #%s replaced in store %s", order.order_number, context.store_slug)
        return order

    @staticmethod
    def set_status(
        context: PermissionContext,
        order_id: UUID,
        payment_status: Optional[PaymentStatus] = None,
        fulfillment_status: Optional[FulfillmentStatus] = None,
        tag_ids: Optional[Iterable] = None
    ) -> Order:
        """
        Change payment and/or fulfillment status, optionally replacing tags.

        Raises:
            BadRequestError: If nothing to change was given
        """
        if payment_status is None and fulfillment_status is None and tag_ids is None:
            raise BadRequestError("Provide payment_status, fulfillment_status or tag_ids")

        order = OrderService.get_order(context, order_id)

        if payment_status is not None:
            order.payment_status = payment_status
        if fulfillment_status is not None:
            order.fulfillment_status = fulfillment_status
        if tag_ids is not None:
            order.tags = TagService.resolve_tags(context, tag_ids)

        order.updated_by = context.user_id
        db.session.commit()

        return order

    @staticmethod
    def link_tags(context: PermissionContext, order_id: UUID, tag_ids: Iterable) -> Order:
        """Replace the order's tag links with exactly ``tag_ids``."""
        order = OrderService.get_order(context, order_id)
        order.tags = TagService.resolve_tags(context, tag_ids)
        order.updated_by = context.user_id
        db.session.commit()
        return order

    @staticmethod
    def delete_order(context: PermissionContext, order_id: UUID) -> None:
        """
        Remove tag links, items and finally the order.

        The unit of work flushes the association rows and the orphaned items
        before the order row itself.
        """
        order = OrderService.get_order(context, order_id)
        number = order.order_number

        order.tags = []
        db.session.delete(order)
        db.session.commit()

        current_app.logger.info("Order #%s deleted from store %s", number, context.store_slug)

    # ------------------------------------------------------------------
    # Board and totals
    # ------------------------------------------------------------------

    @staticmethod
    def board(context: PermissionContext, today: date) -> dict:
        """
        Kanban columns for the store.

        Completed orders (paid and delivered) never show on the board, so
        only the rest are loaded.
        """
        from orderdesk.blueprints.orders.schemas import OrderSummarySchema

        orders = db.session.query(Order).filter(
            Order.store_id == context.store_id,
            db.not_(_is_completed())
        ).all()

        return partition_orders(OrderSummarySchema(many=True).dump(orders), today)

    @staticmethod
    def totals_in_range(context: PermissionContext, date_from: Optional[date], date_to: Optional[date]) -> dict:
        """Number of orders and their summed total for delivery dates in range."""
        query = db.session.query(
            func.count(Order.id),
            func.coalesce(func.sum(Order.total), 0)
        ).filter(Order.store_id == context.store_id)

        if date_from is not None:
            query = query.filter(Order.delivery_date >= date_from)
        if date_to is not None:
            query = query.filter(Order.delivery_date <= date_to)

        count, total = query.one()
        return {"count": count, "total": to_money(total) if total else Decimal("0.00")}
