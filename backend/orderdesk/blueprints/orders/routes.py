"""
Order routes: listing, board, detail, direct writes, status and tags.
"""

from datetime import date

from flask import Blueprint, request, jsonify
from marshmallow import ValidationError

from orderdesk.blueprints.orders.services import OrderService
from orderdesk.blueprints.orders.schemas import (
    BoardQuerySchema,
    OpenOrderSchema,
    OrderDetailSchema,
    OrderListQuerySchema,
    OrderListResponseSchema,
    OrderStatusSchema,
    OrderTagsSchema,
    OrderWriteSchema,
)
from orderdesk.core.constants import Modules, Actions
from orderdesk.core.decorators import require_permission, current_context
from orderdesk.core.exceptions import ValidationError as AppValidationError
from orderdesk.core.utils import page_size
from orderdesk.core.state_store import DatabaseStateStore, open_order_key

orders_bp = Blueprint("orders", __name__, url_prefix="/orders")


def _build_items(context, items):
    return [
        OrderService.build_item(
            context,
            item["product_id"],
            item["quantity"],
            note=item.get("note"),
            selections=item.get("selections")
        )
        for item in items
    ]


@orders_bp.route("", methods=["GET"])
@require_permission(Modules.ORDERS, Actions.READ)
def list_orders():
    """
    List orders of the current store.

    Query parameters:
        page, per_page: Pagination (per_page defaults to DEFAULT_PAGE_SIZE, capped at MAX_PAGE_SIZE)
        search: Order number, phone digits or customer name
        payment_status: Paid | Unpaid
        fulfillment_status: Delivered | Not Delivered
        delivery_type: pickup | delivery
        scope: open | completed
        date_from, date_to: Delivery date range (YYYY-MM-DD)
        tag_ids: Repeatable; orders carrying any of them
        customer_id: Orders of one customer

    Returns:
        Paginated list of orders
    """
    params = request.args.to_dict()
    if "tag_ids" in request.args:
        params["tag_ids"] = request.args.getlist("tag_ids")

    try:
        data = OrderListQuerySchema().load(params)
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    per_page = page_size(data.pop("per_page"))
    result = OrderService.list_orders(current_context(), per_page=per_page, **data)

    return jsonify(OrderListResponseSchema().dump(result)), 200


@orders_bp.route("/board", methods=["GET"])
@require_permission(Modules.ORDERS, Actions.READ)
def order_board():
    """
    Kanban columns: today, tomorrow, next7days, overdue, delivered_unpaid.

    Query parameters:
        today: The viewer's current date (YYYY-MM-DD, default: server date)
    """
    try:
        data = BoardQuerySchema().load(request.args.to_dict())
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    board = OrderService.board(current_context(), data.get("today") or date.today())
    return jsonify(board), 200


@orders_bp.route("/open-detail", methods=["GET"])
@require_permission(Modules.ORDERS, Actions.READ)
def get_open_order():
    """The order whose detail view was left open, if any."""
    context = current_context()
    state = DatabaseStateStore().get(open_order_key(context.store_slug, context.user_id))
    return jsonify({"order_id": state["order_id"] if state else None}), 200


@orders_bp.route("/open-detail", methods=["PUT"])
@require_permission(Modules.ORDERS, Actions.READ)
def set_open_order():
    try:
        data = OpenOrderSchema().load(request.get_json() or {})
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    context = current_context()
    order = OrderService.get_order(context, data["order_id"])
    DatabaseStateStore().set(
        open_order_key(context.store_slug, context.user_id),
        {"store_slug": context.store_slug, "order_id": str(order.id)}
    )
    return jsonify({"order_id": str(order.id)}), 200


@orders_bp.route("/open-detail", methods=["DELETE"])
@require_permission(Modules.ORDERS, Actions.READ)
def clear_open_order():
    context = current_context()
    DatabaseStateStore().delete(open_order_key(context.store_slug, context.user_id))
    return jsonify({"order_id": None}), 200


@orders_bp.route("/<uuid:order_id>", methods=["GET"])
@require_permission(Modules.ORDERS, Actions.READ)
def get_order(order_id):
    order = OrderService.get_order(current_context(), order_id)
    return jsonify(OrderDetailSchema().dump(order)), 200


@orders_bp.route("", methods=["POST"])
@require_permission(Modules.ORDERS, Actions.CREATE)
def create_order():
    """
    Create an order in one request (the wizard is the interactive path).

    Request body:
        customer_id, delivery_type, delivery_date, delivery_time, address_id
        items: [{product_id, quantity, note, selections: {slot_id: option_id}}]
        shipping_fee, discount, payment_status, fulfillment_status, note, tag_ids

    Returns:
        id, order_number and the order detail
    """
    try:
        data = OrderWriteSchema().load(request.get_json() or {})
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    context = current_context()
    items = _build_items(context, data.pop("items"))
    order = OrderService.create_order(context, data, items)

    return jsonify(OrderDetailSchema().dump(order)), 201


@orders_bp.route("/<uuid:order_id>", methods=["PUT"])
@require_permission(Modules.ORDERS, Actions.UPDATE)
def replace_order(order_id):
    """Overwrite header, items and tags. Same body as POST /orders."""
    try:
        data = OrderWriteSchema().load(request.get_json() or {})
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    context = current_context()
    items = _build_items(context, data.pop("items"))
    order = OrderService.replace_order(context, order_id, data, items)

    return jsonify(OrderDetailSchema().dump(order)), 200


@orders_bp.route("/<uuid:order_id>/status", methods=["PATCH"])
@require_permission(Modules.ORDERS, Actions.STATUS)
def set_order_status(order_id):
    """
    Change payment and/or fulfillment status.

    Request body:
        payment_status: Paid | Unpaid (optional)
        fulfillment_status: Delivered | Not Delivered (optional)
        tag_ids: Replaces the order's tags (optional)
    """
    try:
        data = OrderStatusSchema().load(request.get_json() or {})
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    order = OrderService.set_status(current_context(), order_id, **data)
    return jsonify(OrderDetailSchema().dump(order)), 200


@orders_bp.route("/<uuid:order_id>/tags", methods=["PUT"])
@require_permission(Modules.ORDERS, Actions.UPDATE)
def set_order_tags(order_id):
    try:
        data = OrderTagsSchema().load(request.get_json() or {})
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    order = OrderService.link_tags(current_context(), order_id, data["tag_ids"])
    return jsonify(OrderDetailSchema().dump(order)), 200


@orders_bp.route("/<uuid:order_id>", methods=["DELETE"])
@require_permission(Modules.ORDERS, Actions.DELETE)
def delete_order(order_id):
    OrderService.delete_order(current_context(), order_id)
    return jsonify({"message": "Order deleted successfully"}), 200
