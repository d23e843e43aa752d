"""
Order wizard routes.

Every call loads the caller's draft for the current store, applies one
transition and returns the updated draft. Starting a new order needs
orders.create; editing an existing one needs orders.update.
"""

from flask import Blueprint, request, jsonify
from marshmallow import ValidationError

from orderdesk.blueprints.wizard.engine import OrderWizard
from orderdesk.blueprints.wizard.gateway import DatabaseOrderGateway
from orderdesk.blueprints.wizard.schemas import (
    AddItemSchema,
    DeliveryDetailsSchema,
    PaymentSchema,
    PhoneSchema,
    QuickRegisterSchema,
    StartWizardSchema,
    WizardAddressSchema,
)
from orderdesk.core.constants import Modules, Actions
from orderdesk.core.decorators import require_permission, current_context
from orderdesk.core.exceptions import ValidationError as AppValidationError, InsufficientPermissionsError
from orderdesk.core.state_store import DatabaseStateStore

wizard_bp = Blueprint("wizard", __name__, url_prefix="/orders/wizard")

ORDER_WRITE = [Actions.CREATE, Actions.UPDATE]


def _wizard() -> OrderWizard:
    context = current_context()
    return OrderWizard(
        DatabaseOrderGateway(context),
        DatabaseStateStore(),
        context.store_slug,
        context.user_id,
    )


def _require_order_action(editing: bool) -> None:
    action = Actions.UPDATE if editing else Actions.CREATE
    if not current_context().can(Modules.ORDERS, action):
        raise InsufficientPermissionsError(required_permission=f"{Modules.ORDERS}.{action}")


def _load(schema, payload):
    try:
        return schema.load(payload)
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)


@wizard_bp.route("", methods=["POST"])
@require_permission(Modules.ORDERS, ORDER_WRITE)
def start_wizard():
    """
    Start a new draft, replacing any previous one.

    Request body:
        order_id: Edit this order instead (opens at step 2)

    Returns:
        The draft
    """
    data = _load(StartWizardSchema(), request.get_json(silent=True) or {})
    _require_order_action(editing=bool(data["order_id"]))

    return jsonify(_wizard().start(data["order_id"])), 201


@wizard_bp.route("", methods=["GET"])
@require_permission(Modules.ORDERS, ORDER_WRITE)
def get_wizard():
    """The draft in progress (404 when none)."""
    return jsonify(_wizard().snapshot()), 200


@wizard_bp.route("", methods=["DELETE"])
@require_permission(Modules.ORDERS, ORDER_WRITE)
def cancel_wizard():
    _wizard().cancel()
    return jsonify({"message": "Order wizard cancelled"}), 200


@wizard_bp.route("/customer/lookup", methods=["POST"])
@require_permission(Modules.ORDERS, ORDER_WRITE)
def lookup_customer():
    """
    Step 1: find the customer by phone.

    Returns:
        {"customer": {...}, "quick_registration": false} when found,
        {"customer": null, "quick_registration": true} otherwise
    """
    data = _load(PhoneSchema(), request.get_json() or {})
    customer = _wizard().lookup_customer(data["phone"])
    return jsonify({"customer": customer, "quick_registration": customer is None}), 200


@wizard_bp.route("/customer", methods=["POST"])
@require_permission(Modules.ORDERS, ORDER_WRITE)
def register_customer():
    """Step 1: quick-register a customer with name and phone."""
    data = _load(QuickRegisterSchema(), request.get_json() or {})
    customer = _wizard().register_customer(data["name"], data["phone"])
    return jsonify({"customer": customer}), 201


@wizard_bp.route("/addresses", methods=["GET"])
@require_permission(Modules.ORDERS, ORDER_WRITE)
def list_addresses():
    return jsonify({"addresses": _wizard().list_addresses()}), 200


@wizard_bp.route("/addresses", methods=["POST"])
@require_permission(Modules.ORDERS, ORDER_WRITE)
def add_address():
    """Step 2: register an address for the customer and select it."""
    data = _load(WizardAddressSchema(), request.get_json() or {})
    address = _wizard().add_address(data)
    return jsonify({"address": address}), 201


@wizard_bp.route("/postal-codes/<code>", methods=["GET"])
@require_permission(Modules.ORDERS, ORDER_WRITE)
def lookup_postal_code(code):
    """Step 2: address prefill. Always 200; {"error": true} when not found."""
    return jsonify(_wizard().lookup_postal_code(code)), 200


@wizard_bp.route("/products/<uuid:product_id>/slots", methods=["GET"])
@require_permission(Modules.ORDERS, ORDER_WRITE)
def product_slots(product_id):
    """Step 3: complement selection slots for a product."""
    return jsonify(_wizard().product_slots(product_id)), 200


@wizard_bp.route("/items", methods=["POST"])
@require_permission(Modules.ORDERS, ORDER_WRITE)
def add_item():
    """
    Step 3: add a product.

    Request body:
        product_id: Product UUID (required)
        quantity: default 1
        note: Free text
        selections: {slot_id: option_id}
    """
    data = _load(AddItemSchema(), request.get_json() or {})
    wizard = _wizard()
    item = wizard.add_item(data["product_id"], data["quantity"], data["note"], data["selections"])
    return jsonify({"item": item, "wizard": wizard.snapshot()}), 201


@wizard_bp.route("/items/<item_id>", methods=["DELETE"])
@require_permission(Modules.ORDERS, ORDER_WRITE)
def remove_item(item_id):
    wizard = _wizard()
    wizard.remove_item(item_id)
    return jsonify(wizard.snapshot()), 200


@wizard_bp.route("/payment", methods=["PATCH"])
@require_permission(Modules.ORDERS, ORDER_WRITE)
def update_payment():
    """Step 3: shipping fee, discount, statuses, note and tags."""
    data = _load(PaymentSchema(), request.get_json() or {})
    return jsonify(_wizard().update_payment(data)), 200


@wizard_bp.route("/advance", methods=["POST"])
@require_permission(Modules.ORDERS, ORDER_WRITE)
def advance():
    """
    Validate the current step and move on.

    Request body (step 2):
        delivery_type, delivery_date, delivery_time, address_id
    """
    data = _load(DeliveryDetailsSchema(), request.get_json(silent=True) or {})
    return jsonify(_wizard().advance(data)), 200


@wizard_bp.route("/back", methods=["POST"])
@require_permission(Modules.ORDERS, ORDER_WRITE)
def back():
    return jsonify(_wizard().back()), 200


@wizard_bp.route("/submit", methods=["POST"])
@require_permission(Modules.ORDERS, ORDER_WRITE)
def submit():
    """
    Step 3: save the order.

    Request body: optional payment fields, merged before saving.

    The role is checked again here, since it may have changed after
    the draft was started.

    Returns:
        id and order_number of the saved order
    """
    data = _load(PaymentSchema(), request.get_json(silent=True) or {})
    wizard = _wizard()
    editing = wizard.started and wizard.state["edit_mode"]
    _require_order_action(editing)

    result = wizard.submit(data)
    return jsonify(result), 200 if editing else 201
