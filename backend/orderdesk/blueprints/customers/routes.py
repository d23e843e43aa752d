"""
Customer management routes.
"""

from flask import Blueprint, request, jsonify
from marshmallow import ValidationError

from orderdesk.blueprints.customers.services import CustomerService
from orderdesk.blueprints.customers.schemas import (
    AddressResponseSchema,
    AddressSchema,
    CreateCustomerSchema,
    CustomerDetailResponseSchema,
    CustomerListQuerySchema,
    CustomerListResponseSchema,
    CustomerResponseSchema,
    PhoneLookupQuerySchema,
    UpdateAddressSchema,
    UpdateCustomerSchema,
)
from orderdesk.core.constants import Modules, Actions
from orderdesk.core.decorators import require_permission, current_context
from orderdesk.core.exceptions import ValidationError as AppValidationError
from orderdesk.core.utils import page_size

customers_bp = Blueprint("customers", __name__, url_prefix="/customers")


def _detail(context, customer):
    return CustomerDetailResponseSchema().dump({
        "id": customer.id,
        "name": customer.name,
        "phone": customer.phone,
        "email": customer.email,
        "note": customer.note,
        "created_at": customer.created_at,
        "updated_at": customer.updated_at,
        "addresses": customer.addresses,
        "summary": CustomerService.customer_summary(context, customer.id),
    })


@customers_bp.route("", methods=["GET"])
@require_permission(Modules.CUSTOMERS, Actions.READ)
def list_customers():
    """
    List customers of the current store.

    Query parameters:
        page: Page number (default: 1)
        per_page: Items per page (DEFAULT_PAGE_SIZE, capped at MAX_PAGE_SIZE)
        search: Name or phone fragment

    Returns:
        Paginated list of customers ordered by name
    """
    try:
        data = CustomerListQuerySchema().load(request.args.to_dict())
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    result = CustomerService.list_customers(
        current_context(),
        page=data["page"],
        per_page=page_size(data["per_page"]),
        search=data.get("search")
    )

    return jsonify(CustomerListResponseSchema().dump(result)), 200


@customers_bp.route("/lookup", methods=["GET"])
@require_permission(Modules.CUSTOMERS, Actions.READ)
def lookup_customer():
    """
    Find a customer by phone number.

    Query parameters:
        phone: Phone number, punctuation allowed

    Returns:
        {"customer": {...}} or {"customer": null} when unknown
    """
    try:
        data = PhoneLookupQuerySchema().load(request.args.to_dict())
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    customer = CustomerService.find_by_phone(current_context(), data["phone"])
    return jsonify({
        "customer": CustomerResponseSchema().dump(customer) if customer else None
    }), 200


@customers_bp.route("", methods=["POST"])
@require_permission(Modules.CUSTOMERS, Actions.CREATE)
def create_customer():
    """
    Register a customer.

    Request body:
        name: Customer name (required)
        phone: Phone with at least 11 digits (required)
        email: Email (optional)
        note: Free text (optional)
    """
    try:
        data = CreateCustomerSchema().load(request.get_json() or {})
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    customer = CustomerService.create_customer(current_context(), **data)

    return jsonify(CustomerResponseSchema().dump(customer)), 201


@customers_bp.route("/<uuid:customer_id>", methods=["GET"])
@require_permission(Modules.CUSTOMERS, Actions.READ)
def get_customer(customer_id):
    """Customer with addresses and order summary."""
    context = current_context()
    customer = CustomerService.get_customer(context, customer_id)
    return jsonify(_detail(context, customer)), 200


@customers_bp.route("/<uuid:customer_id>", methods=["PUT"])
@require_permission(Modules.CUSTOMERS, Actions.UPDATE)
def update_customer(customer_id):
    try:
        data = UpdateCustomerSchema().load(request.get_json() or {})
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    customer = CustomerService.update_customer(current_context(), customer_id, **data)

    return jsonify(CustomerResponseSchema().dump(customer)), 200


@customers_bp.route("/<uuid:customer_id>", methods=["DELETE"])
@require_permission(Modules.CUSTOMERS, Actions.DELETE)
def delete_customer(customer_id):
    """Delete a customer without orders, addresses included."""
    CustomerService.delete_customer(current_context(), customer_id)
    return jsonify({"message": "Customer deleted successfully"}), 200


@customers_bp.route("/<uuid:customer_id>/addresses", methods=["GET"])
@require_permission(Modules.CUSTOMERS, Actions.READ)
def list_addresses(customer_id):
    addresses = CustomerService.list_addresses(current_context(), customer_id)
    return jsonify({"addresses": AddressResponseSchema(many=True).dump(addresses)}), 200


@customers_bp.route("/<uuid:customer_id>/addresses", methods=["POST"])
@require_permission(Modules.CUSTOMERS, Actions.UPDATE)
def create_address(customer_id):
    """
    Add an address. The customer's first address becomes principal.

    Request body:
        street, number, city, state (required)
        complement, neighborhood, postal_code, is_principal (optional)
    """
    try:
        data = AddressSchema().load(request.get_json() or {})
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    address = CustomerService.create_address(current_context(), customer_id, data)
    return jsonify(AddressResponseSchema().dump(address)), 201


@customers_bp.route("/<uuid:customer_id>/addresses/<uuid:address_id>", methods=["PUT"])
@require_permission(Modules.CUSTOMERS, Actions.UPDATE)
def update_address(customer_id, address_id):
    try:
        data = UpdateAddressSchema().load(request.get_json() or {})
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    address = CustomerService.update_address(current_context(), customer_id, address_id, data)
    return jsonify(AddressResponseSchema().dump(address)), 200


@customers_bp.route("/<uuid:customer_id>/addresses/<uuid:address_id>", methods=["DELETE"])
@require_permission(Modules.CUSTOMERS, Actions.UPDATE)
def delete_address(customer_id, address_id):
    CustomerService.delete_address(current_context(), customer_id, address_id)
    return jsonify({"message": "Address deleted successfully"}), 200
