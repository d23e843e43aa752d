"""
Store management routes. Platform administrators only.
"""

from flask import Blueprint, request, jsonify
from marshmallow import EXCLUDE, ValidationError

from orderdesk.blueprints.stores.services import StoreService
from orderdesk.blueprints.stores.schemas import (
    StoreResponseSchema,
    CreateStoreSchema,
    UpdateStoreSchema,
    StoreListResponseSchema,
    StoreListQuerySchema,
    CreateStoreUserSchema,
    LinkUserSchema,
)
from orderdesk.blueprints.users.schemas import UserResponseSchema, StoreMemberSchema
from orderdesk.core.decorators import require_platform_admin, current_context
from orderdesk.core.exceptions import ValidationError as AppValidationError

stores_bp = Blueprint("stores", __name__, url_prefix="/stores")


@stores_bp.route("", methods=["GET"])
@require_platform_admin
def list_stores():
    """
    Stores ordered by name.

    Query parameters:
        search: Part of the name or slug
        is_active: true/false
        page, per_page: Pagination (per_page up to 100)
    """
    try:
        data = StoreListQuerySchema().load(request.args, unknown=EXCLUDE)
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    result = StoreService.list_stores(**data)
    return jsonify(StoreListResponseSchema().dump(result)), 200


@stores_bp.route("", methods=["POST"])
@require_platform_admin
def create_store():
    """
    Create a store.

    Request body:
        name: Store name (required)
        slug: URL/header identifier (optional, derived from the name)
    """
    try:
        data = CreateStoreSchema().load(request.get_json() or {})
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    store = StoreService.create_store(name=data["name"], slug=data.get("slug"))
    return jsonify(StoreResponseSchema().dump(store)), 201


@stores_bp.route("/<uuid:store_id>", methods=["GET"])
@require_platform_admin
def get_store(store_id):
    store = StoreService.get_store(store_id)
    return jsonify(StoreResponseSchema().dump(store)), 200


@stores_bp.route("/<uuid:store_id>", methods=["PUT"])
@require_platform_admin
def update_store(store_id):
    """
    Update a store's name, slug or active flag.

    Deactivated stores can no longer be opened with X-Store-Slug.
    """
    try:
        data = UpdateStoreSchema().load(request.get_json() or {})
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    store = StoreService.update_store(store_id, **data)
    return jsonify(StoreResponseSchema().dump(store)), 200


@stores_bp.route("/<uuid:store_id>/users", methods=["GET"])
@require_platform_admin
def list_store_users(store_id):
    links = StoreService.list_links(store_id)
    return jsonify({"users": StoreMemberSchema(many=True).dump(links)}), 200


@stores_bp.route("/users", methods=["POST"])
@require_platform_admin
def create_store_user():
    """
    Create a staff account and link it to stores.

    Request body:
        email: Login email (required)
        password: Initial password (required)
        full_name: Display name (defaults to the email's local part)
        role_id: Role held in every listed store (required)
        store_ids: Stores to link (required, at least one)
    """
    try:
        data = CreateStoreUserSchema().load(request.get_json() or {})
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    user = StoreService.create_store_user(current_context(), **data)
    return jsonify(UserResponseSchema().dump(user)), 201


@stores_bp.route("/<uuid:store_id>/users", methods=["POST"])
@require_platform_admin
def link_store_user(store_id):
    """Link an existing user to the store, or change their role there."""
    try:
        data = LinkUserSchema().load(request.get_json() or {})
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)

    link = StoreService.link_user(store_id, data["user_id"], data["role_id"])
    return jsonify(StoreMemberSchema().dump(link)), 200


@stores_bp.route("/<uuid:store_id>/users/<uuid:link_id>", methods=["DELETE"])
@require_platform_admin
def remove_store_user(store_id, link_id):
    StoreService.remove_link(store_id, link_id)
    return jsonify({"message": "User removed from store"}), 200
