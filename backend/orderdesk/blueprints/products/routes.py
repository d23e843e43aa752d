"""
Catalog routes: categories, products and complement groups.
"""

from flask import Blueprint, request, jsonify
from marshmallow import ValidationError

from orderdesk.blueprints.products.services import CategoryService, ProductService, ComplementGroupService
from orderdesk.blueprints.products.schemas import (
    CategoryResponseSchema,
    CategorySchema,
    ComplementGroupResponseSchema,
    CreateComplementGroupSchema,
    CreateProductSchema,
    ProductListQuerySchema,
    ProductResponseSchema,
    UpdateComplementGroupSchema,
    UpdateProductSchema,
)
from orderdesk.core.constants import Modules, Actions
from orderdesk.core.decorators import require_permission, current_context
from orderdesk.core.exceptions import ValidationError as AppValidationError

products_bp = Blueprint("products", __name__, url_prefix="/products")


def _load(schema, payload):
    try:
        return schema.load(payload)
    except ValidationError as e:
        raise AppValidationError("Validation failed", errors=e.messages)


# Categories

@products_bp.route("/categories", methods=["GET"])
@require_permission(Modules.PRODUCTS, Actions.READ)
def list_categories():
    categories = CategoryService.list_categories(current_context())
    return jsonify({"categories": CategoryResponseSchema(many=True).dump(categories)}), 200


@products_bp.route("/categories", methods=["POST"])
@require_permission(Modules.PRODUCTS, Actions.CREATE)
def create_category():
    data = _load(CategorySchema(), request.get_json() or {})
    category = CategoryService.create_category(current_context(), data["name"])
    return jsonify(CategoryResponseSchema().dump(category)), 201


@products_bp.route("/categories/<uuid:category_id>", methods=["PUT"])
@require_permission(Modules.PRODUCTS, Actions.UPDATE)
def update_category(category_id):
    data = _load(CategorySchema(), request.get_json() or {})
    category = CategoryService.update_category(current_context(), category_id, data["name"])
    return jsonify(CategoryResponseSchema().dump(category)), 200


@products_bp.route("/categories/<uuid:category_id>", methods=["DELETE"])
@require_permission(Modules.PRODUCTS, Actions.DELETE)
def delete_category(category_id):
    CategoryService.delete_category(current_context(), category_id)
    return jsonify({"message": "Category deleted successfully"}), 200


# Complement groups

@products_bp.route("/complement-groups", methods=["GET"])
@require_permission(Modules.PRODUCTS, Actions.READ)
def list_complement_groups():
    groups = ComplementGroupService.list_groups(current_context())
    return jsonify({"complement_groups": ComplementGroupResponseSchema(many=True).dump(groups)}), 200


@products_bp.route("/complement-groups", methods=["POST"])
@require_permission(Modules.PRODUCTS, Actions.CREATE)
def create_complement_group():
    """
    Create a complement group.

    Request body:
        name: Group name (required)
        is_required: Whether a choice is mandatory (default: false)
        options: [{name, additional_price}] in display order
    """
    data = _load(CreateComplementGroupSchema(), request.get_json() or {})
    group = ComplementGroupService.create_group(current_context(), data)
    return jsonify(ComplementGroupResponseSchema().dump(group)), 201


@products_bp.route("/complement-groups/<uuid:group_id>", methods=["PUT"])
@require_permission(Modules.PRODUCTS, Actions.UPDATE)
def update_complement_group(group_id):
    data = _load(UpdateComplementGroupSchema(), request.get_json() or {})
    group = ComplementGroupService.update_group(current_context(), group_id, data)
    return jsonify(ComplementGroupResponseSchema().dump(group)), 200


@products_bp.route("/complement-groups/<uuid:group_id>", methods=["DELETE"])
@require_permission(Modules.PRODUCTS, Actions.DELETE)
def delete_complement_group(group_id):
    ComplementGroupService.delete_group(current_context(), group_id)
    return jsonify({"message": "Complement group deleted successfully"}), 200


# Products

@products_bp.route("", methods=["GET"])
@require_permission(Modules.PRODUCTS, Actions.READ)
def list_products():
    """
    List products ordered by name.

    Query parameters:
        name: Name fragment
        category_id: Category UUID
        is_active: true/false
    """
    data = _load(ProductListQuerySchema(), request.args.to_dict())
    products = ProductService.list_products(
        current_context(),
        name=data.get("name"),
        category_id=data.get("category_id"),
        is_active=data.get("is_active")
    )
    return jsonify({"products": ProductResponseSchema(many=True).dump(products)}), 200


@products_bp.route("/<uuid:product_id>", methods=["GET"])
@require_permission(Modules.PRODUCTS, Actions.READ)
def get_product(product_id):
    product = ProductService.get_product(current_context(), product_id)
    return jsonify(ProductResponseSchema().dump(product)), 200


@products_bp.route("", methods=["POST"])
@require_permission(Modules.PRODUCTS, Actions.CREATE)
def create_product():
    """
    Create a product.

    Request body:
        name: Product name (required)
        price: Base price (required)
        is_active: default true
        category_id: Category UUID (optional)
        complement_group_ids: Ordered group UUIDs, repeats allowed
    """
    data = _load(CreateProductSchema(), request.get_json() or {})
    product = ProductService.create_product(current_context(), data)
    return jsonify(ProductResponseSchema().dump(product)), 201


@products_bp.route("/<uuid:product_id>", methods=["PUT"])
@require_permission(Modules.PRODUCTS, Actions.UPDATE)
def update_product(product_id):
    data = _load(UpdateProductSchema(), request.get_json() or {})
    product = ProductService.update_product(current_context(), product_id, data)
    return jsonify(ProductResponseSchema().dump(product)), 200


@products_bp.route("/<uuid:product_id>", methods=["DELETE"])
@require_permission(Modules.PRODUCTS, Actions.DELETE)
def delete_product(product_id):
    ProductService.delete_product(current_context(), product_id)
    return jsonify({"message": "Product deleted successfully"}), 200
