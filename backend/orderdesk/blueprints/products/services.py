"""
Catalog service: categories, products and complement groups.
"""

from typing import Optional, List
from uuid import UUID

from flask import current_app

from orderdesk.extensions import db
from orderdesk.blueprints.products.models import Category, Product, ComplementGroup, ComplementOption
from orderdesk.core.permissions import PermissionContext
from orderdesk.core.utils import safe_search_term, to_money
from orderdesk.core.exceptions import (
    CategoryNotFoundError,
    ProductNotFoundError,
    ComplementGroupNotFoundError,
    ValidationError,
    ConflictError,
)


class CategoryService:

    @staticmethod
    def list_categories(context: PermissionContext) -> List[Category]:
        return db.session.query(Category).filter(
            Category.store_id == context.store_id
        ).order_by(Category.name.asc()).all()

    @staticmethod
    def get_category(context: PermissionContext, category_id: UUID) -> Category:
        category = db.session.query(Category).filter(
            Category.id == category_id,
            Category.store_id == context.store_id
        ).first()
        if not category:
            raise CategoryNotFoundError()
        return category

    @staticmethod
    def create_category(context: PermissionContext, name: str) -> Category:
        category = Category(
            store_id=context.store_id,
            name=name.strip(),
            created_by=context.user_id,
            updated_by=context.user_id
        )
        db.session.add(category)
        db.session.commit()
        return category

    @staticmethod
    def update_category(context: PermissionContext, category_id: UUID, name: str) -> Category:
        category = CategoryService.get_category(context, category_id)
        category.name = name.strip()
        category.updated_by = context.user_id
        db.session.commit()
        return category

    @staticmethod
    def delete_category(context: PermissionContext, category_id: UUID) -> None:
        """Products of the category become uncategorized."""
        category = CategoryService.get_category(context, category_id)
        db.session.query(Product).filter(
            Product.category_id == category.id
        ).update({Product.category_id: None}, synchronize_session=False)
        db.session.delete(category)
        db.session.commit()


class ProductService:
    """Service handling product operations within one store."""

    @staticmethod
    def list_products(
        context: PermissionContext,
        name: Optional[str] = None,
        category_id: Optional[UUID] = None,
        is_active: Optional[bool] = None
    ) -> List[Product]:
        """
        List products ordered by name.

        Args:
            context: Acting user and store
            name: Name fragment
            category_id: Restrict to one category
            is_active: Filter by active flag
        """
        query = db.session.query(Product).filter(Product.store_id == context.store_id)

        term = safe_search_term(name)
        if term:
            query = query.filter(Product.name.ilike(f"%{term}%"))
        if category_id is not None:
            query = query.filter(Product.category_id == category_id)
        if is_active is not None:
            query = query.filter(Product.is_active == is_active)

        return query.order_by(Product.name.asc()).all()

    @staticmethod
    def get_product(context: PermissionContext, product_id: UUID) -> Product:
        """
        Raises:
            ProductNotFoundError: If not found in the current store
        """
        product = db.session.query(Product).filter(
            Product.id == product_id,
            Product.store_id == context.store_id
        ).first()
        if not product:
            raise ProductNotFoundError()
        return product

    @staticmethod
    def _check_references(context, category_id, group_ids):
        if category_id is not None:
            CategoryService.get_category(context, category_id)

        if group_ids:
            wanted = {str(gid) for gid in group_ids}
            found = {
                str(gid) for (gid,) in db.session.query(ComplementGroup.id).filter(
                    ComplementGroup.store_id == context.store_id,
                    ComplementGroup.id.in_([UUID(gid) for gid in wanted])
                ).all()
            }
            unknown = sorted(wanted - found)
            if unknown:
                raise ValidationError(
                    "Unknown complement groups",
                    errors={"complement_group_ids": unknown}
                )

    @staticmethod
    def create_product(context: PermissionContext, data: dict) -> Product:
        """
        Create a product.

        Args:
            data: name, price, is_active, category_id, complement_group_ids
                (ordered, repeats allowed)

        Raises:
            CategoryNotFoundError: If the category is not the store's
            ValidationError: If a complement group is unknown
        """
        group_ids = [str(gid) for gid in data.get("complement_group_ids") or []]
        ProductService._check_references(context, data.get("category_id"), group_ids)

        product = Product(
            store_id=context.store_id,
            name=data["name"].strip(),
            price=to_money(data["price"]),
            is_active=data.get("is_active", True),
            category_id=data.get("category_id"),
            complement_group_ids=group_ids,
            created_by=context.user_id,
            updated_by=context.user_id
        )
        db.session.add(product)
        db.session.commit()

        current_app.logger.info("Product %s created in store %s", product.id, context.store_slug)
        return product

    @staticmethod
    def update_product(context: PermissionContext, product_id: UUID, data: dict) -> Product:
        product = ProductService.get_product(context, product_id)

        group_ids = None
        if "complement_group_ids" in data:
            group_ids = [str(gid) for gid in data["complement_group_ids"] or []]
        ProductService._check_references(context, data.get("category_id"), group_ids)

        if "name" in data:
            product.name = data["name"].strip()
        if "price" in data:
            product.price = to_money(data["price"])
        if "is_active" in data:
            product.is_active = data["is_active"]
        if "category_id" in data:
            product.category_id = data["category_id"]
        if group_ids is not None:
            product.complement_group_ids = group_ids

        product.updated_by = context.user_id
        db.session.commit()
        return product

    @staticmethod
    def delete_product(context: PermissionContext, product_id: UUID) -> None:
        """
        Delete a product never sold; sold products should be deactivated instead.

        Raises:
            ConflictError: If an order item references the product
        """
        from orderdesk.blueprints.orders.models import OrderItem

        product = ProductService.get_product(context, product_id)
        sold = db.session.query(OrderItem.id).filter(OrderItem.product_id == product.id).first()
        if sold:
            raise ConflictError("Product appears on orders; deactivate it instead")

        db.session.delete(product)
        db.session.commit()


class ComplementGroupService:

    @staticmethod
    def list_groups(context: PermissionContext) -> List[ComplementGroup]:
        return db.session.query(ComplementGroup).filter(
            ComplementGroup.store_id == context.store_id
        ).order_by(ComplementGroup.name.asc()).all()

    @staticmethod
    def get_group(context: PermissionContext, group_id: UUID) -> ComplementGroup:
        group = db.session.query(ComplementGroup).filter(
            ComplementGroup.id == group_id,
            ComplementGroup.store_id == context.store_id
        ).first()
        if not group:
            raise ComplementGroupNotFoundError()
        return group

    @staticmethod
    def _set_options(group: ComplementGroup, options: List[dict]) -> None:
        group.options = [
            ComplementOption(
                name=option["name"].strip(),
                additional_price=to_money(option.get("additional_price")),
                position=position,
            )
            for position, option in enumerate(options)
        ]

    @staticmethod
    def create_group(context: PermissionContext, data: dict) -> ComplementGroup:
        """
        Create a group with its options, kept in the given order.

        Args:
            data: name, is_required, options [{name, additional_price}]
        """
        group = ComplementGroup(
            store_id=context.store_id,
            name=data["name"].strip(),
            is_required=data.get("is_required", False),
            created_by=context.user_id,
            updated_by=context.user_id
        )
        ComplementGroupService._set_options(group, data.get("options") or [])
        db.session.add(group)
        db.session.commit()
        return group

    @staticmethod
    def update_group(context: PermissionContext, group_id: UUID, data: dict) -> ComplementGroup:
        """Options, when given, replace the existing ones."""
        group = ComplementGroupService.get_group(context, group_id)

        if "name" in data:
            group.name = data["name"].strip()
        if "is_required" in data:
            group.is_required = data["is_required"]
        if "options" in data:
            ComplementGroupService._set_options(group, data["options"] or [])

        group.updated_by = context.user_id
        db.session.commit()
        return group

    @staticmethod
    def delete_group(context: PermissionContext, group_id: UUID) -> None:
        """Delete a group and drop every reference to it from the store's products."""
        group = ComplementGroupService.get_group(context, group_id)
        group_key = str(group.id)

        products = db.session.query(Product).filter(Product.store_id == context.store_id).all()
        for product in products:
            if group_key in (product.complement_group_ids or []):
                product.complement_group_ids = [
                    gid for gid in product.complement_group_ids if gid != group_key
                ]

        db.session.delete(group)
        db.session.commit()

    @staticmethod
    def groups_by_id(context: PermissionContext, group_ids) -> dict:
        """
        Load groups with options as plain dicts keyed by str(id), the shape
        ``pricing.complement_slots`` expects.
        """
        ids = {UUID(str(gid)) for gid in group_ids or []}
        if not ids:
            return {}

        groups = db.session.query(ComplementGroup).filter(
            ComplementGroup.store_id == context.store_id,
            ComplementGroup.id.in_(ids)
        ).all()

        return {
            str(group.id): {
                "id": str(group.id),
                "name": group.name,
                "is_required": group.is_required,
                "options": [
                    {"id": str(o.id), "name": o.name, "additional_price": o.additional_price}
                    for o in group.options
                ],
            }
            for group in groups
        }
