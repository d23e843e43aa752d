"""
Customer service with business logic for customers and their addresses.
"""

from decimal import Decimal
from typing import Optional, List
from uuid import UUID

from flask import current_app
from sqlalchemy import func

from orderdesk.extensions import db
from orderdesk.blueprints.customers.models import Customer, Address
from orderdesk.core.constants import PHONE_DIGITS
from orderdesk.core.permissions import PermissionContext
from orderdesk.core.utils import only_digits, safe_search_term, to_money, page_count
from orderdesk.core.exceptions import (
    CustomerNotFoundError,
    AddressNotFoundError,
    ValidationError,
    DuplicateResourceError,
    ConflictError,
)


def normalize_phone(phone: Optional[str]) -> str:
    """
    Strip punctuation from a phone number and check its length.

    Raises:
        ValidationError: If fewer than 11 digits remain
    """
    digits = only_digits(phone)
    if len(digits) < PHONE_DIGITS:
        raise ValidationError("Invalid phone number", errors={"phone": ["Phone must have at least 11 digits"]})
    return digits


class CustomerService:
    """Service handling customer and address operations within one store."""

    @staticmethod
    def list_customers(
        context: PermissionContext,
        page: int = 1,
        per_page: int = 50,
        search: Optional[str] = None
    ) -> dict:
        """
        List the store's customers ordered by name.

        Args:
            context: Acting user and store
            page: Page number (1-indexed)
            per_page: Items per page
            search: Matches name, or phone when the term has digits

        Returns:
            Dict with customers list and pagination info
        """
        query = db.session.query(Customer).filter(Customer.store_id == context.store_id)

        term = safe_search_term(search)
        if term:
            conditions = [Customer.name.ilike(f"%{term}%")]
            digits = only_digits(term)
            if digits:
                conditions.append(Customer.phone.like(f"%{digits}%"))
            query = query.filter(db.or_(*conditions))

        total = query.count()

        customers = query.order_by(Customer.name.asc()) \
            .offset((page - 1) * per_page).limit(per_page).all()

        return {
            "customers": customers,
            "total": total,
            "page": page,
            "per_page": per_page,
            "pages": page_count(total, per_page),
        }

    @staticmethod
    def get_customer(context: PermissionContext, customer_id: UUID) -> Customer:
        """
        Raises:
            CustomerNotFoundError: If not found in the current store
        """
        customer = db.session.query(Customer).filter(
            Customer.id == customer_id,
            Customer.store_id == context.store_id
        ).first()

        if not customer:
            raise CustomerNotFoundError()

        return customer

    @staticmethod
    def find_by_phone(context: PermissionContext, phone: str) -> Optional[Customer]:
        """Exact match on the digits of ``phone``. Returns None when unknown."""
        digits = normalize_phone(phone)
        return db.session.query(Customer).filter(
            Customer.store_id == context.store_id,
            Customer.phone == digits
        ).first()

    @staticmethod
    def create_customer(
        context: PermissionContext,
        name: str,
        phone: str,
        email: Optional[str] = None,
        note: Optional[str] = None
    ) -> Customer:
        """
        Register a customer in the current store.

        Raises:
            ValidationError: If name is blank or phone is invalid
            DuplicateResourceError: If the phone is already registered
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Validation failed", errors={"name": ["Name is required"]})

        digits = normalize_phone(phone)

        existing = db.session.query(Customer).filter(
            Customer.store_id == context.store_id,
            Customer.phone == digits
        ).first()
        if existing:
            raise DuplicateResourceError("A customer with this phone already exists")

        customer = Customer(
            store_id=context.store_id,
            name=name,
            phone=digits,
            email=email,
            note=note,
            created_by=context.user_id,
            updated_by=context.user_id
        )
        db.session.add(customer)
        db.session.commit()

        current_app.logger.info("Customer %s registered in store %s", customer.id, context.store_slug)
        return customer

    @staticmethod
    def update_customer(context: PermissionContext, customer_id: UUID, **fields) -> Customer:
        """
        Update name, phone, email or note.

        Raises:
            CustomerNotFoundError: If customer not found
            DuplicateResourceError: If the new phone belongs to another customer
        """
        customer = CustomerService.get_customer(context, customer_id)

        if "phone" in fields and fields["phone"] is not None:
            digits = normalize_phone(fields.pop("phone"))
            if digits != customer.phone:
                taken = db.session.query(Customer).filter(
                    Customer.store_id == context.store_id,
                    Customer.phone == digits,
                    Customer.id != customer.id
                ).first()
                if taken:
                    raise DuplicateResourceError("A customer with this phone already exists")
                customer.phone = digits

        if fields.get("name") is not None:
            name = fields["name"].strip()
            if not name:
                raise ValidationError("Validation failed", errors={"name": ["Name is required"]})
            customer.name = name

        for attr in ("email", "note"):
            if attr in fields:
                setattr(customer, attr, fields[attr])

        customer.updated_by = context.user_id
        db.session.commit()

        return customer

    @staticmethod
    def delete_customer(context: PermissionContext, customer_id: UUID) -> None:
        """
        Delete a customer and their addresses.

        Raises:
            CustomerNotFoundError: If customer not found
            ConflictError: If the customer has orders
        """
        from orderdesk.blueprints.orders.models import Order

        customer = CustomerService.get_customer(context, customer_id)

        has_orders = db.session.query(Order.id).filter(
            Order.store_id == context.store_id,
            Order.customer_id == customer.id
        ).first()
        if has_orders:
            raise ConflictError("Customer has orders and cannot be deleted")

        # Addresses go first, then the customer row
        db.session.query(Address).filter(Address.customer_id == customer.id).delete()
        db.session.delete(customer)
        db.session.commit()

        current_app.logger.info("Customer %s deleted from store %s", customer_id, context.store_slug)

    @staticmethod
    def customer_summary(context: PermissionContext, customer_id: UUID) -> dict:
        """
        Order statistics for the customer card.

        Returns:
            Dict with order_count, total_spent, average_ticket and the
            distinct tags used on the customer's orders
        """
        from orderdesk.blueprints.orders.models import Order
        from orderdesk.blueprints.tags.models import Tag, order_tags

        count, total = db.session.query(
            func.count(Order.id),
            func.coalesce(func.sum(Order.total), 0)
        ).filter(
            Order.store_id == context.store_id,
            Order.customer_id == customer_id
        ).one()

        tags = db.session.query(Tag).join(
            order_tags, order_tags.c.tag_id == Tag.id
        ).join(
            Order, Order.id == order_tags.c.order_id
        ).filter(
            Order.store_id == context.store_id,
            Order.customer_id == customer_id
        ).distinct().order_by(Tag.name).all()

        total = to_money(total)
        return {
            "order_count": count,
            "total_spent": total,
            "average_ticket": to_money(total / count) if count else Decimal("0.00"),
            "tags": tags,
        }

    # ------------------------------------------------------------------
    # Addresses
    # ------------------------------------------------------------------

    @staticmethod
    def list_addresses(context: PermissionContext, customer_id: UUID) -> List[Address]:
        customer = CustomerService.get_customer(context, customer_id)
        return list(customer.addresses)

    @staticmethod
    def get_address(context: PermissionContext, customer_id: UUID, address_id: UUID) -> Address:
        """
        Raises:
            CustomerNotFoundError: If customer not found
            AddressNotFoundError: If the address is not the customer's
        """
        customer = CustomerService.get_customer(context, customer_id)
        address = db.session.query(Address).filter(
            Address.id == address_id,
            Address.customer_id == customer.id
        ).first()
        if not address:
            raise AddressNotFoundError()
        return address

    @staticmethod
    def create_address(context: PermissionContext, customer_id: UUID, data: dict) -> Address:
        """
        Add an address to a customer.

        The first address of a customer is always principal. Marking a new
        address principal clears the flag on the others.

        Raises:
            ValidationError: If street, number, city or state is missing
        """
        customer = CustomerService.get_customer(context, customer_id)

        missing = {
            field: ["This field is required"]
            for field in ("street", "number", "city", "state")
            if not (data.get(field) or "").strip()
        }
        if missing:
            raise ValidationError("Incomplete address", errors=missing)

        is_first = len(customer.addresses) == 0
        is_principal = is_first or bool(data.get("is_principal"))
        if is_principal and not is_first:
            for other in customer.addresses:
                other.is_principal = False

        address = Address(
            customer_id=customer.id,
            street=data["street"].strip(),
            number=data["number"].strip(),
            complement=data.get("complement"),
            neighborhood=data.get("neighborhood"),
            city=data["city"].strip(),
            state=data["state"].strip().upper(),
            postal_code=only_digits(data.get("postal_code")) or None,
            is_principal=is_principal,
        )
        db.session.add(address)
        db.session.commit()

        return address

    @staticmethod
    def update_address(context: PermissionContext, customer_id: UUID, address_id: UUID, data: dict) -> Address:
        """
        Change an address. Orders already saved keep their own copy.

        Raises:
            ValidationError: If street, number, city or state would become blank
        """
        address = CustomerService.get_address(context, customer_id, address_id)

        blank = {
            field: ["This field is required"]
            for field in ("street", "number", "city", "state")
            if field in data and not (data[field] or "").strip()
        }
        if blank:
            raise ValidationError("Incomplete address", errors=blank)

        for field in ("street", "number", "city"):
            if field in data:
                setattr(address, field, data[field].strip())
        for field in ("complement", "neighborhood"):
            if field in data:
                setattr(address, field, data[field])
        if "state" in data:
            address.state = data["state"].strip().upper()
        if "postal_code" in data:
            address.postal_code = only_digits(data["postal_code"]) or None

        if data.get("is_principal") and not address.is_principal:
            for other in address.customer.addresses:
                other.is_principal = other.id == address.id

        db.session.commit()
        return address

    @staticmethod
    def delete_address(context: PermissionContext, customer_id: UUID, address_id: UUID) -> None:
        """
        Raises:
            ConflictError: If an order still delivers to this address
        """
        from orderdesk.blueprints.orders.models import Order

        address = CustomerService.get_address(context, customer_id, address_id)

        in_use = db.session.query(Order.id).filter(Order.address_id == address.id).first()
        if in_use:
            raise ConflictError("Address is used by an order and cannot be deleted")

        customer = address.customer
        was_principal = address.is_principal
        db.session.delete(address)
        db.session.flush()

        # Keep one principal address while any remain
        if was_principal:
            remaining = [a for a in customer.addresses if a.id != address.id]
            if remaining:
                remaining[0].is_principal = True

        db.session.commit()
