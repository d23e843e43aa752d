"""
Store service: platform administration of stores and their staff.
"""

import re
from typing import Optional, List
from uuid import UUID

from flask import current_app

from orderdesk.extensions import db
from orderdesk.blueprints.stores.models import Store, StoreUser
from orderdesk.blueprints.users.models import User
from orderdesk.blueprints.rbac.services import RoleService
from orderdesk.core.permissions import PermissionContext
from orderdesk.core.utils import safe_search_term, page_count
from orderdesk.core.exceptions import (
    StoreNotFoundError,
    UserNotFoundError,
    NotFoundError,
    DuplicateResourceError,
    BadRequestError,
)


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.strip().lower())
    return slug.strip("-")


class StoreService:
    """Stores and the staff linked to them. Callers are platform administrators."""

    @staticmethod
    def list_stores(
        page: int = 1,
        per_page: int = 20,
        search: Optional[str] = None,
        is_active: Optional[bool] = None
    ) -> dict:
        """Stores by name, optionally filtered by a search term and the active flag."""
        query = db.session.query(Store)

        term = safe_search_term(search)
        if term:
            like = f"%{term}%"
            query = query.filter(db.or_(Store.name.ilike(like), Store.slug.ilike(like)))

        if is_active is not None:
            query = query.filter(Store.is_active == is_active)

        total = query.count()

        stores = query.order_by(Store.name).offset((page - 1) * per_page).limit(per_page).all()

        return {
            "stores": stores,
            "total": total,
            "page": page,
            "per_page": per_page,
            "pages": page_count(total, per_page),
        }

    @staticmethod
    def get_store(store_id: UUID) -> Store:
        store = db.session.get(Store, store_id)
        if not store:
            raise StoreNotFoundError()
        return store

    @staticmethod
    def _ensure_slug_free(slug: str, exclude_id: Optional[UUID] = None) -> None:
        query = db.session.query(Store).filter(Store.slug == slug)
        if exclude_id is not None:
            query = query.filter(Store.id != exclude_id)
        if query.first():
            raise DuplicateResourceError(f"A store with slug '{slug}' already exists")

    @staticmethod
    def create_store(name: str, slug: Optional[str] = None) -> Store:
        """
        Create a store. The slug defaults to the slugified name.

        Raises:
            BadRequestError: If no usable slug can be derived
            DuplicateResourceError: If the slug is taken
        """
        slug = slugify(slug or name)
        if not slug:
            raise BadRequestError("Store slug cannot be empty")

        StoreService._ensure_slug_free(slug)

        store = Store(name=name.strip(), slug=slug, is_active=True)
        db.session.add(store)
        db.session.commit()

        current_app.logger.info("Store created: %s", slug)
        return store

    @staticmethod
    def update_store(
        store_id: UUID,
        name: Optional[str] = None,
        slug: Optional[str] = None,
        is_active: Optional[bool] = None
    ) -> Store:
        store = StoreService.get_store(store_id)

        if name is not None:
            store.name = name.strip()

        if slug is not None:
            slug = slugify(slug)
            if not slug:
                raise BadRequestError("Store slug cannot be empty")
            if slug != store.slug:
                StoreService._ensure_slug_free(slug, exclude_id=store.id)
                store.slug = slug

        if is_active is not None:
            store.is_active = is_active

        db.session.commit()

        current_app.logger.info("Store updated: %s", store.slug)
        return store

    @staticmethod
    def list_links(store_id: UUID) -> List[StoreUser]:
        StoreService.get_store(store_id)

        return db.session.query(StoreUser).join(User, User.id == StoreUser.user_id).filter(
            StoreUser.store_id == store_id
        ).order_by(User.full_name).all()

    @staticmethod
    def link_user(store_id: UUID, user_id: UUID, role_id: UUID, commit: bool = True) -> StoreUser:
        """
        Link a user to a store with a role. An existing link gets the new role.

        Raises:
            StoreNotFoundError: If store not found
            UserNotFoundError: If user not found
            RoleNotFoundError: If role not found
        """
        StoreService.get_store(store_id)
        role = RoleService.get_role(role_id)
        if not db.session.get(User, user_id):
            raise UserNotFoundError()

        link = db.session.query(StoreUser).filter(
            StoreUser.store_id == store_id,
            StoreUser.user_id == user_id
        ).first()

        if link:
            link.role_id = role.id
        else:
            link = StoreUser(store_id=store_id, user_id=user_id, role_id=role.id)
            db.session.add(link)

        if commit:
            db.session.commit()
        return link

    @staticmethod
    def create_store_user(
        context: PermissionContext,
        email: str,
        password: str,
        role_id: UUID,
        store_ids: List[UUID],
        full_name: Optional[str] = None
    ) -> User:
        """
        Create a user and link them to one or more stores with a role.

        The full name defaults to the part of the email before the "@".

        Raises:
            DuplicateResourceError: If the email is already registered
            StoreNotFoundError: If any store is unknown
            RoleNotFoundError: If role not found
        """
        email = email.strip().lower()

        if db.session.query(User).filter(User.email == email).first():
            raise DuplicateResourceError("A user with this email already exists")

        store_ids = list(dict.fromkeys(store_ids))
        for store_id in store_ids:
            StoreService.get_store(store_id)
        RoleService.get_role(role_id)

        user = User(
            email=email,
            full_name=(full_name or "").strip() or email.split("@")[0],
            is_active=True,
            is_platform_admin=False,
        )
        user.set_password(password)
        db.session.add(user)
        db.session.flush()

        for store_id in store_ids:
            StoreService.link_user(store_id, user.id, role_id, commit=False)

        db.session.commit()

        current_app.logger.info(
            "User %s created in %d store(s) by %s", email, len(store_ids), context.user_name
        )
        return user

    @staticmethod
    def remove_link(store_id: UUID, link_id: UUID) -> None:
        link = db.session.query(StoreUser).filter(
            StoreUser.id == link_id,
            StoreUser.store_id == store_id
        ).first()
        if not link:
            raise NotFoundError("Store user link not found")

        user_id = link.user_id
        db.session.delete(link)
        db.session.commit()

        current_app.logger.info("User %s removed from store %s", user_id, store_id)
