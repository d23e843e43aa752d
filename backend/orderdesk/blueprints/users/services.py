"""
User service: profile of the signed-in user and the people of a store.
"""

from typing import List, Optional
from uuid import UUID

from flask import current_app

from orderdesk.extensions import db
from orderdesk.blueprints.users.models import User
from orderdesk.blueprints.stores.models import Store, StoreUser
from orderdesk.blueprints.rbac.services import RoleService
from orderdesk.blueprints.stores.services import StoreService
from orderdesk.core.permissions import PermissionContext
from orderdesk.core.exceptions import (
    BadRequestError,
    DuplicateResourceError,
    InvalidCredentialsError,
    UserNotFoundError,
)


class UserService:
    """Service handling user operations."""

    @staticmethod
    def get_profile(context: PermissionContext) -> dict:
        """
        Who the caller is and where they can work.

        Platform administrators see every active store without a role;
        other users see the stores they are linked to with their role there.
        When a store is selected, its slug, the role and the normalized
        permissions are included.
        """
        user = db.session.get(User, context.user_id)

        if context.is_platform_admin:
            stores = [
                {"id": s.id, "name": s.name, "slug": s.slug, "role": None}
                for s in db.session.query(Store).filter(Store.is_active.is_(True)).order_by(Store.name).all()
            ]
        else:
            links = db.session.query(StoreUser).join(Store, Store.id == StoreUser.store_id).filter(
                StoreUser.user_id == context.user_id,
                Store.is_active.is_(True)
            ).order_by(Store.name).all()
            stores = [
                {
                    "id": link.store.id,
                    "name": link.store.name,
                    "slug": link.store.slug,
                    "role": link.role.name,
                }
                for link in links
            ]

        current = None
        if context.store_id is not None:
            current = {
                "store_slug": context.store_slug,
                "role": context.role_name,
                "permissions": context.permissions,
            }

        return {
            "id": user.id,
            "email": user.email,
            "full_name": user.full_name,
            "is_platform_admin": user.is_platform_admin,
            "stores": stores,
            "current_store": current,
        }

    @staticmethod
    def list_store_users(context: PermissionContext) -> List[StoreUser]:
        return db.session.query(StoreUser).join(User, User.id == StoreUser.user_id).filter(
            StoreUser.store_id == context.store_id
        ).order_by(User.full_name).all()

    @staticmethod
    def assign_role(context: PermissionContext, user_id: UUID, role_id: UUID) -> StoreUser:
        """
        Give a store member a different role in the current store.

        Raises:
            UserNotFoundError: If the user is not linked to the store
            RoleNotFoundError: If role not found
        """
        role = RoleService.get_role(role_id)
        link = UserService._member_link(context, user_id)

        link.role_id = role.id
        db.session.commit()

        current_app.logger.info(
            "User %s is now %s in store %s (by %s)", user_id, role.name, context.store_slug, context.user_name
        )
        return link

    @staticmethod
    def _member_link(context: PermissionContext, user_id: UUID) -> StoreUser:
        link = db.session.query(StoreUser).filter(
            StoreUser.store_id == context.store_id,
            StoreUser.user_id == user_id
        ).first()
        if not link:
            raise UserNotFoundError("User is not a member of this store")
        return link

    @staticmethod
    def create_member(
        context: PermissionContext,
        email: str,
        password: str,
        role_id: UUID,
        full_name: Optional[str] = None
    ) -> StoreUser:
        """
        Create a staff account and link it to the current store.

        Raises:
            DuplicateResourceError: If the email is already registered
            RoleNotFoundError: If role not found
        """
        user = StoreService.create_store_user(
            context, email, password, role_id, [context.store_id], full_name=full_name
        )
        return UserService._member_link(context, user.id)

    @staticmethod
    def update_member(
        context: PermissionContext,
        user_id: UUID,
        full_name: Optional[str] = None,
        email: Optional[str] = None
    ) -> StoreUser:
        """
        Change the name or email of a member of the current store.

        Raises:
            UserNotFoundError: If the user is not linked to the store
            DuplicateResourceError: If another user has the email
        """
        link = UserService._member_link(context, user_id)
        user = link.user

        if full_name is not None:
            if not full_name.strip():
                raise BadRequestError("Name cannot be blank")
            user.full_name = full_name.strip()

        if email is not None:
            email = email.strip().lower()
            taken = db.session.query(User).filter(User.email == email, User.id != user.id).first()
            if taken:
                raise DuplicateResourceError("A user with this email already exists")
            user.email = email

        db.session.commit()

        current_app.logger.info("User %s updated in store %s by %s", user.email, context.store_slug, context.user_name)
        return link

    @staticmethod
    def remove_member(context: PermissionContext, user_id: UUID) -> None:
        """
        Unlink a user from the current store. The account itself is kept,
        with its links to other stores.

        Raises:
            BadRequestError: If the caller tries to remove themselves
            UserNotFoundError: If the user is not linked to the store
        """
        if user_id == context.user_id:
            raise BadRequestError("You cannot remove yourself from the store")

        link = UserService._member_link(context, user_id)
        db.session.delete(link)
        db.session.commit()

        current_app.logger.info("User %s removed from store %s by %s", user_id, context.store_slug, context.user_name)

    @staticmethod
    def change_password(context: PermissionContext, current_password: str, new_password: str) -> None:
        """
        Raises:
            InvalidCredentialsError: If current_password is incorrect
        """
        user = db.session.get(User, context.user_id)

        if not user.check_password(current_password):
            raise InvalidCredentialsError("Current password is incorrect")

        user.set_password(new_password)
        db.session.commit()

        current_app.logger.info("Password changed for %s", user.email)
