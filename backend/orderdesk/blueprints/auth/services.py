"""
Authentication service.
"""

from flask import current_app

from orderdesk.extensions import db
from orderdesk.blueprints.users.models import User
from orderdesk.core.utils import generate_access_token
from orderdesk.core.exceptions import InvalidCredentialsError, UserInactiveError


class AuthService:

    @staticmethod
    def login(email: str, password: str) -> dict:
        """
        Authenticate a user by email and password.

        Returns:
            Dict with access_token, token_type, expires_in and the user

        Raises:
            InvalidCredentialsError: If email or password is wrong
            UserInactiveError: If the account is deactivated
        """
        user = db.session.query(User).filter(User.email == email.strip().lower()).first()

        if not user or not user.check_password(password):
            current_app.logger.info("Failed login for %s", email)
            raise InvalidCredentialsError()

        if not user.is_active:
            raise UserInactiveError()

        return {
            "access_token": generate_access_token(user.id, user.is_platform_admin),
            "token_type": "Bearer",
            "expires_in": current_app.config["JWT_ACCESS_TOKEN_EXPIRES"],
            "user": user,
        }
