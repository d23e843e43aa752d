"""
Authentication tests.

Tests for:
- User login
- JWT token validation by the middleware
- Store selection with the X-Store-Slug header
"""

import pytest
from datetime import datetime, timedelta, timezone

import jwt

from orderdesk.core.utils import decode_token

from conftest import auth_headers_for


class TestLogin:
    """Tests for POST /api/v1/auth/login"""

    @pytest.mark.auth
    def test_login_success(self, client, manager, user_password):
        """Test successful login with valid credentials."""
        response = client.post("/api/v1/auth/login", json={
            "email": manager.email,
            "password": user_password,
        })

        assert response.status_code == 200
        data = response.get_json()

        assert data["token_type"] == "Bearer"
        assert data["expires_in"] > 0
        assert data["user"]["email"] == manager.email
        assert decode_token(data["access_token"])["user_id"] == str(manager.id)

    @pytest.mark.auth
    def test_login_email_is_case_insensitive(self, client, manager, user_password):
        response = client.post("/api/v1/auth/login", json={
            "email": "Manager@Example.com",
            "password": user_password,
        })

        assert response.status_code == 200

    @pytest.mark.auth
    def test_login_invalid_password(self, client, manager):
        """Test login with wrong password."""
        response = client.post("/api/v1/auth/login", json={
            "email": manager.email,
            "password": "wrong-password",
        })

        assert response.status_code == 401
        assert response.get_json()["error"] == "invalid_credentials"

    @pytest.mark.auth
    def test_login_invalid_email(self, client, user_password):
        """Test login with non-existent email."""
        response = client.post("/api/v1/auth/login", json={
            "email": "nonexistent@example.com",
            "password": user_password,
        })

        assert response.status_code == 401

    @pytest.mark.auth
    def test_login_inactive_user(self, client, inactive_user, user_password):
        """Test login with inactive user account."""
        response = client.post("/api/v1/auth/login", json={
            "email": inactive_user.email,
            "password": user_password,
        })

        assert response.status_code == 403
        assert response.get_json()["error"] == "user_inactive"

    @pytest.mark.auth
    def test_login_missing_fields(self, client):
        """Test login with missing required fields."""
        response = client.post("/api/v1/auth/login", json={"email": "someone@example.com"})

        assert response.status_code == 400
        assert "password" in response.get_json()["errors"]


class TestTokenValidation:
    """Tests for the authentication checkpoint."""

    @pytest.mark.auth
    def test_missing_token(self, client):
        response = client.get("/api/v1/users/me")

        assert response.status_code == 401
        assert response.get_json()["error"] == "unauthorized"

    @pytest.mark.auth
    def test_malformed_header(self, client, manager):
        response = client.get("/api/v1/users/me", headers={"Authorization": "Token abc"})

        assert response.status_code == 401

    @pytest.mark.auth
    def test_garbage_token(self, client):
        response = client.get("/api/v1/users/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.get_json()["error"] == "invalid_token"

    @pytest.mark.auth
    def test_expired_token(self, client, app, manager):
        """A token past its expiry is rejected with its own error code."""
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {
                "user_id": str(manager.id),
                "type": "access",
                "iat": now - timedelta(hours=2),
                "exp": now - timedelta(hours=1),
            },
            app.config["JWT_SECRET_KEY"],
            algorithm=app.config["JWT_ALGORITHM"],
        )

        response = client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.get_json()["error"] == "token_expired"

    @pytest.mark.auth
    def test_deactivated_user_token(self, client, manager_headers, manager):
        """Deactivating a user locks out tokens already issued."""
        manager.is_active = False

        response = client.get("/api/v1/users/me", headers=manager_headers)

        assert response.status_code == 403

    @pytest.mark.auth
    def test_options_needs_no_token(self, client):
        response = client.options("/api/v1/orders")

        assert response.status_code != 401


class TestStoreSelection:
    """Tests for the X-Store-Slug header."""

    @pytest.mark.auth
    def test_unknown_store(self, client, manager):
        response = client.get("/api/v1/users/me", headers=auth_headers_for(manager, "no-such-store"))

        assert response.status_code == 404
        assert response.get_json()["error"] == "store_not_found"

    @pytest.mark.auth
    def test_inactive_store(self, client, manager, store):
        store.is_active = False

        response = client.get("/api/v1/users/me", headers=auth_headers_for(manager, store.slug))

        assert response.status_code == 404

    @pytest.mark.auth
    def test_slug_is_case_insensitive(self, client, manager):
        response = client.get("/api/v1/users/me", headers=auth_headers_for(manager, "Main-Bakery"))

        assert response.status_code == 200
        assert response.get_json()["current_store"]["store_slug"] == "main-bakery"
