"""
Store administration API tests.

Tests for:
- Store CRUD by platform administrators
- Creating staff accounts linked to stores
- Linking and unlinking users
- Refusal for everyone else
"""

import pytest

from orderdesk.extensions import db
from orderdesk.blueprints.stores.models import StoreUser
from orderdesk.blueprints.stores.services import slugify
from orderdesk.blueprints.users.models import User


class TestSlugify:

    @pytest.mark.unit
    def test_slugify(self):
        assert slugify("  Doce Sabor Bakery ") == "doce-sabor-bakery"
        assert slugify("Café & Bolo!") == "caf-bolo"
        assert slugify("---") == ""


class TestStoreCRUD:
    """Tests for /api/v1/stores"""

    @pytest.mark.integration
    def test_create_store_derives_slug(self, client, admin_headers):
        """Test creating a store without an explicit slug."""
        response = client.post("/api/v1/stores", headers=admin_headers, json={"name": "Doce Sabor"})

        assert response.status_code == 201
        data = response.get_json()
        assert data["slug"] == "doce-sabor"
        assert data["is_active"] is True

    @pytest.mark.integration
    def test_duplicate_slug(self, client, admin_headers, store):
        response = client.post("/api/v1/stores", headers=admin_headers, json={
            "name": "Another",
            "slug": store.slug,
        })

        assert response.status_code == 409

    @pytest.mark.integration
    def test_list_and_search(self, client, admin_headers, store, second_store):
        response = client.get("/api/v1/stores", headers=admin_headers)

        assert response.status_code == 200
        data = response.get_json()
        assert data["total"] == 2
        assert [s["name"] for s in data["stores"]] == ["Main Bakery", "Other Bakery"]

        response = client.get("/api/v1/stores?search=other", headers=admin_headers)
        assert [s["slug"] for s in response.get_json()["stores"]] == ["other-bakery"]

    @pytest.mark.integration
    def test_deactivate_store(self, client, admin_headers, store):
        response = client.put(f"/api/v1/stores/{store.id}", headers=admin_headers, json={"is_active": False})

        assert response.status_code == 200
        assert response.get_json()["is_active"] is False

        response = client.get("/api/v1/stores?is_active=false", headers=admin_headers)
        assert response.get_json()["total"] == 1

    @pytest.mark.integration
    def test_get_unknown_store(self, client, admin_headers):
        response = client.get("/api/v1/stores/00000000-0000-0000-0000-000000000000", headers=admin_headers)

        assert response.status_code == 404

    @pytest.mark.integration
    def test_manager_is_refused(self, client, manager_headers):
        response = client.get("/api/v1/stores", headers=manager_headers)

        assert response.status_code == 403
        assert response.get_json()["error"] == "platform_admin_required"


class TestStoreUsers:

    @pytest.mark.integration
    def test_create_store_user(self, client, admin_headers, store, second_store, attendant_role):
        response = client.post("/api/v1/stores/users", headers=admin_headers, json={
            "email": "New.Hire@Example.com",
            "password": "secret123",
            "role_id": str(attendant_role.id),
            "store_ids": [str(store.id), str(second_store.id)],
        })

        assert response.status_code == 201
        data = response.get_json()
        assert data["email"] == "new.hire@example.com"
        assert data["full_name"] == "new.hire"
        assert "password" not in data

        user = db.session.query(User).filter(User.email == "new.hire@example.com").one()
        assert db.session.query(StoreUser).filter(StoreUser.user_id == user.id).count() == 2

    @pytest.mark.integration
    def test_existing_email(self, client, admin_headers, manager, store, attendant_role):
        response = client.post("/api/v1/stores/users", headers=admin_headers, json={
            "email": manager.email,
            "password": "secret123",
            "role_id": str(attendant_role.id),
            "store_ids": [str(store.id)],
        })

        assert response.status_code == 409

    @pytest.mark.integration
    def test_unknown_store_creates_nothing(self, client, admin_headers, attendant_role):
        response = client.post("/api/v1/stores/users", headers=admin_headers, json={
            "email": "ghost@example.com",
            "password": "secret123",
            "role_id": str(attendant_role.id),
            "store_ids": ["00000000-0000-0000-0000-000000000000"],
        })

        assert response.status_code == 404
        assert db.session.query(User).filter(User.email == "ghost@example.com").first() is None

    @pytest.mark.integration
    def test_link_changes_existing_role(self, client, admin_headers, store, attendant, manager_role):
        response = client.post(f"/api/v1/stores/{store.id}/users", headers=admin_headers, json={
            "user_id": str(attendant.id),
            "role_id": str(manager_role.id),
        })

        assert response.status_code == 200
        assert response.get_json()["role"]["name"] == "Manager"
        assert db.session.query(StoreUser).filter(StoreUser.user_id == attendant.id).count() == 1

    @pytest.mark.integration
    def test_list_and_remove_link(self, client, admin_headers, store, manager, attendant):
        response = client.get(f"/api/v1/stores/{store.id}/users", headers=admin_headers)

        links = {m["user"]["email"]: m["id"] for m in response.get_json()["users"]}
        assert set(links) == {"manager@example.com", "attendant@example.com"}

        response = client.delete(
            f"/api/v1/stores/{store.id}/users/{links['attendant@example.com']}", headers=admin_headers
        )
        assert response.status_code == 200

        response = client.get(f"/api/v1/stores/{store.id}/users", headers=admin_headers)
        assert [m["user"]["email"] for m in response.get_json()["users"]] == ["manager@example.com"]

    @pytest.mark.integration
    def test_remove_unknown_link(self, client, admin_headers, store):
        response = client.delete(
            f"/api/v1/stores/{store.id}/users/00000000-0000-0000-0000-000000000000", headers=admin_headers
        )

        assert response.status_code == 404
