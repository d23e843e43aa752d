"""
Catalog and tag API tests.

Tests for:
- Complement groups with ordered options
- Products referencing groups, repeats included
- Deleting groups, products and tags
"""

import pytest

from orderdesk.extensions import db
from orderdesk.blueprints.products.models import Product

from conftest import make_order


class TestComplementGroups:

    @pytest.mark.integration
    def test_create_keeps_option_order(self, client, manager_headers):
        response = client.post("/api/v1/products/complement-groups", headers=manager_headers, json={
            "name": "Size",
            "is_required": True,
            "options": [
                {"name": "Small", "additional_price": "0"},
                {"name": "Large", "additional_price": "15.5"},
            ],
        })

        assert response.status_code == 201
        data = response.get_json()
        assert data["is_required"] is True
        assert [(o["name"], o["additional_price"], o["position"]) for o in data["options"]] == [
            ("Small", "0.00", 0),
            ("Large", "15.50", 1),
        ]

    @pytest.mark.integration
    def test_update_replaces_options(self, client, manager_headers, topping_group):
        response = client.put(
            f"/api/v1/products/complement-groups/{topping_group.id}",
            headers=manager_headers,
            json={"options": [{"name": "Coconut", "additional_price": "3.00"}]},
        )

        assert response.status_code == 200
        assert [o["name"] for o in response.get_json()["options"]] == ["Coconut"]

    @pytest.mark.integration
    def test_delete_drops_product_references(self, client, manager_headers, cake, topping_group):
        cake_id = cake.id

        response = client.delete(
            f"/api/v1/products/complement-groups/{topping_group.id}", headers=manager_headers
        )

        assert response.status_code == 200
        assert db.session.get(Product, cake_id).complement_group_ids == []

    @pytest.mark.integration
    def test_attendant_reads_only(self, client, attendant_headers, topping_group):
        assert client.get("/api/v1/products/complement-groups", headers=attendant_headers).status_code == 200

        response = client.post("/api/v1/products/complement-groups", headers=attendant_headers, json={
            "name": "Sauce",
        })
        assert response.status_code == 403


class TestProducts:

    @pytest.mark.integration
    def test_create_with_repeated_group(self, client, manager_headers, category, topping_group):
        group_id = str(topping_group.id)

        response = client.post("/api/v1/products", headers=manager_headers, json={
            "name": "Double layer cake",
            "price": "80",
            "category_id": str(category.id),
            "complement_group_ids": [group_id, group_id],
        })

        assert response.status_code == 201
        data = response.get_json()
        assert data["price"] == "80.00"
        assert data["category"]["name"] == "Cakes"
        assert data["complement_group_ids"] == [group_id, group_id]

    @pytest.mark.integration
    def test_unknown_group_rejected(self, client, manager_headers):
        response = client.post("/api/v1/products", headers=manager_headers, json={
            "name": "Mystery",
            "price": "10",
            "complement_group_ids": ["00000000-0000-0000-0000-000000000000"],
        })

        assert response.status_code == 400
        assert "complement_group_ids" in response.get_json()["errors"]

    @pytest.mark.integration
    def test_list_filters(self, client, attendant_headers, cake, pie):
        pie.is_active = False
        db.session.commit()

        response = client.get("/api/v1/products?is_active=true", headers=attendant_headers)

        assert [p["name"] for p in response.get_json()["products"]] == ["Chocolate cake"]

    @pytest.mark.integration
    def test_sold_product_cannot_be_deleted(self, client, manager_headers, store, customer, pie):
        order = make_order(store, customer)
        order.items[0].product_id = pie.id
        db.session.commit()

        response = client.delete(f"/api/v1/products/{pie.id}", headers=manager_headers)

        assert response.status_code == 409

    @pytest.mark.integration
    def test_delete_unsold_product(self, client, manager_headers, pie):
        response = client.delete(f"/api/v1/products/{pie.id}", headers=manager_headers)

        assert response.status_code == 200
        assert db.session.query(Product).count() == 0


class TestTags:

    @pytest.mark.integration
    def test_any_member_can_list(self, client, viewer_headers, tag):
        response = client.get("/api/v1/tags", headers=viewer_headers)

        assert response.status_code == 200
        assert [t["name"] for t in response.get_json()["tags"]] == ["Birthday"]

    @pytest.mark.integration
    def test_create_and_duplicate(self, client, manager_headers, tag):
        response = client.post("/api/v1/tags", headers=manager_headers, json={"name": "Wedding"})

        assert response.status_code == 201
        assert response.get_json()["color"] == "#6b7280"

        response = client.post("/api/v1/tags", headers=manager_headers, json={"name": "birthday"})
        assert response.status_code == 409

    @pytest.mark.integration
    def test_bad_color(self, client, manager_headers):
        response = client.post("/api/v1/tags", headers=manager_headers, json={"name": "VIP", "color": "red"})

        assert response.status_code == 400

    @pytest.mark.integration
    def test_attendant_cannot_create(self, client, attendant_headers):
        response = client.post("/api/v1/tags", headers=attendant_headers, json={"name": "VIP"})

        assert response.status_code == 403

    @pytest.mark.integration
    def test_delete_unlinks_orders(self, client, manager_headers, order, tag):
        order_id = order.id
        client.put(f"/api/v1/orders/{order_id}/tags", headers=manager_headers, json={"tag_ids": [str(tag.id)]})

        response = client.delete(f"/api/v1/tags/{tag.id}", headers=manager_headers)

        assert response.status_code == 200
        detail = client.get(f"/api/v1/orders/{order_id}", headers=manager_headers).get_json()
        assert detail["tags"] == []


class TestCategories:

    @pytest.mark.integration
    def test_create_and_rename(self, client, manager_headers):
        response = client.post("/api/v1/products/categories", headers=manager_headers, json={"name": " Pies "})

        assert response.status_code == 201
        category_id = response.get_json()["id"]
        assert response.get_json()["name"] == "Pies"

        response = client.put(f"/api/v1/products/categories/{category_id}", headers=manager_headers, json={
            "name": "Savory pies",
        })
        assert response.get_json()["name"] == "Savory pies"

    @pytest.mark.integration
    def test_delete_uncategorizes_products(self, client, manager_headers, category, cake):
        cake_id = cake.id

        response = client.delete(f"/api/v1/products/categories/{category.id}", headers=manager_headers)

        assert response.status_code == 200
        assert db.session.get(Product, cake_id).category_id is None
        assert client.get("/api/v1/products/categories", headers=manager_headers).get_json()["categories"] == []
