"""
Order API tests.

Tests for:
- Creating orders with complements in one request
- Validation that blocks a write entirely
- Status, tag and delete operations with their permissions
- The order board and the remembered detail view
"""

import pytest
from datetime import date, timedelta

from orderdesk.extensions import db
from orderdesk.blueprints.orders.models import Order, OrderItem, DeliveryType, PaymentStatus, FulfillmentStatus

from conftest import make_order

TODAY = date(2026, 3, 10)


def _option(group, name):
    return next(option for option in group.options if option.name == name)


def _order_body(customer, items, **overrides):
    body = {
        "customer_id": str(customer.id),
        "delivery_type": "pickup",
        "delivery_date": TODAY.isoformat(),
        "delivery_time": "15:30",
        "items": items,
    }
    body.update(overrides)
    return body


class TestCreateOrder:
    """Tests for POST /api/v1/orders"""

    @pytest.mark.integration
    def test_create_with_complements(self, client, manager_headers, customer, cake, topping_group):
        strawberries = _option(topping_group, "Strawberries")

        response = client.post("/api/v1/orders", headers=manager_headers, json=_order_body(
            customer,
            [{"product_id": str(cake.id), "quantity": 2,
              "selections": {f"{topping_group.id}-0": str(strawberries.id)}}],
            discount="5.00",
        ))

        assert response.status_code == 201
        data = response.get_json()

        assert data["order_number"] == 1
        assert data["subtotal"] == "125.00"
        assert data["total"] == "120.00"
        assert data["payment_status"] == "Unpaid"
        assert data["fulfillment_status"] == "Not Delivered"
        assert data["created_by_name"] == "Mary Manager"

        item = data["items"][0]
        assert item["unit_price"] == "62.50"
        assert item["complements"][0]["name"] == "Strawberries"
        assert item["complements"][0]["group_name"] == "Topping"

    @pytest.mark.integration
    def test_order_numbers_increase_per_store(self, client, manager_headers, customer, pie):
        body = _order_body(customer, [{"product_id": str(pie.id)}])

        first = client.post("/api/v1/orders", headers=manager_headers, json=body).get_json()
        second = client.post("/api/v1/orders", headers=manager_headers, json=body).get_json()

        assert (first["order_number"], second["order_number"]) == (1, 2)

    @pytest.mark.integration
    def test_missing_required_complement_writes_nothing(self, client, manager_headers, customer, cake):
        response = client.post("/api/v1/orders", headers=manager_headers, json=_order_body(
            customer, [{"product_id": str(cake.id)}]
        ))

        assert response.status_code == 400
        assert "Topping" in response.get_json()["message"]
        assert db.session.query(Order).count() == 0
        assert db.session.query(OrderItem).count() == 0

    @pytest.mark.integration
    def test_delivery_needs_shipping_fee(self, client, manager_headers, customer, address, pie):
        response = client.post("/api/v1/orders", headers=manager_headers, json=_order_body(
            customer,
            [{"product_id": str(pie.id)}],
            delivery_type="delivery",
            address_id=str(address.id),
        ))

        assert response.status_code == 400
        assert "shipping_fee" in response.get_json()["errors"]
        assert db.session.query(Order).count() == 0

    @pytest.mark.integration
    def test_delivery_order(self, client, manager_headers, customer, address, pie):
        response = client.post("/api/v1/orders", headers=manager_headers, json=_order_body(
            customer,
            [{"product_id": str(pie.id)}],
            delivery_type="delivery",
            address_id=str(address.id),
            shipping_fee="7.00",
        ))

        assert response.status_code == 201
        data = response.get_json()
        assert data["total"] == "37.00"
        assert data["address"]["street"] == "Rua das Flores"

    @pytest.mark.integration
    def test_address_edit_keeps_saved_order(self, client, manager_headers, customer, address, pie):
        created = client.post("/api/v1/orders", headers=manager_headers, json=_order_body(
            customer,
            [{"product_id": str(pie.id)}],
            delivery_type="delivery",
            address_id=str(address.id),
            shipping_fee="7.00",
        )).get_json()

        client.put(f"/api/v1/customers/{customer.id}/addresses/{address.id}", headers=manager_headers, json={
            "street": "Rua Nova",
            "number": "9",
        })

        detail = client.get(f"/api/v1/orders/{created['id']}", headers=manager_headers).get_json()
        assert detail["address"]["street"] == "Rua das Flores"
        assert detail["address"]["number"] == "120"
        assert detail["address_id"] == str(address.id)

    @pytest.mark.integration
    def test_discount_cannot_exceed_value(self, client, manager_headers, customer, pie):
        response = client.post("/api/v1/orders", headers=manager_headers, json=_order_body(
            customer, [{"product_id": str(pie.id)}], discount="40.00"
        ))

        assert response.status_code == 400
        assert "discount" in response.get_json()["errors"]

    @pytest.mark.integration
    def test_items_required(self, client, manager_headers, customer):
        response = client.post("/api/v1/orders", headers=manager_headers, json=_order_body(customer, []))

        assert response.status_code == 400
        assert "items" in response.get_json()["errors"]

    @pytest.mark.integration
    def test_viewer_cannot_create(self, client, viewer_headers, customer, pie):
        response = client.post("/api/v1/orders", headers=viewer_headers, json=_order_body(
            customer, [{"product_id": str(pie.id)}]
        ))

        assert response.status_code == 403
        assert response.get_json()["error"] == "insufficient_permissions"


class TestReadOrders:

    @pytest.mark.integration
    def test_list_and_filter(self, client, viewer_headers, store, customer):
        make_order(store, customer, number=1)
        make_order(store, customer, number=2, payment_status=PaymentStatus.PAID,
                   fulfillment_status=FulfillmentStatus.DELIVERED)

        response = client.get("/api/v1/orders", headers=viewer_headers)
        assert response.status_code == 200
        assert response.get_json()["total"] == 2

        response = client.get("/api/v1/orders?scope=open", headers=viewer_headers)
        assert [o["order_number"] for o in response.get_json()["orders"]] == [1]

        response = client.get("/api/v1/orders?payment_status=Paid", headers=viewer_headers)
        assert [o["order_number"] for o in response.get_json()["orders"]] == [2]

    @pytest.mark.integration
    def test_search_by_number_and_name(self, client, manager_headers, store, customer):
        make_order(store, customer, number=7)

        by_number = client.get("/api/v1/orders?search=7", headers=manager_headers).get_json()
        by_name = client.get("/api/v1/orders?search=souza", headers=manager_headers).get_json()

        assert by_number["total"] == 1
        assert by_name["total"] == 1

    @pytest.mark.integration
    def test_search_with_non_ascii_digit(self, client, manager_headers, store, customer):
        make_order(store, customer, number=2)

        response = client.get("/api/v1/orders?search=%C2%B2", headers=manager_headers)

        assert response.status_code == 200
        assert response.get_json()["total"] == 0

    @pytest.mark.integration
    def test_filter_by_tags(self, client, manager_headers, store, customer, tag):
        tagged = make_order(store, customer, number=1)
        make_order(store, customer, number=2)
        tagged.tags = [tag]
        db.session.commit()

        response = client.get(f"/api/v1/orders?tag_ids={tag.id}", headers=manager_headers)

        assert response.status_code == 200
        assert [o["order_number"] for o in response.get_json()["orders"]] == [1]

    @pytest.mark.integration
    def test_filter_by_date_range(self, client, manager_headers, store, customer):
        make_order(store, customer, number=1, delivery_date=TODAY - timedelta(days=3))
        make_order(store, customer, number=2, delivery_date=TODAY)
        make_order(store, customer, number=3, delivery_date=TODAY + timedelta(days=1))
        make_order(store, customer, number=4, delivery_date=TODAY + timedelta(days=4))

        response = client.get(
            f"/api/v1/orders?date_from={TODAY.isoformat()}&date_to={(TODAY + timedelta(days=1)).isoformat()}",
            headers=manager_headers,
        )

        assert [o["order_number"] for o in response.get_json()["orders"]] == [3, 2]

        response = client.get(f"/api/v1/orders?date_from={TODAY.isoformat()}", headers=manager_headers)
        assert response.get_json()["total"] == 3

    @pytest.mark.integration
    def test_filter_by_fulfillment_status(self, client, manager_headers, store, customer):
        make_order(store, customer, number=1)
        make_order(store, customer, number=2, fulfillment_status=FulfillmentStatus.DELIVERED)

        response = client.get("/api/v1/orders?fulfillment_status=Delivered", headers=manager_headers)
        assert [o["order_number"] for o in response.get_json()["orders"]] == [2]

        response = client.get("/api/v1/orders?fulfillment_status=Not%20Delivered", headers=manager_headers)
        assert [o["order_number"] for o in response.get_json()["orders"]] == [1]

    @pytest.mark.integration
    def test_filter_by_delivery_type(self, client, manager_headers, store, customer):
        make_order(store, customer, number=1)
        delivered = make_order(store, customer, number=2)
        delivered.delivery_type = DeliveryType.DELIVERY
        db.session.commit()

        response = client.get("/api/v1/orders?delivery_type=delivery", headers=manager_headers)
        assert [o["order_number"] for o in response.get_json()["orders"]] == [2]

        response = client.get("/api/v1/orders?delivery_type=pickup", headers=manager_headers)
        assert [o["order_number"] for o in response.get_json()["orders"]] == [1]

    @pytest.mark.integration
    def test_unknown_filter_value(self, client, manager_headers, store):
        response = client.get("/api/v1/orders?delivery_type=drone", headers=manager_headers)

        assert response.status_code == 400
        assert "delivery_type" in response.get_json()["errors"]

    @pytest.mark.integration
    def test_page_size_is_capped(self, app, client, manager_headers, store, customer):
        app.config["MAX_PAGE_SIZE"] = 2
        for number in (1, 2, 3):
            make_order(store, customer, number=number)

        response = client.get("/api/v1/orders?per_page=50", headers=manager_headers)

        data = response.get_json()
        assert data["per_page"] == 2
        assert len(data["orders"]) == 2
        assert data["pages"] == 2

    @pytest.mark.integration
    def test_detail(self, client, manager_headers, order):
        response = client.get(f"/api/v1/orders/{order.id}", headers=manager_headers)

        assert response.status_code == 200
        data = response.get_json()
        assert data["customer"]["name"] == "Maria Souza"
        assert data["items"][0]["product_name"] == "Chicken pie"

    @pytest.mark.integration
    def test_board(self, client, manager_headers, store, customer):
        make_order(store, customer, number=1, delivery_date=TODAY, delivery_time="16:00")
        make_order(store, customer, number=2, delivery_date=TODAY, delivery_time="09:00")
        make_order(store, customer, number=3, delivery_date=TODAY + timedelta(days=1))
        make_order(store, customer, number=4, delivery_date=TODAY + timedelta(days=5))
        make_order(store, customer, number=5, delivery_date=TODAY - timedelta(days=2))
        make_order(store, customer, number=6, delivery_date=TODAY - timedelta(days=2),
                   fulfillment_status=FulfillmentStatus.DELIVERED)
        make_order(store, customer, number=7, delivery_date=TODAY,
                   payment_status=PaymentStatus.PAID, fulfillment_status=FulfillmentStatus.DELIVERED)

        response = client.get(f"/api/v1/orders/board?today={TODAY.isoformat()}", headers=manager_headers)

        assert response.status_code == 200
        board = response.get_json()

        def numbers(bucket):
            return [o["order_number"] for o in board[bucket]]

        assert numbers("today") == [2, 1]
        assert numbers("tomorrow") == [3]
        assert numbers("next7days") == [4]
        assert numbers("overdue") == [5]
        assert numbers("delivered_unpaid") == [6]


class TestOrderChanges:

    @pytest.mark.integration
    def test_attendant_changes_status(self, client, attendant_headers, order):
        response = client.patch(f"/api/v1/orders/{order.id}/status", headers=attendant_headers, json={
            "payment_status": "Paid",
        })

        assert response.status_code == 200
        data = response.get_json()
        assert data["payment_status"] == "Paid"
        assert data["fulfillment_status"] == "Not Delivered"

    @pytest.mark.integration
    def test_empty_status_change(self, client, manager_headers, order):
        response = client.patch(f"/api/v1/orders/{order.id}/status", headers=manager_headers, json={})

        assert response.status_code == 400

    @pytest.mark.integration
    def test_viewer_cannot_change_status(self, client, viewer_headers, order):
        response = client.patch(f"/api/v1/orders/{order.id}/status", headers=viewer_headers, json={
            "fulfillment_status": "Delivered",
        })

        assert response.status_code == 403

    @pytest.mark.integration
    def test_replace_tags(self, client, manager_headers, order, tag):
        response = client.put(f"/api/v1/orders/{order.id}/tags", headers=manager_headers, json={
            "tag_ids": [str(tag.id)],
        })

        assert response.status_code == 200
        assert [t["name"] for t in response.get_json()["tags"]] == ["Birthday"]

        response = client.put(f"/api/v1/orders/{order.id}/tags", headers=manager_headers, json={"tag_ids": []})
        assert response.get_json()["tags"] == []

    @pytest.mark.integration
    def test_replace_order_keeps_number(self, client, manager_headers, order, customer, pie):
        response = client.put(f"/api/v1/orders/{order.id}", headers=manager_headers, json=_order_body(
            customer, [{"product_id": str(pie.id), "quantity": 3}], delivery_time="11:00"
        ))

        assert response.status_code == 200
        data = response.get_json()
        assert data["order_number"] == order.order_number
        assert data["delivery_time"] == "11:00"
        assert data["total"] == "90.00"
        assert len(data["items"]) == 1

    @pytest.mark.integration
    def test_attendant_cannot_delete(self, client, attendant_headers, order):
        response = client.delete(f"/api/v1/orders/{order.id}", headers=attendant_headers)

        assert response.status_code == 403

    @pytest.mark.integration
    def test_delete_removes_items_and_tag_links(self, client, manager_headers, order, tag):
        order_id = order.id
        client.put(f"/api/v1/orders/{order_id}/tags", headers=manager_headers, json={"tag_ids": [str(tag.id)]})

        response = client.delete(f"/api/v1/orders/{order_id}", headers=manager_headers)

        assert response.status_code == 200
        assert db.session.query(Order).count() == 0
        assert db.session.query(OrderItem).count() == 0
        assert client.get(f"/api/v1/orders/{order_id}", headers=manager_headers).status_code == 404


class TestOpenDetail:
    """The order detail left open is restored after a reload."""

    @pytest.mark.integration
    def test_remember_and_clear(self, client, manager_headers, order):
        assert client.get("/api/v1/orders/open-detail", headers=manager_headers).get_json() == {"order_id": None}

        response = client.put("/api/v1/orders/open-detail", headers=manager_headers, json={"order_id": str(order.id)})
        assert response.status_code == 200

        response = client.get("/api/v1/orders/open-detail", headers=manager_headers)
        assert response.get_json()["order_id"] == str(order.id)

        client.delete("/api/v1/orders/open-detail", headers=manager_headers)
        assert client.get("/api/v1/orders/open-detail", headers=manager_headers).get_json() == {"order_id": None}

    @pytest.mark.integration
    def test_unknown_order(self, client, manager_headers, store):
        response = client.put("/api/v1/orders/open-detail", headers=manager_headers, json={
            "order_id": "00000000-0000-0000-0000-000000000000",
        })

        assert response.status_code == 404
