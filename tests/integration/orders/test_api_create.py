"""POST /api/v1/orders/ end to end: status codes, error body and stock."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.core.models import OutboxEvent
from modules.orders.models import Order

pytestmark = pytest.mark.integration

URL = "/api/v1/orders/"


def _stock(product):
    product.refresh_from_db()
    return product.stock


class TestCreateOrderApi:
    def test_created(self, auth_client, order_payload, product):
        response = auth_client.post(URL, order_payload([(product, 2)]), format="json")

        assert response.status_code == 201
        body = response.json()
        assert body["order_number"] == "ORD-1"
        assert body["status"] == "pending"
        assert body["total_amount"] == "20.00"
        assert body["enterprise_name"] == "Papelaria Central"
        assert len(body["items"]) == 1
        assert body["items"][0]["product_id"] == str(product.id)
        assert [h["new_status"] for h in body["status_history"]] == ["pending"]
        assert _stock(product) == 3

    def test_insufficient_stock(self, auth_client, order_payload, make_product):
        scarce = make_product(stock=1)

        response = auth_client.post(URL, order_payload([(scarce, 2)]), format="json")

        assert response.status_code == 400
        assert response.json() == {
            "detail": "Item 1: insufficient stock for Widget (available 1, requested 2)",
            "code": "invalid_request",
            "field": "items[0].quantity",
        }
        assert _stock(scarce) == 1

    def test_price_mismatch(self, auth_client, order_payload, product):
        payload = order_payload([(product, 2)])
        payload["items"][0]["unit_price"] = "9.00"
        payload["items"][0]["subtotal"] = "18.00"
        payload["total_amount"] = "18.00"

        response = auth_client.post(URL, payload, format="json")

        assert response.status_code == 400
        assert "price mismatch" in response.json()["detail"]
        assert not Order.objects.exists()

    def test_total_mismatch(self, auth_client, order_payload, product):
        response = auth_client.post(
            URL, order_payload([(product, 2)], total_amount="19.99"), format="json"
        )

        assert response.status_code == 400
        assert response.json()["field"] == "total_amount"

    def test_unknown_customer(self, auth_client, order_payload, product):
        response = auth_client.post(
            URL, order_payload([(product, 1)], customer_id=str(uuid4())), format="json"
        )

        assert response.status_code == 404
        assert response.json()["code"] == "not_found"
        assert response.json()["field"] == "customer_id"

    def test_unknown_product(self, auth_client, order_payload, product):
        payload = order_payload([(product, 1)])
        payload["items"][0]["product_id"] = str(uuid4())

        response = auth_client.post(URL, payload, format="json")

        assert response.status_code == 404
        assert response.json()["field"] == "items[0].product_id"

    def test_duplicate_order_number(self, auth_client, order_payload, make_product):
        widget = make_product(stock=10)
        auth_client.post(URL, order_payload([(widget, 1)]), format="json")

        response = auth_client.post(URL, order_payload([(widget, 1)]), format="json")

        assert response.status_code == 409
        assert response.json()["code"] == "conflict"
        assert Order.objects.count() == 1
        assert _stock(widget) == 9

    def test_empty_items(self, auth_client, order_payload):
        response = auth_client.post(
            URL, order_payload([], total_amount="10.00"), format="json"
        )

        assert response.status_code == 400
        assert response.json()["field"] == "items"

    def test_future_order_date(self, auth_client, order_payload, product):
        response = auth_client.post(
            URL, order_payload([(product, 1)], order_date="2999-01-01"), format="json"
        )

        assert response.status_code == 400
        assert response.json()["field"] == "order_date"

    def test_malformed_payload_rejected_by_serializer(self, auth_client):
        response = auth_client.post(URL, {"order_number": "ORD-1"}, format="json")

        assert response.status_code == 400
        assert "items" in response.json()

    def test_amount_wider_than_column_rejected_by_serializer(
        self, auth_client, order_payload, product
    ):
        payload = order_payload([(product, 1)], total_amount="123456789.00")
        payload["items"][0]["subtotal"] = "123456789.00"

        response = auth_client.post(URL, payload, format="json")

        assert response.status_code == 400
        assert "total_amount" in response.json()
        assert "items" in response.json()
        assert Order.objects.count() == 0

    def test_outbox_row_written_with_order(self, auth_client, order_payload, product):
        response = auth_client.post(URL, order_payload([(product, 2)]), format="json")

        event = OutboxEvent.objects.get(event_type="OrderCreated")
        assert event.aggregate_id == response.json()["id"]

    def test_rejected_order_leaves_no_outbox_row(
        self, auth_client, order_payload, product
    ):
        auth_client.post(URL, order_payload([(product, 6)]), format="json")

        assert not OutboxEvent.objects.exists()

    def test_requires_authentication(self, api_client, order_payload, product):
        response = api_client.post(URL, order_payload([(product, 1)]), format="json")

        assert response.status_code == 401
        assert _stock(product) == 5
