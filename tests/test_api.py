"""Integration tests for the order endpoints via TestClient."""

from datetime import datetime, timedelta, timezone

from order_service.app.errors import StoreError

ORDER_BODY = {
    "customerName": "Alice",
    "orderedAt": "2024-01-15T09:30:00",
    "items": [{"itemCode": "A1", "description": "Widget", "quantity": 3}],
}


def _create(client, body=ORDER_BODY):
    response = client.post("/orders", json=body)
    assert response.status_code == 201
    return response.json()["orderId"]


def test_health(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Order service is running"}


class TestCreateAndList:
    def test_create_returns_order_id(self, client):
        response = client.post("/orders", json=ORDER_BODY)

        assert response.status_code == 201
        assert response.json() == {"message": "Order added successfully", "orderId": 1}

    def test_list_uses_camel_case(self, client):
        order_id = _create(client)

        response = client.get("/orders")

        assert response.status_code == 200
        [order] = response.json()
        assert order["orderId"] == order_id
        assert order["customerName"] == "Alice"
        assert order["orderedAt"].startswith("2024-01-15T09:30:00")
        assert len(order["items"]) == 1
        item = order["items"][0]
        assert item["itemCode"] == "A1"
        assert item["description"] == "Widget"
        assert item["quantity"] == 3
        assert isinstance(item["itemId"], int)

    def test_order_without_items_lists_empty_array(self, client):
        _create(client, {**ORDER_BODY, "items": []})

        [order] = client.get("/orders").json()
        assert order["items"] == []

    def test_list_empty(self, client):
        response = client.get("/orders")
        assert response.status_code == 200
        assert response.json() == []

    def test_missing_customer_is_bad_request(self, client):
        body = {k: v for k, v in ORDER_BODY.items() if k != "customerName"}

        response = client.post("/orders", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "body.customerName: Field required"}

    def test_negative_quantity_is_bad_request(self, client):
        body = {**ORDER_BODY, "items": [{"itemCode": "A1", "description": "W", "quantity": -2}]}

        assert client.post("/orders", json=body).status_code == 400
        assert client.get("/orders").json() == []


class TestReplace:
    def test_replace_order(self, client):
        order_id = _create(client)
        body = {
            "customerName": "Alicia",
            "orderedAt": "2024-02-01T17:00:00",
            "items": [{"itemCode": "B1", "description": "Bolt", "quantity": 9}],
        }

        response = client.put(f"/orders/{order_id}", json=body)

        assert response.status_code == 200
        assert response.json() == {"message": "Order updated successfully"}
        [order] = client.get("/orders").json()
        assert order["customerName"] == "Alicia"
        assert [i["itemCode"] for i in order["items"]] == ["B1"]

    def test_replace_unknown_order(self, client):
        response = client.put("/orders/77", json=ORDER_BODY)

        assert response.status_code == 404
        assert response.json() == {"error": "Order not found"}

    def test_replace_with_non_numeric_id(self, client):
        assert client.put("/orders/abc", json=ORDER_BODY).status_code == 400


class TestDelete:
    def test_delete_order(self, client):
        order_id = _create(client)

        response = client.delete(f"/orders/{order_id}")

        assert response.status_code == 200
        assert response.json() == {"message": "Order deleted successfully"}
        assert client.get("/orders").json() == []

    def test_delete_unknown_order(self, client):
        response = client.delete("/orders/999")

        assert response.status_code == 404
        assert response.json() == {"error": "Order not found"}

    def test_delete_with_non_numeric_id(self, client):
        assert client.delete("/orders/abc").status_code == 400


def test_store_error_maps_to_500(client, store, monkeypatch):
    def fail():
        raise StoreError("connection refused")

    monkeypatch.setattr(store, "list_orders", fail)

    response = client.get("/orders")

    assert response.status_code == 500
    assert response.json() == {"error": "connection refused"}


def test_validation_error_names_the_field(client):
    body = {**ORDER_BODY, "items": [{"itemCode": "A1", "description": "W", "quantity": -2}]}

    error = client.post("/orders", json=body).json()["error"]

    assert error.startswith("body.items.0.quantity: ")
    assert "[" not in error


def test_ordered_at_offset_is_returned_in_utc(client):
    _create(client, {**ORDER_BODY, "orderedAt": "2024-01-15T09:30:00+05:00"})

    [order] = client.get("/orders").json()
    returned = datetime.fromisoformat(order["orderedAt"].replace("Z", "+00:00"))

    assert returned == datetime(2024, 1, 15, 4, 30, tzinfo=timezone.utc)
    assert returned.utcoffset() == timedelta(0)
