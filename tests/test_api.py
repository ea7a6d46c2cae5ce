"""Tests for the HTTP API."""
import pytest

from conftest import ADMIN_HEADERS

USER = {"X-User-Id": "user-1"}
OTHER_USER = {"X-User-Id": "user-2"}

DELIVERY = {
    "name": "Asha Rao",
    "phone": "9876543210",
    "address": "12 MG Road",
    "city": "Bengaluru",
    "pincode": "560001",
    "instructions": "Leave with the guard",
}


def order_body(product_id, **overrides):
    body = {
        "product_id": product_id,
        "quantity": 1,
        "delivery_details": dict(DELIVERY),
        "payment_method": "cash_on_delivery",
    }
    body.update(overrides)
    return body


@pytest.fixture
def product_id(client):
    response = client.post(
        "/products", json={"title": "Trail Running Shoes", "price": 999}, headers=ADMIN_HEADERS
    )
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def placed(client, product_id):
    response = client.post("/orders", json=order_body(product_id), headers=USER)
    assert response.status_code == 201
    return response.json()


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "running"

    def test_metrics_exposed(self, client):
        response = client.get("/metrics")
        assert response.status_code == 200


class TestCatalog:
    def test_create_requires_admin_key(self, client):
        response = client.post("/products", json={"title": "Mug", "price": 199})
        assert response.status_code == 403

    def test_list_and_get(self, client, product_id):
        listed = client.get("/products").json()
        assert [p["id"] for p in listed] == [product_id]

        product = client.get(f"/products/{product_id}").json()
        assert product["title"] == "Trail Running Shoes"
        assert product["price"] == 999
        assert product["status"] == "live"

    def test_search_by_title_words(self, client, product_id):
        assert len(client.get("/products", params={"query": "running"}).json()) == 1
        assert client.get("/products", params={"query": "kettle"}).json() == []

    def test_unknown_product(self, client):
        response = client.get("/products/product-missing")
        assert response.status_code == 404
        assert response.json()["error_type"] == "NotFound"

    def test_edit_keeps_placed_orders(self, client, product_id, placed):
        response = client.patch(
            f"/products/{product_id}", json={"title": "Trail Shoes", "price": 1299}, headers=ADMIN_HEADERS
        )
        assert response.status_code == 200
        assert response.json()["title"] == "Trail Shoes"
        assert response.json()["price"] == 1299

        order = client.get(f"/orders/{placed['id']}", headers=USER).json()
        assert order["product_title"] == "Trail Running Shoes"
        assert order["unit_price"] == 999
        assert order["total_price"] == 999

    def test_edit_requires_admin_key(self, client, product_id):
        response = client.patch(f"/products/{product_id}", json={"price": 1})
        assert response.status_code == 403

    def test_delete(self, client, product_id):
        response = client.delete(f"/products/{product_id}", headers=ADMIN_HEADERS)
        assert response.status_code == 204
        assert client.get(f"/products/{product_id}").status_code == 404
        assert client.delete(f"/products/{product_id}", headers=ADMIN_HEADERS).status_code == 404

    def test_edit_unknown_product(self, client):
        response = client.patch("/products/product-missing", json={"price": 5}, headers=ADMIN_HEADERS)
        assert response.status_code == 404


class TestCheckout:
    def test_identity_required(self, client, product_id):
        response = client.post("/orders", json=order_body(product_id))
        assert response.status_code == 401

    def test_cash_on_delivery(self, client, placed):
        assert placed["status"] == "pending"
        assert placed["payment_status"] == "pending"
        assert placed["payment_details"] == {
            "method": "cash_on_delivery",
            "amount_payable": 999,
            "amount_deducted": None,
            "resulting_balance": None,
            "app": None,
            "transaction_id": None,
        }
        assert placed["delivery_details"]["instructions"] == "Leave with the guard"

    def test_wallet_scenario(self, client, product_id):
        response = client.post("/wallet/recharge", json={"amount": 2500}, headers=USER)
        assert response.json() == {"user_id": "user-1", "balance": 2500}

        response = client.post(
            "/orders", json=order_body(product_id, quantity=2, payment_method="wallet"), headers=USER
        )
        assert response.status_code == 201
        order = response.json()
        assert order["total_price"] == 1998
        assert order["payment_status"] == "paid"
        assert order["payment_details"]["resulting_balance"] == 502

        assert client.get("/wallet", headers=USER).json()["balance"] == 502

    def test_wallet_insufficient(self, client, product_id):
        client.post("/wallet/recharge", json={"amount": 500}, headers=USER)
        response = client.post(
            "/orders", json=order_body(product_id, quantity=2, payment_method="wallet"), headers=USER
        )

        assert response.status_code == 402
        body = response.json()
        assert body["error_type"] == "InsufficientBalance"
        assert body["shortfall"] == 1498
        assert client.get("/wallet", headers=USER).json()["balance"] == 500
        assert client.get("/orders", headers=USER).json() == []

    def test_online(self, client, product_id):
        response = client.post(
            "/orders",
            json=order_body(product_id, payment_method="online", payment_app="googlepay"),
            headers=USER,
        )
        assert response.status_code == 201
        details = response.json()["payment_details"]
        assert details["app"] == "googlepay"
        assert details["transaction_id"].startswith("TXN")

    def test_online_without_app(self, client, product_id):
        response = client.post("/orders", json=order_body(product_id, payment_method="online"), headers=USER)
        assert response.status_code == 422
        assert response.json()["error_type"] == "MissingPaymentApp"

    def test_invalid_pincode(self, client, product_id):
        body = order_body(product_id)
        body["delivery_details"]["pincode"] = "1234"
        response = client.post("/orders", json=body, headers=USER)

        assert response.status_code == 422
        assert response.json()["error_type"] == "ValidationError"
        assert response.json()["field"] == "pincode"

    def test_quantity_limit(self, client, product_id):
        response = client.post("/orders", json=order_body(product_id, quantity=11), headers=USER)
        assert response.status_code == 422
        assert response.json()["field"] == "quantity"

    def test_product_on_hold(self, client, product_id):
        response = client.patch(
            f"/products/{product_id}/status", json={"status": "hold"}, headers=ADMIN_HEADERS
        )
        assert response.json()["status"] == "hold"

        response = client.post("/orders", json=order_body(product_id), headers=USER)
        assert response.status_code == 409
        assert response.json()["error_type"] == "ProductUnavailable"

    def test_unknown_product(self, client):
        response = client.post("/orders", json=order_body("product-missing"), headers=USER)
        assert response.status_code == 404

    @pytest.mark.parametrize(
        "field,value", [("quantity", 2.5), ("quantity", "two"), ("product_id", None)]
    )
    def test_malformed_body_uses_error_envelope(self, client, product_id, field, value):
        body = order_body(product_id)
        if value is None:
            del body[field]
        else:
            body[field] = value
        response = client.post("/orders", json=body, headers=USER)

        assert response.status_code == 422
        assert response.json()["error_type"] == "ValidationError"
        assert response.json()["field"] == field


class TestOrderLifecycle:
    def test_customer_sees_only_own_orders(self, client, placed):
        assert [o["id"] for o in client.get("/orders", headers=USER).json()] == [placed["id"]]
        assert client.get("/orders", headers=OTHER_USER).json() == []

        assert client.get(f"/orders/{placed['id']}", headers=USER).status_code == 200
        assert client.get(f"/orders/{placed['id']}", headers=OTHER_USER).status_code == 404

    def test_status_change_requires_admin(self, client, placed):
        response = client.patch(f"/orders/{placed['id']}/status", json={"status": "confirmed"}, headers=USER)
        assert response.status_code == 403

    def test_deliver_and_return(self, client, placed):
        order_id = placed["id"]
        response = client.patch(f"/orders/{order_id}/status", json={"status": "delivered"}, headers=ADMIN_HEADERS)
        assert response.status_code == 200
        assert response.json()["delivered_at"] is not None

        response = client.post(
            f"/orders/{order_id}/return", json={"type": "return", "reason": "wrong size"}, headers=USER
        )
        assert response.status_code == 200
        assert response.json()["return_request"]["status"] == "pending"

        response = client.post(
            f"/orders/{order_id}/return", json={"type": "exchange", "reason": "again"}, headers=USER
        )
        assert response.status_code == 409
        assert response.json()["error_type"] == "InvalidTransition"

        response = client.post(
            f"/orders/{order_id}/return/resolve", json={"decision": "approved"}, headers=ADMIN_HEADERS
        )
        assert response.json()["return_request"]["status"] == "approved"

    def test_customer_cancel(self, client, placed):
        response = client.post(f"/orders/{placed['id']}/cancel", json={"reason": "Changed my mind"}, headers=USER)
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "cancelled"
        assert body["cancelled_by"] == "customer"

        response = client.patch(f"/orders/{placed['id']}/status", json={"status": "shipped"}, headers=ADMIN_HEADERS)
        assert response.status_code == 409

    def test_other_customer_cannot_cancel(self, client, placed):
        response = client.post(f"/orders/{placed['id']}/cancel", json={"reason": "mine now"}, headers=OTHER_USER)
        assert response.status_code == 404

    def test_cancel_delivered_fails(self, client, placed):
        client.patch(f"/orders/{placed['id']}/status", json={"status": "delivered"}, headers=ADMIN_HEADERS)
        response = client.post(f"/orders/{placed['id']}/cancel", json={"reason": "late"}, headers=USER)
        assert response.status_code == 409

    def test_admin_panel(self, client, product_id, placed):
        client.post("/orders", json=order_body(product_id), headers=OTHER_USER)

        assert len(client.get("/admin/orders", headers=ADMIN_HEADERS).json()) == 2
        only_first = client.get("/admin/orders", params={"user_id": "user-1"}, headers=ADMIN_HEADERS).json()
        assert [o["id"] for o in only_first] == [placed["id"]]
        assert client.get("/admin/orders").status_code == 403

        response = client.post(
            f"/admin/orders/{placed['id']}/cancel", json={"reason": "Out of stock"}, headers=ADMIN_HEADERS
        )
        assert response.json()["cancelled_by"] == "admin"


class TestWallet:
    def test_new_user_balance(self, client):
        assert client.get("/wallet", headers=USER).json() == {"user_id": "user-1", "balance": 0}

    def test_non_numeric_recharge(self, client):
        response = client.post("/wallet/recharge", json={"amount": "lots"}, headers=USER)
        assert response.status_code == 422
        assert response.json()["error_type"] == "ValidationError"
        assert response.json()["field"] == "amount"

    def test_recharge_below_minimum(self, client):
        response = client.post("/wallet/recharge", json={"amount": 0}, headers=USER)
        assert response.status_code == 422
        assert response.json()["field"] == "amount"
