"""HTTP surface: routing, identity, status codes and error bodies."""

import pytest
from fastapi.testclient import TestClient

from storefront.main import app
from storefront.services.cart import get_cart_store

CUSTOMER = {
    "x-user-id": "u-1",
    "x-user-email": "ada@example.com",
    "x-user-role": "CUSTOMER",
    "x-user-phone-verified": "true",
}
OTHER_CUSTOMER = {**CUSTOMER, "x-user-id": "u-2", "x-user-email": "grace@example.com"}
ADMIN = {"x-user-id": "admin-1", "x-user-role": "ADMIN", "x-user-phone-verified": "true"}

LARGE_MARGHERITA = {
    "itemId": "item-margherita",
    "quantity": 2,
    "selectedOptionIds": ["opt-margherita-large"],
}
ADDRESS = {"line1": "1 Main St", "city": "Springfield"}


@pytest.fixture
def client(store):
    app.dependency_overrides[get_cart_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


# =============================================================================
# ROOT & HEALTH
# =============================================================================

def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["cart"] == "/api/cart"


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "operational"
    assert data["catalog_service"] == "healthy"
    assert data["carts"] == 0


# =============================================================================
# CART
# =============================================================================

class TestCartRoutes:
    def test_guest_gets_cookie_and_config(self, client):
        response = client.get("/api/cart")

        assert response.status_code == 200
        assert "foodapp_guest_cart" in response.cookies
        body = response.json()
        assert body["cart"]["items"] == []
        assert body["cart"]["orderType"] == "DELIVERY"
        assert body["config"] == {
            "orderTypes": ["DINE_IN", "DELIVERY", "PICKUP"],
            "taxIncludedInMenuPrices": True,
            "taxRate": 0.085,
            "currency": "USD",
        }

    def test_guest_cart_follows_cookie(self, client):
        client.post("/api/cart/items", json=LARGE_MARGHERITA)

        response = client.get("/api/cart")

        assert "set-cookie" not in response.headers
        assert response.json()["cart"]["subtotal"] == 33.0

    def test_add_item(self, client):
        response = client.post("/api/cart/items", json=LARGE_MARGHERITA, headers=CUSTOMER)

        assert response.status_code == 201
        cart = response.json()["cart"]
        assert cart["itemCount"] == 2
        line = cart["items"][0]
        assert line["id"] == "cart-item-0001"
        assert line["unitPrice"] == 16.5
        assert line["lineTotal"] == 33.0
        assert line["availability"] == "active"
        assert line["selectedModifiers"][0]["optionName"] == "Large"

    def test_users_do_not_share_carts(self, client):
        client.post("/api/cart/items", json=LARGE_MARGHERITA, headers=CUSTOMER)

        response = client.get("/api/cart", headers=OTHER_CUSTOMER)

        assert response.json()["cart"]["items"] == []

    def test_invalid_quantity(self, client):
        response = client.post("/api/cart/items", json={**LARGE_MARGHERITA, "quantity": 0})

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "code": "INVALID_QUANTITY",
            "message": "Quantity must be between 1 and 20.",
        }

    def test_modifier_rule_violation(self, client):
        response = client.post("/api/cart/items", json={"itemId": "item-margherita"})

        assert response.status_code == 400
        assert response.json()["code"] == "MODIFIER_RULE_VIOLATION"

    def test_unavailable_item(self, client):
        response = client.post("/api/cart/items", json={"itemId": "item-lobster"})

        assert response.status_code == 409
        assert response.json()["code"] == "ITEM_UNAVAILABLE"

    def test_update_and_delete_line(self, client):
        client.post("/api/cart/items", json=LARGE_MARGHERITA, headers=CUSTOMER)

        updated = client.patch("/api/cart/items/cart-item-0001", json={"quantity": 3}, headers=CUSTOMER)
        assert updated.status_code == 200
        assert updated.json()["cart"]["subtotal"] == 49.5

        deleted = client.delete("/api/cart/items/cart-item-0001", headers=CUSTOMER)
        assert deleted.status_code == 200
        assert deleted.json()["cart"]["items"] == []

    def test_unknown_line(self, client):
        response = client.patch("/api/cart/items/cart-item-0404", json={"quantity": 1}, headers=CUSTOMER)

        assert response.status_code == 404
        assert response.json()["code"] == "CART_ITEM_NOT_FOUND"

    def test_empty_line_update(self, client):
        client.post("/api/cart/items", json=LARGE_MARGHERITA, headers=CUSTOMER)

        response = client.patch("/api/cart/items/cart-item-0001", json={}, headers=CUSTOMER)

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_INPUT"

    def test_patch_order_type(self, client):
        response = client.patch("/api/cart", json={"orderType": "pickup"}, headers=CUSTOMER)

        assert response.status_code == 200
        assert response.json()["cart"]["orderType"] == "PICKUP"

    def test_patch_invalid_order_type(self, client):
        response = client.patch("/api/cart", json={"orderType": "HOVERCRAFT"}, headers=CUSTOMER)

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ORDER_TYPE"


# =============================================================================
# CHECKOUT & ORDERS
# =============================================================================

class TestCheckoutRoutes:
    def test_guest_cannot_checkout(self, client):
        response = client.post("/api/checkout/preview", json={})

        assert response.status_code == 401
        assert response.json()["code"] == "AUTH_REQUIRED"

    def test_unverified_phone(self, client):
        headers = {**CUSTOMER, "x-user-phone-verified": "false"}

        response = client.post("/api/checkout/preview", json={}, headers=headers)

        assert response.status_code == 403
        assert response.json()["code"] == "PHONE_VERIFICATION_REQUIRED"

    def test_admin_cannot_checkout(self, client):
        response = client.post("/api/checkout/place", json={}, headers=ADMIN)

        assert response.status_code == 403
        assert response.json()["code"] == "ROLE_FORBIDDEN"

    def test_preview_without_body(self, client):
        response = client.post("/api/checkout/preview", headers=CUSTOMER)

        assert response.status_code == 409
        assert response.json()["code"] == "CART_EMPTY"

    def test_invalid_payment_method(self, client):
        response = client.post("/api/checkout/preview", json={"paymentMethod": "IOU"}, headers=CUSTOMER)

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_PAYMENT_METHOD"

    def test_preview(self, client):
        client.post("/api/cart/items", json=LARGE_MARGHERITA, headers=CUSTOMER)

        response = client.post(
            "/api/checkout/preview",
            json={"orderType": "DELIVERY", "deliveryAddress": ADDRESS},
            headers=CUSTOMER,
        )

        assert response.status_code == 200
        checkout = response.json()["checkout"]
        assert checkout["paymentMethod"] == "CARD"
        assert checkout["deliveryAddress"]["line1"] == "1 Main St"
        assert checkout["summary"] == {
            "subtotal": 33.0,
            "discount": 0.0,
            "tax": 2.59,
            "deliveryFee": 3.99,
            "total": 36.99,
            "taxRate": 0.085,
            "taxIncludedInMenuPrices": True,
            "currency": "USD",
        }

    def test_missing_delivery_address(self, client):
        client.post("/api/cart/items", json=LARGE_MARGHERITA, headers=CUSTOMER)

        response = client.post("/api/checkout/preview", json={"orderType": "DELIVERY"}, headers=CUSTOMER)

        assert response.status_code == 400
        assert response.json()["code"] == "DELIVERY_ADDRESS_REQUIRED"

    def test_place_and_fetch_order(self, client):
        client.post("/api/cart/items", json=LARGE_MARGHERITA, headers=CUSTOMER)

        placed = client.post(
            "/api/checkout/place",
            json={"orderType": "PICKUP", "paymentMethod": "CASH"},
            headers=CUSTOMER,
        )

        assert placed.status_code == 201
        order = placed.json()["order"]
        assert order["id"] == "ORD-2001"
        assert order["status"] == "ACCEPTED"
        assert order["paymentMethod"] == "CASH"
        assert order["deliveryAddress"] is None
        assert order["summary"]["total"] == 33.0

        assert client.get("/api/cart", headers=CUSTOMER).json()["cart"]["items"] == []
        assert client.get("/api/orders/ORD-2001", headers=CUSTOMER).status_code == 200
        assert client.get("/api/orders/ORD-2001", headers=ADMIN).status_code == 200

        hidden = client.get("/api/orders/ORD-2001", headers=OTHER_CUSTOMER)
        assert hidden.status_code == 404
        assert hidden.json()["code"] == "ORDER_NOT_FOUND"

    def test_place_twice(self, client):
        client.post("/api/cart/items", json=LARGE_MARGHERITA, headers=CUSTOMER)
        client.post("/api/checkout/place", json={"orderType": "PICKUP"}, headers=CUSTOMER)

        response = client.post("/api/checkout/place", json={"orderType": "PICKUP"}, headers=CUSTOMER)

        assert response.status_code == 409
        assert response.json()["code"] == "CART_EMPTY"

    def test_orders_require_sign_in(self, client):
        response = client.get("/api/orders/ORD-2001")

        assert response.status_code == 401
