"""HTTP API tests, run against both storage backends."""

import pytest

from storefront.api import deps

ADDRESS = {
    "name": "Meera Iyer",
    "phone": "9876543210",
    "addressLine1": "4 Lake View Road",
    "city": "Chennai",
    "state": "Tamil Nadu",
    "pincode": "600001",
}

# seeded catalog: 1 Royal Blue Silk (12999, 5 in stock), 2 Red Cotton (2999, 12), 3 Golden Banarasi (18999, 3)
RED_COTTON = 2


@pytest.fixture
def shopper(register):
    return register("meera")


def add_to_cart(client, headers, product_id=RED_COTTON, quantity=1):
    resp = client.post("/api/cart", json={"productId": product_id, "quantity": quantity}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestAuth:
    def test_register_and_login(self, client):
        resp = client.post(
            "/api/auth/register",
            json={"username": "meera", "email": "meera@example.com", "password": "secret123"},
        )
        assert resp.status_code == 201
        assert "passwordHash" not in resp.json()

        resp = client.post("/api/auth/login", json={"email": "meera@example.com", "password": "secret123"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["username"] == "meera"
        assert data["tokenType"] == "bearer"

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['accessToken']}"})
        assert me.status_code == 200
        assert me.json()["email"] == "meera@example.com"

    def test_duplicate_registration(self, client, shopper):
        resp = client.post(
            "/api/auth/register",
            json={"username": "meera", "email": "meera@example.com", "password": "secret123"},
        )
        assert resp.status_code == 400
        assert resp.json()["errorType"] == "ValidationError"

    def test_invalid_body_is_400(self, client):
        resp = client.post("/api/auth/register", json={"username": "m", "email": "nope", "password": "x"})
        assert resp.status_code == 400
        assert resp.json()["errorType"] == "ValidationError"

    def test_bad_login(self, client, shopper):
        resp = client.post("/api/auth/login", json={"email": "meera@example.com", "password": "wrong"})
        assert resp.status_code == 401
        assert resp.json()["errorType"] == "NotAuthenticated"

    def test_me_needs_token(self, client):
        assert client.get("/api/auth/me").status_code == 401
        assert client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"}).status_code == 401


class TestCatalog:
    def test_categories(self, client):
        resp = client.get("/api/categories")
        assert [c["slug"] for c in resp.json()] == ["silk", "cotton", "banarasi", "designer"]
        assert client.get("/api/categories/silk").json()["name"] == "Silk Sarees"
        assert client.get("/api/categories/linen").status_code == 404

    def test_product_filters(self, client):
        resp = client.get("/api/products", params={"fabric": "silk", "sortBy": "price-low"})
        assert resp.status_code == 200
        assert [p["name"] for p in resp.json()] == ["Royal Blue Silk Saree", "Golden Banarasi Saree"]

        resp = client.get("/api/products", params={"minPrice": 3000, "maxPrice": 15000})
        assert [p["id"] for p in resp.json()] == ["1"]

    def test_bad_sort_key(self, client):
        resp = client.get("/api/products", params={"sortBy": "random"})
        assert resp.status_code == 400

    def test_search(self, client):
        resp = client.get("/api/search", params={"q": "zari"})
        assert [p["name"] for p in resp.json()] == ["Golden Banarasi Saree"]

        missing = client.get("/api/search")
        assert missing.status_code == 400
        assert missing.json()["message"] == "Search query required"

    def test_product_detail(self, client):
        data = client.get(f"/api/products/{RED_COTTON}").json()
        assert data["price"] == 2999
        assert data["stockQuantity"] == 12
        assert data["categoryId"] == "2"

    def test_missing_product(self, client):
        resp = client.get("/api/products/999")
        assert resp.status_code == 404
        assert resp.json() == {"message": "Product not found: 999", "errorType": "NotFound"}

    def test_featured_and_by_category(self, client):
        assert len(client.get("/api/products/featured").json()) == 3
        by_category = client.get("/api/products/category/3").json()
        assert [p["name"] for p in by_category] == ["Golden Banarasi Saree"]


class TestCart:
    def test_add_update_remove(self, client, shopper):
        user, headers = shopper

        cart = add_to_cart(client, headers, quantity=2)
        assert cart["count"] == 2
        assert cart["total"] == 5998
        line = cart["items"][0]
        assert line["lineTotal"] == 5998
        assert line["product"]["name"] == "Traditional Red Cotton Saree"

        cart = client.patch(f"/api/cart/{line['id']}", json={"quantity": 3}, headers=headers).json()
        assert cart["count"] == 3

        resp = client.delete(f"/api/cart/{line['id']}", headers=headers)
        assert resp.status_code == 200
        assert client.get(f"/api/cart/{user['id']}", headers=headers).json()["items"] == []

    def test_negative_quantity_removes_line(self, client, shopper):
        user, headers = shopper
        line = add_to_cart(client, headers, product_id=1)["items"][0]

        resp = client.patch(f"/api/cart/{line['id']}", json={"quantity": -1}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["items"] == []
        assert client.get(f"/api/cart/{user['id']}", headers=headers).json()["count"] == 0

    def test_clear(self, client, shopper):
        user, headers = shopper
        add_to_cart(client, headers, product_id=1)
        add_to_cart(client, headers, product_id=2)

        assert client.delete(f"/api/cart/clear/{user['id']}", headers=headers).status_code == 200
        assert client.get(f"/api/cart/{user['id']}", headers=headers).json()["count"] == 0

    def test_anonymous_cart(self, client):
        resp = client.post("/api/cart", json={"productId": 1, "quantity": 1})
        assert resp.status_code == 401

    def test_other_users_cart(self, client, register):
        user, _ = register("meera")
        _, other_headers = register("ravi")

        resp = client.get(f"/api/cart/{user['id']}", headers=other_headers)
        assert resp.status_code == 401
        assert resp.json()["errorType"] == "AuthorizationError"

    def test_quantity_limits(self, client, shopper):
        _, headers = shopper
        assert client.post("/api/cart", json={"productId": 1, "quantity": 0}, headers=headers).status_code == 400
        assert client.post("/api/cart", json={"productId": 999, "quantity": 1}, headers=headers).status_code == 404


class TestCodOrders:
    def test_place_list_cancel(self, client, shopper):
        user, headers = shopper
        add_to_cart(client, headers, quantity=1)

        summary = client.post("/api/checkout/summary", headers=headers).json()
        assert summary == {"subtotal": 2999, "shippingCost": 0, "tax": 150, "total": 3149, "itemCount": 1}

        resp = client.post("/api/orders", json={"paymentMethod": "cod", "shippingAddress": ADDRESS}, headers=headers)
        assert resp.status_code == 201, resp.text
        order = resp.json()
        assert order["status"] == "pending"
        assert order["paymentStatus"] == "pending"
        assert order["total"] == 3149
        assert order["shippingAddress"]["pincode"] == "600001"
        assert order["items"][0]["price"] == 2999

        assert client.get(f"/api/cart/{user['id']}", headers=headers).json()["count"] == 0
        assert client.get(f"/api/products/{RED_COTTON}").json()["stockQuantity"] == 11

        listed = client.get(f"/api/orders/{user['id']}", headers=headers).json()
        assert [o["id"] for o in listed] == [order["id"]]

        detail = client.get(f"/api/orders/detail/{order['id']}", headers=headers).json()
        assert detail["orderNumber"] == order["orderNumber"]

        cancelled = client.post(f"/api/orders/{order['id']}/cancel", headers=headers).json()
        assert cancelled["status"] == "cancelled"
        assert client.get(f"/api/products/{RED_COTTON}").json()["stockQuantity"] == 12

        again = client.post(f"/api/orders/{order['id']}/cancel", headers=headers)
        assert again.status_code == 409
        assert again.json()["errorType"] == "InvalidStatusTransition"

    def test_address_required(self, client, shopper):
        _, headers = shopper
        add_to_cart(client, headers)

        resp = client.post("/api/orders", json={"paymentMethod": "cod"}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["errorType"] == "AddressRequired"

    def test_invalid_pincode(self, client, shopper):
        _, headers = shopper
        add_to_cart(client, headers)

        bad = {**ADDRESS, "pincode": "12AB"}
        resp = client.post("/api/orders", json={"shippingAddress": bad}, headers=headers)
        assert resp.status_code == 400

    def test_saved_address(self, client, shopper):
        user, headers = shopper
        saved = client.post("/api/addresses", json={**ADDRESS, "isDefault": True}, headers=headers)
        assert saved.status_code == 201
        add_to_cart(client, headers)

        resp = client.post("/api/orders", json={"addressId": int(saved.json()["id"])}, headers=headers)
        assert resp.status_code == 201
        assert resp.json()["shippingAddress"]["city"] == "Chennai"

    def test_out_of_stock(self, client, shopper):
        _, headers = shopper
        add_to_cart(client, headers, product_id=3, quantity=4)

        resp = client.post("/api/orders", json={"shippingAddress": ADDRESS}, headers=headers)
        assert resp.status_code == 409
        assert resp.json()["errorType"] == "OutOfStock"
        assert client.get("/api/products/3").json()["stockQuantity"] == 3

    def test_staff_status_update(self, client, shopper, monkeypatch):
        _, headers = shopper
        add_to_cart(client, headers)
        order = client.post("/api/orders", json={"shippingAddress": ADDRESS}, headers=headers).json()
        url = f"/api/orders/{order['id']}/status"

        assert client.patch(url, json={"status": "confirmed"}).status_code == 401

        monkeypatch.setattr(deps, "STAFF_API_KEY", "staff-key")
        staff = {"X-Staff-Key": "staff-key"}
        assert client.patch(url, json={"status": "confirmed"}, headers={"X-Staff-Key": "wrong"}).status_code == 401

        resp = client.patch(url, json={"status": "confirmed"}, headers=staff)
        assert resp.status_code == 200
        assert resp.json()["status"] == "confirmed"

        skipped = client.patch(url, json={"status": "delivered"}, headers=staff)
        assert skipped.status_code == 409


class TestOnlinePayment:
    def test_checkout_and_verify(self, client, app, shopper):
        user, headers = shopper
        add_to_cart(client, headers, quantity=1)

        started = client.post("/api/payment/checkout", json={"shippingAddress": ADDRESS}, headers=headers)
        assert started.status_code == 200, started.text
        data = started.json()
        assert data["amount"] == 314900
        assert data["keyId"] == "rzp_test_key"

        gateway_order_id = data["gatewayOrderId"]
        body = {
            "razorpay_order_id": gateway_order_id,
            "razorpay_payment_id": "pay_42",
            "razorpay_signature": app.state.gateway.sign(gateway_order_id, "pay_42"),
            "shippingAddress": ADDRESS,
        }
        resp = client.post("/api/payment/verify", json=body, headers=headers)
        assert resp.status_code == 200, resp.text
        assert resp.json()["success"] is True
        order_id = resp.json()["orderId"]

        detail = client.get(f"/api/orders/detail/{order_id}", headers=headers).json()
        assert detail["status"] == "confirmed"
        assert detail["paymentStatus"] == "completed"

        # gateway retries the callback
        repeat = client.post("/api/payment/verify", json=body, headers=headers)
        assert repeat.json()["orderId"] == order_id
        assert len(client.get(f"/api/orders/{user['id']}", headers=headers).json()) == 1

    def test_forged_signature(self, client, shopper):
        user, headers = shopper
        add_to_cart(client, headers)
        gateway_order_id = client.post(
            "/api/payment/checkout", json={"shippingAddress": ADDRESS}, headers=headers
        ).json()["gatewayOrderId"]

        resp = client.post(
            "/api/payment/verify",
            json={
                "razorpay_order_id": gateway_order_id,
                "razorpay_payment_id": "pay_42",
                "razorpay_signature": "forged",
                "shippingAddress": ADDRESS,
            },
            headers=headers,
        )
        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert "contact support" in resp.json()["message"]
        assert client.get(f"/api/orders/{user['id']}", headers=headers).json() == []
        assert client.get(f"/api/cart/{user['id']}", headers=headers).json()["count"] == 1

    def test_gateway_down(self, client, app, shopper):
        _, headers = shopper
        add_to_cart(client, headers)
        app.state.gateway.fail_create = True

        resp = client.post("/api/payment/checkout", json={"shippingAddress": ADDRESS}, headers=headers)
        assert resp.status_code == 502
        assert resp.json()["errorType"] == "PaymentInitiationFailed"

    def test_create_order_passthrough(self, client, shopper):
        _, headers = shopper
        resp = client.post("/api/payment/create-order", json={"amount": 50000, "currency": "INR"}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["amount"] == 50000


class TestAccount:
    def test_addresses(self, client, shopper):
        user, headers = shopper
        created = client.post("/api/addresses", json=ADDRESS, headers=headers).json()
        assert created["type"] == "home"

        updated = client.put(f"/api/addresses/{created['id']}", json={"city": "Madurai"}, headers=headers).json()
        assert updated["city"] == "Madurai"
        assert updated["addressLine1"] == ADDRESS["addressLine1"]

        assert len(client.get(f"/api/addresses/{user['id']}", headers=headers).json()) == 1
        assert client.delete(f"/api/addresses/{created['id']}", headers=headers).status_code == 200

    @pytest.mark.parametrize("field", ["name", "pincode", "isDefault"])
    def test_address_update_rejects_null(self, client, shopper, field):
        user, headers = shopper
        created = client.post("/api/addresses", json=ADDRESS, headers=headers).json()

        resp = client.put(f"/api/addresses/{created['id']}", json={field: None}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["errorType"] == "ValidationError"

        listed = client.get(f"/api/addresses/{user['id']}", headers=headers).json()
        assert listed[0]["name"] == ADDRESS["name"]

    def test_wishlist(self, client, shopper):
        user, headers = shopper
        first = client.post("/api/wishlist", json={"productId": 1}, headers=headers)
        second = client.post("/api/wishlist", json={"productId": 1}, headers=headers)
        assert first.json()["id"] == second.json()["id"]

        items = client.get(f"/api/wishlist/{user['id']}", headers=headers).json()
        assert items[0]["product"]["name"] == "Royal Blue Silk Saree"

        client.delete(f"/api/wishlist/{first.json()['id']}", headers=headers)
        assert client.get(f"/api/wishlist/{user['id']}", headers=headers).json() == []

    def test_reviews(self, client, shopper):
        _, headers = shopper
        resp = client.post("/api/reviews", json={"productId": 2, "rating": 4, "comment": "Soft cotton"}, headers=headers)
        assert resp.status_code == 201
        assert resp.json()["username"] == "meera"

        listed = client.get("/api/reviews/2").json()
        assert [r["comment"] for r in listed] == ["Soft cotton"]
        assert client.get("/api/products/2").json()["reviewCount"] == 1

        assert client.post("/api/reviews", json={"productId": 2, "rating": 9}, headers=headers).status_code == 400
