from decimal import Decimal

from ivory.data.models import CartModel, OrderModel
from ivory.domain.errors import PaymentGatewayError


def test_checkout_summary_requires_items(client, user_headers):
    resp = client.get("/checkout", headers=user_headers)

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Cart is empty"}


def test_checkout_summary(client, user_headers, product):
    client.post("/cart/add", json={"productId": product.id, "quantity": 2}, headers=user_headers)

    body = client.get("/checkout", headers=user_headers).json()

    assert body["success"] is True
    assert body["data"]["subtotal"] == 10000.0
    assert len(body["data"]["cartItems"]) == 1
    assert [o["method"] for o in body["data"]["shippingOptions"]] == ["standard", "express", "overnight"]


def test_initiate_creates_pending_order_with_computed_totals(client, db, user, product, gateway, checkout):
    body = checkout(product.id, quantity=2, tax="375", shipping_cost="0")

    assert body["success"] is True
    assert body["authorization_url"] == f"https://checkout.paystack.test/{body['reference']}"

    db.expire_all()
    order = db.get(OrderModel, body["order_id"])
    assert order.status == "pending-payment"
    assert order.subtotal == Decimal("10000.00")
    assert order.tax == Decimal("375.00")
    assert order.shipping_cost == Decimal("0.00")
    assert order.total == Decimal("10375.00")
    assert order.payment_reference == body["reference"]
    assert order.payment_reference.startswith(f"IVB-{order.id}-")
    assert order.shipping_info["first_name"] == "Ada"
    assert order.items[0].price_at_purchase == Decimal("5000.00")
    assert order.items[0].name == "Vitamin C Serum"

    # stock only moves on confirmed payment
    db.refresh(product)
    assert product.quantity == 10

    call = gateway.initiated[0]
    assert call["amount"] == Decimal("10375.00")
    assert call["currency"] == "NGN"
    assert call["email"] == "ada@ivorymail.com"
    assert call["callback_url"] == "http://api.test/payments/verify"
    assert call["metadata"]["orderId"] == str(order.id)
    assert call["metadata"]["userId"] == str(user.id)
    assert call["metadata"]["cartId"] == str(order.cart_id)


def test_initiate_with_empty_cart(client, db, user_headers, gateway):
    resp = client.post("/payments/initiate", json={"tax": 0, "shippingCost": 0}, headers=user_headers)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Your cart is empty"
    assert db.query(OrderModel).count() == 0
    assert gateway.initiated == []


def test_insufficient_stock_names_product_and_creates_nothing(
    client, db, user_headers, product, second_product, gateway
):
    client.post("/cart/add", json={"productId": product.id, "quantity": 1}, headers=user_headers)
    client.post("/cart/add", json={"productId": second_product.id, "quantity": 2}, headers=user_headers)

    resp = client.post("/payments/initiate", json={"tax": 0, "shippingCost": 0}, headers=user_headers)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Not enough stock for Shea Body Butter (Available: 1)"
    assert db.query(OrderModel).count() == 0
    assert gateway.initiated == []


def test_negative_tax_is_rejected(client, user_headers, product):
    client.post("/cart/add", json={"productId": product.id}, headers=user_headers)

    resp = client.post("/payments/initiate", json={"tax": -5, "shippingCost": 0}, headers=user_headers)

    assert resp.status_code == 400


def test_client_total_is_ignored(client, db, user_headers, product):
    client.post("/cart/add", json={"productId": product.id, "quantity": 1}, headers=user_headers)

    resp = client.post(
        "/payments/initiate",
        json={"tax": "100", "shippingCost": "9.99", "total": "1.00"},
        headers=user_headers,
    )

    assert resp.status_code == 200
    db.expire_all()
    order = db.get(OrderModel, resp.json()["order_id"])
    assert order.total == Decimal("5109.99")


def test_gateway_failure_leaves_order_pending_and_cart_intact(client, db, user, user_headers, product, gateway):
    gateway.initiate_error = PaymentGatewayError("Payment initialization failed", details='{"status":false}')
    client.post("/cart/add", json={"productId": product.id, "quantity": 2}, headers=user_headers)

    resp = client.post("/payments/initiate", json={"tax": 0, "shippingCost": 0}, headers=user_headers)

    assert resp.status_code == 500
    assert resp.json() == {
        "success": False,
        "message": "Payment initialization failed",
        "details": '{"status":false}',
    }
    db.expire_all()
    orders = db.query(OrderModel).all()
    assert len(orders) == 1
    assert orders[0].status == "pending-payment"
    assert orders[0].payment_status == "init_failed"
    assert db.query(CartModel).filter_by(user_id=user.id).count() == 1


def test_concurrent_checkout_is_rejected(client, db, user, user_headers, product, lock_service):
    client.post("/cart/add", json={"productId": product.id}, headers=user_headers)
    lock_service.held[user.id] = "someone-else"

    resp = client.post("/payments/initiate", json={"tax": 0, "shippingCost": 0}, headers=user_headers)

    assert resp.status_code == 409
    assert resp.json()["message"] == "A checkout is already in progress"
    assert db.query(OrderModel).count() == 0


def test_lock_is_released_after_checkout(client, user, product, lock_service, checkout):
    checkout(product.id, quantity=1)

    assert user.id not in lock_service.held


def test_price_at_purchase_is_frozen(client, db, product, user_headers, checkout):
    body = checkout(product.id, quantity=2)

    product.price = Decimal("7500.00")
    db.commit()

    detail = client.get(f"/orders/{body['order_id']}", headers=user_headers).json()["data"]
    assert detail["items"][0]["priceAtPurchase"] == 5000.0
    assert detail["subtotal"] == 10000.0
