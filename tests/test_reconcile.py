from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from ivory.data.models import OrderItemModel, OrderModel, ProductModel
from ivory.domain.errors import PaymentGatewayError
from ivory.services.order_service import OrderService
from ivory.tasks import reconcile


@pytest.fixture
def stale_order(db, user, product):
    def _make(reference, status="pending-payment", age_minutes=60):
        order = OrderModel(
            user_id=user.id,
            payment_reference=reference,
            payment_method="paystack",
            subtotal=Decimal("5000.00"),
            tax=Decimal("0.00"),
            shipping_cost=Decimal("0.00"),
            total=Decimal("5000.00"),
            status=status,
            created_at=datetime.now(timezone.utc) - timedelta(minutes=age_minutes),
            items=[
                OrderItemModel(
                    product_id=product.id, name=product.name, quantity=1, price_at_purchase=Decimal("5000.00")
                )
            ],
        )
        db.add(order)
        db.commit()
        return order.id

    return _make


def test_reconcile_sorts_out_stale_orders(db, product, gateway, stale_order):
    paid = stale_order("IVB-paid")
    abandoned = stale_order("IVB-abandoned")
    ongoing = stale_order("IVB-ongoing")
    broken = stale_order("IVB-broken")
    fresh = stale_order("IVB-fresh", age_minutes=1)

    gateway.succeed("IVB-paid", paid)
    gateway.fail("IVB-abandoned", status="abandoned")
    gateway.fail("IVB-ongoing", status="ongoing")
    gateway.verifications["IVB-broken"] = PaymentGatewayError("Payment verification failed")
    gateway.succeed("IVB-fresh", fresh)

    stats = OrderService(db, gateway).reconcile_pending(older_than_seconds=30 * 60)

    assert stats == {"confirmed": 1, "failed": 1, "pending": 1, "errors": 1}
    assert "IVB-fresh" not in gateway.verified

    db.expire_all()
    assert db.get(OrderModel, paid).status == "processing"
    assert db.get(OrderModel, abandoned).status == "failed"
    assert db.get(OrderModel, ongoing).status == "pending-payment"
    assert db.get(OrderModel, broken).status == "pending-payment"
    assert db.get(OrderModel, fresh).status == "pending-payment"
    assert db.get(ProductModel, product.id).quantity == 9


def test_reconcile_skips_settled_orders(db, gateway, stale_order):
    stale_order("IVB-done", status="processing")

    stats = OrderService(db, gateway).reconcile_pending(older_than_seconds=0)

    assert stats == {"confirmed": 0, "failed": 0, "pending": 0, "errors": 0}
    assert gateway.verified == []


def test_reconcile_task_uses_worker_session(monkeypatch, db, gateway, stale_order):
    paid = stale_order("IVB-task")
    gateway.succeed("IVB-task", paid)

    monkeypatch.setattr(reconcile, "SessionLocal", lambda: db)
    monkeypatch.setattr(reconcile, "PaystackClient", lambda: gateway)

    stats = reconcile.reconcile_pending_payments_task(60)

    assert stats["confirmed"] == 1
    db.expire_all()
    assert db.get(OrderModel, paid).status == "processing"


def test_reconcile_skips_orders_the_gateway_never_saw(client, db, user_headers, product, gateway):
    gateway.initiate_error = PaymentGatewayError("Payment initialization failed")
    client.post("/cart/add", json={"productId": product.id, "quantity": 2}, headers=user_headers)
    assert client.post("/payments/initiate", json={"tax": 0}, headers=user_headers).status_code == 500

    order = db.query(OrderModel).one()
    order.created_at = datetime.now(timezone.utc) - timedelta(hours=1)
    db.commit()

    service = OrderService(db, gateway)
    runs = [service.reconcile_pending(older_than_seconds=60) for _ in range(3)]

    assert runs == [{"confirmed": 0, "failed": 0, "pending": 0, "errors": 0}] * 3
    assert gateway.verified == []
    db.expire_all()
    order = db.query(OrderModel).one()
    assert order.status == "pending-payment"
    assert order.payment_status == "init_failed"
