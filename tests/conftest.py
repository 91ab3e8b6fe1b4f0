import os

# before anything from ivory reads settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["PAYSTACK_SECRET_KEY"] = "sk_test_secret"
os.environ["FRONTEND_URL"] = "http://shop.test"
os.environ["API_BASE_URL"] = "http://api.test"
os.environ["ADMIN_CODE"] = "IVORYSECRET2025"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

import ivory.data.models  # noqa: F401
from ivory.api.deps import get_lock_service, get_media_client, get_payment_gateway
from ivory.celery_worker import celery_app
from ivory.data.database import Base, SessionLocal, engine, get_db
from ivory.data.models import AdminModel, CollectionModel, ProductModel, UserModel
from ivory.domain.errors import PaymentGatewayError
from ivory.main import app
from ivory.services.payment_gateway import PaymentVerification
from ivory.utils.security import create_token, hash_password

celery_app.conf.task_always_eager = True

PASSWORD = "secret123"
PASSWORD_HASH = hash_password(PASSWORD)


class FakeGateway:
    def __init__(self):
        self.initiated = []
        self.verified = []
        self.verifications = {}
        self.initiate_error = None

    def initiate(self, amount, currency, email, callback_url, reference, metadata):
        if self.initiate_error is not None:
            raise self.initiate_error
        self.initiated.append(
            {
                "amount": amount,
                "currency": currency,
                "email": email,
                "callback_url": callback_url,
                "reference": reference,
                "metadata": metadata,
            }
        )
        return f"https://checkout.paystack.test/{reference}"

    def verify(self, reference):
        self.verified.append(reference)
        result = self.verifications.get(reference)
        if result is None:
            raise PaymentGatewayError("Unknown payment reference", details=reference)
        if isinstance(result, Exception):
            raise result
        return result

    def succeed(self, reference, order_id=None, channel="card"):
        self.verifications[reference] = PaymentVerification(
            reference=reference,
            status="success",
            channel=channel,
            metadata={"orderId": str(order_id)} if order_id is not None else {},
        )

    def fail(self, reference, status="failed"):
        self.verifications[reference] = PaymentVerification(reference=reference, status=status)


class FakeLockService:
    def __init__(self):
        self.held = {}

    @staticmethod
    def new_token():
        return "token"

    def acquire_checkout_lock(self, user_id, token, ttl):
        if user_id in self.held:
            return False
        self.held[user_id] = token
        return True

    def release_checkout_lock(self, user_id, token):
        if self.held.get(user_id) == token:
            del self.held[user_id]
            return True
        return False


class FakeMedia:
    def __init__(self):
        self.uploads = []

    def upload_image(self, content, filename="upload"):
        self.uploads.append((filename, len(content)))
        return f"https://res.cloudinary.test/ivory/{filename}.webp"


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def lock_service():
    return FakeLockService()


@pytest.fixture
def media():
    return FakeMedia()


@pytest.fixture
def client(db, gateway, lock_service, media):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    app.dependency_overrides[get_media_client] = lambda: media
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth_headers(claims):
    return {"Authorization": f"Bearer {create_token(claims)}"}


@pytest.fixture
def user(db):
    u = UserModel(
        name="Ada Obi",
        email="ada@ivorymail.com",
        address="12 Marina Rd, Lagos",
        phone="08030000001",
        password_hash=PASSWORD_HASH,
    )
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def other_user(db):
    u = UserModel(name="Bola Ade", email="bola@ivorymail.com", password_hash=PASSWORD_HASH)
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def admin(db):
    a = AdminModel(name="Store Admin", email="admin@ivorymail.com", password_hash=PASSWORD_HASH)
    db.add(a)
    db.commit()
    db.refresh(a)
    return a


@pytest.fixture
def user_headers(user):
    return auth_headers({"userId": user.id})


@pytest.fixture
def other_headers(other_user):
    return auth_headers({"userId": other_user.id})


@pytest.fixture
def admin_headers(admin):
    return auth_headers({"adminId": admin.id})


@pytest.fixture
def collection(db):
    c = CollectionModel(name="Glow Essentials", description="Brightening care")
    db.add(c)
    db.commit()
    db.refresh(c)
    return c


@pytest.fixture
def product(db, collection):
    p = ProductModel(
        name="Vitamin C Serum",
        description="Brightening serum",
        price=Decimal("5000.00"),
        quantity=10,
        image_url="",
        collection_id=collection.id,
    )
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


@pytest.fixture
def second_product(db, collection):
    p = ProductModel(
        name="Shea Body Butter",
        description="Rich moisturiser",
        price=Decimal("3500.00"),
        quantity=1,
        image_url="https://res.cloudinary.test/ivory/shea.webp",
        collection_id=collection.id,
    )
    db.add(p)
    db.commit()
    db.refresh(p)
    return p


@pytest.fixture
def checkout(client, user_headers):
    """Fill the cart and open a payment session; returns the initiate response body."""

    def _checkout(product_id, quantity=2, tax="375", shipping_cost="0", headers=None):
        headers = headers or user_headers
        resp = client.post("/cart/add", json={"productId": product_id, "quantity": quantity}, headers=headers)
        assert resp.status_code == 200
        resp = client.post(
            "/payments/initiate",
            json={
                "shippingInfo": {
                    "firstName": "Ada",
                    "lastName": "Obi",
                    "email": "ada@ivorymail.com",
                    "phone": "08030000001",
                    "address": "12 Marina Rd",
                    "city": "Lagos",
                    "shippingMethod": "standard",
                },
                "shippingCost": shipping_cost,
                "tax": tax,
            },
            headers=headers,
        )
        assert resp.status_code == 200, resp.text
        return resp.json()

    return _checkout
