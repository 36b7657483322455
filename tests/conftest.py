"""Pytest fixtures for storefront tests."""

import hashlib
import hmac
import itertools
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront.celery_worker import celery_app
from storefront.data.models.product import ProductModel
from storefront.data.models.user import UserModel
from storefront.domain.context import RequestContext
from storefront.domain.errors import GatewayUnavailable
from storefront.main import create_app
from storefront.repos import MemoryStorageProvider, SqlStorageProvider
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService
from storefront.services.payment_gateway import RazorpayClient
from storefront.utils.security import create_access_token, hash_password

TEST_KEY_SECRET = "test_key_secret"


class FakeLockService:
    """In-process stand-in for the Redis checkout lock."""

    def __init__(self):
        self.held = {}
        self._tokens = itertools.count(1)

    def acquire_checkout_lock(self, user_id, ttl):
        if user_id in self.held:
            return None
        token = f"token-{next(self._tokens)}"
        self.held[user_id] = token
        return token

    def release_checkout_lock(self, user_id, token):
        if self.held.get(user_id) == token:
            del self.held[user_id]
            return True
        return False


class FakeGateway(RazorpayClient):
    """Gateway with the real signature check and no HTTP."""

    def __init__(self):
        super().__init__(key_id="rzp_test_key", key_secret=TEST_KEY_SECRET, base_url="http://gateway.test")
        self.orders = {}
        self.fail_create = False
        self._ids = itertools.count(1)

    def create_remote_order(self, amount_minor_units, currency="INR", receipt=None):
        if self.fail_create:
            raise GatewayUnavailable()
        order = {
            "id": f"order_test{next(self._ids)}",
            "amount": amount_minor_units,
            "currency": currency,
            "receipt": receipt,
            "status": "created",
        }
        self.orders[order["id"]] = order
        return order

    def fetch_remote_order(self, gateway_order_id):
        return self.orders[gateway_order_id]

    def sign(self, gateway_order_id, payment_id):
        body = f"{gateway_order_id}|{payment_id}".encode()
        return hmac.new(TEST_KEY_SECRET.encode(), body, hashlib.sha256).hexdigest()


class RecordingNotifications(NotificationService):
    def __init__(self):
        self.sent = []

    def _dispatch(self, email):
        self.sent.append(email)
        return True


@pytest.fixture(autouse=True, scope="session")
def celery_eager():
    celery_app.conf.task_always_eager = True
    yield


@pytest.fixture(params=["memory", "sql"])
def provider(request):
    if request.param == "sql":
        p = SqlStorageProvider("sqlite://")
    else:
        p = MemoryStorageProvider()
    p.init_schema()
    yield p
    p.dispose()


@pytest.fixture
def storage(provider):
    with provider.session() as s:
        yield s


@pytest.fixture
def make_user(storage):
    counter = itertools.count(1)

    def _make(username=None):
        n = next(counter)
        username = username or f"user{n}"
        return storage.users.create_user(
            UserModel(username=username, email=f"{username}@example.com", password_hash=hash_password("secret123"))
        )

    return _make


@pytest.fixture
def make_product(storage):
    counter = itertools.count(1)

    def _make(price="1200", stock=10, **fields):
        n = next(counter)
        data = {
            "name": f"Test Saree {n}",
            "description": "Handwoven test saree",
            "fabric": "Cotton",
            "color": "Red",
        }
        data.update(fields)
        return storage.catalog.create_product(
            ProductModel(price=Decimal(price), stock_quantity=stock, is_active=True, **data)
        )

    return _make


@pytest.fixture
def user(make_user):
    return make_user("asha")


@pytest.fixture
def ctx(user):
    return RequestContext(user_id=user.id)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def lock_service():
    return FakeLockService()


@pytest.fixture
def notifications():
    return RecordingNotifications()


@pytest.fixture
def order_service(storage, gateway, lock_service, notifications):
    return OrderService(storage, gateway, lock_service, notifications)


SHIPPING_ADDRESS = {
    "name": "Asha Rao",
    "phone": "9876543210",
    "address_line1": "12 MG Road",
    "address_line2": None,
    "city": "Bengaluru",
    "state": "Karnataka",
    "pincode": "560001",
}


@pytest.fixture
def shipping_address():
    return dict(SHIPPING_ADDRESS)


# ---------- API ----------


@pytest.fixture(params=["memory", "sql"])
def app(request):
    application = create_app(
        storage_backend=request.param,
        database_url="sqlite://",
        seed=True,
    )
    application.state.gateway = FakeGateway()
    application.state.lock_service = FakeLockService()
    application.state.notifications = RecordingNotifications()
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def register(client):
    """Register a user through the API; returns (user_json, auth headers)."""

    def _register(username="meera", password="secret123"):
        resp = client.post(
            "/api/auth/register",
            json={"username": username, "email": f"{username}@example.com", "password": password},
        )
        assert resp.status_code == 201, resp.text
        user = resp.json()
        return user, {"Authorization": f"Bearer {create_access_token(int(user['id']))}"}

    return _register
