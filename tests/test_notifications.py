"""Notification rendering and best-effort delivery."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
import requests

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.product import ProductModel
from storefront.data.models.user import UserModel
from storefront.services import notification_service
from storefront.services.email_client import EmailClient
from storefront.services.notification_service import (
    NotificationService,
    render_order_confirmation,
    render_status_update,
    send_email_task,
)


@pytest.fixture
def customer():
    return UserModel(id=1, username="asha", email="asha@example.com")


@pytest.fixture
def order(shipping_address):
    order = OrderModel(
        id=10,
        order_number="ORD-1700000000000-ABC123",
        user_id=1,
        status="confirmed",
        subtotal=Decimal("2400"),
        shipping_cost=Decimal("0"),
        tax=Decimal("120"),
        total=Decimal("2520"),
        payment_method="razorpay",
        payment_status="completed",
        shipping_address=shipping_address,
        estimated_delivery=datetime(2024, 3, 9, tzinfo=timezone.utc),
    )
    item = OrderItemModel(product_id=3, quantity=2, price=Decimal("1200"))
    item.product = ProductModel(id=3, name="Golden Banarasi Saree")
    order.items = [item]
    return order


def test_confirmation_content(customer, order):
    email = render_order_confirmation(customer, order)

    assert email["to"] == "asha@example.com"
    assert email["subject"] == "Order Confirmation - ORD-1700000000000-ABC123"
    assert "Golden Banarasi Saree x2" in email["text"]
    assert "Total Amount: Rs.2520" in email["text"]
    assert "Bengaluru, Karnataka 560001" in email["text"]
    assert "09 Mar 2024" in email["text"]


def test_status_update_content(customer, order):
    order.status = "shipped"
    email = render_status_update(customer, order, "processing")

    assert email["subject"].endswith("Status Updated to shipped")
    assert "processing -> shipped" in email["text"]
    assert "on its way" in email["text"]


def test_dispatch_failure_is_swallowed(customer, order, monkeypatch):
    class BrokenTask:
        def delay(self, *args, **kwargs):
            raise ConnectionError("broker down")

    monkeypatch.setattr(notification_service, "send_email_task", BrokenTask())

    assert NotificationService().notify_order_created(customer, order) is False


@pytest.mark.parametrize("renderer, notify", [
    ("render_status_update", lambda svc, user, order: svc.notify_status_changed(user, order, "pending")),
    ("render_welcome", lambda svc, user, order: svc.notify_welcome(user)),
])
def test_render_failure_is_swallowed(customer, order, monkeypatch, renderer, notify):
    def broken(*args):
        raise KeyError("pincode")

    monkeypatch.setattr(notification_service, renderer, broken)

    assert notify(NotificationService(), customer, order) is False


def test_missing_user_is_not_notified(order):
    assert NotificationService().notify_order_created(None, order) is False


def test_task_runs_eagerly_without_api_key(customer, order, monkeypatch):
    monkeypatch.setattr("storefront.services.email_client.SENDGRID_API_KEY", None)

    assert NotificationService().notify_order_created(customer, order) is True


def test_email_client_posts_to_sendgrid(monkeypatch):
    sent = []

    class Ok:
        def raise_for_status(self):
            pass

    def fake_post(url, json=None, headers=None, timeout=None):
        sent.append((url, json, headers))
        return Ok()

    monkeypatch.setattr("storefront.services.email_client.requests.post", fake_post)

    client = EmailClient(api_key="SG.key", from_email="shop@example.com", url="http://mail.test/send")
    assert client.send("asha@example.com", "Hello", "Body") is True

    url, payload, headers = sent[0]
    assert url == "http://mail.test/send"
    assert payload["personalizations"][0]["to"][0]["email"] == "asha@example.com"
    assert payload["from"]["email"] == "shop@example.com"
    assert headers["Authorization"] == "Bearer SG.key"


def test_email_client_without_key_skips():
    assert EmailClient(api_key="").send("asha@example.com", "Hello", "Body") is False


def test_send_email_task_result(monkeypatch):
    monkeypatch.setattr(EmailClient, "send", lambda self, to, subject, text, html=None: True)

    result = send_email_task.apply(args=("asha@example.com", "Hi", "Body")).get()

    assert result == {"to": "asha@example.com", "subject": "Hi", "status": "sent"}


def test_email_client_does_not_retry_rejected_request(monkeypatch):
    calls = []

    class Rejected:
        status_code = 401

        def raise_for_status(self):
            raise requests.HTTPError("401 Unauthorized", response=self)

    def fake_post(*args, **kwargs):
        calls.append(1)
        return Rejected()

    monkeypatch.setattr("storefront.services.email_client.requests.post", fake_post)

    client = EmailClient(api_key="SG.revoked", url="http://mail.test/send")
    assert client.send("asha@example.com", "Hello", "Body") is False
    assert len(calls) == 1
