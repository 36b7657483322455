# storefront/services/payment_gateway.py
import hashlib
import hmac
import time

import requests
from requests import RequestException

from storefront.domain.errors import GatewayUnavailable
from storefront.utils.logging import get_logger
from storefront.utils.retry import http_retry
from storefront.utils.settings import RAZORPAY_API_URL, RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET

logger = get_logger(__name__)


def verify_signature(gateway_order_id: str, payment_id: str, signature: str, secret: str) -> bool:
    """Check a Razorpay callback: HMAC-SHA256(secret, "order_id|payment_id") as hex."""
    if not (gateway_order_id and payment_id and signature and secret):
        return False
    body = f"{gateway_order_id}|{payment_id}".encode()
    expected = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature)


class RazorpayClient:
    """Thin wrapper over the Razorpay Orders REST API."""

    def __init__(
        self,
        key_id: str | None = None,
        key_secret: str | None = None,
        base_url: str | None = None,
        timeout: int = 5,
    ):
        self.key_id = key_id or RAZORPAY_KEY_ID
        self.key_secret = key_secret or RAZORPAY_KEY_SECRET
        self.base_url = (base_url or RAZORPAY_API_URL).rstrip("/")
        self.timeout = timeout

    def create_remote_order(self, amount_minor_units: int, currency: str = "INR", receipt: str | None = None) -> dict:
        # not retried: a lost response could mean a duplicate gateway order
        url = f"{self.base_url}/orders"
        payload = {
            "amount": amount_minor_units,
            "currency": currency,
            "receipt": receipt or f"receipt_{int(time.time() * 1000)}",
            "payment_capture": 1,
        }
        logger.info(f"RazorpayClient POST {url} amount={amount_minor_units} {currency}")
        try:
            resp = requests.post(url, json=payload, auth=(self.key_id, self.key_secret), timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except RequestException as e:
            logger.error(f"Razorpay order creation failed: {e}")
            raise GatewayUnavailable() from e

    def fetch_remote_order(self, gateway_order_id: str) -> dict:
        try:
            return self._get_order(gateway_order_id)
        except RequestException as e:
            logger.error(f"Razorpay order lookup failed for {gateway_order_id}: {e}")
            raise GatewayUnavailable() from e

    @http_retry()
    def _get_order(self, gateway_order_id: str) -> dict:
        url = f"{self.base_url}/orders/{gateway_order_id}"
        logger.info(f"RazorpayClient GET {url}")
        resp = requests.get(url, auth=(self.key_id, self.key_secret), timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def verify_signature(self, gateway_order_id: str, payment_id: str, signature: str) -> bool:
        return verify_signature(gateway_order_id, payment_id, signature, self.key_secret)
