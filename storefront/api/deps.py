# storefront/api/deps.py
import hmac
from typing import Iterator

from fastapi import Depends, Header, Request

from storefront.domain.context import ANONYMOUS, RequestContext
from storefront.domain.errors import AuthorizationError
from storefront.repos.base import Storage
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService
from storefront.services.payment_gateway import RazorpayClient
from storefront.utils.security import decode_access_token
from storefront.utils.settings import STAFF_API_KEY


def get_storage(request: Request) -> Iterator[Storage]:
    with request.app.state.storage_provider.session() as storage:
        yield storage


def get_context(authorization: str | None = Header(None)) -> RequestContext:
    """Caller identity from 'Authorization: Bearer <token>'; anonymous when absent or invalid."""
    if not authorization:
        return ANONYMOUS
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return ANONYMOUS
    user_id = decode_access_token(token.strip())
    return RequestContext(user_id=user_id) if user_id is not None else ANONYMOUS


def get_gateway(request: Request) -> RazorpayClient:
    return request.app.state.gateway


def get_lock_service(request: Request) -> LockService:
    return request.app.state.lock_service


def get_notifications(request: Request) -> NotificationService:
    return request.app.state.notifications


def get_order_service(
    storage: Storage = Depends(get_storage),
    gateway: RazorpayClient = Depends(get_gateway),
    lock_service: LockService = Depends(get_lock_service),
    notifications: NotificationService = Depends(get_notifications),
) -> OrderService:
    return OrderService(storage, gateway, lock_service, notifications)


def require_staff(x_staff_key: str | None = Header(None)):
    # no key configured means the staff endpoints are closed
    if not STAFF_API_KEY or not x_staff_key or not hmac.compare_digest(x_staff_key, STAFF_API_KEY):
        raise AuthorizationError("Staff key required")
