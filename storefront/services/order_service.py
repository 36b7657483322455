# storefront/services/order_service.py
import uuid
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain import order_status
from storefront.domain.context import RequestContext
from storefront.domain.errors import (
    AddressRequired,
    AuthorizationError,
    CheckoutInProgress,
    GatewayUnavailable,
    NotFound,
    OutOfStock,
    PaymentInitiationFailed,
    PaymentVerificationFailed,
    ValidationError,
)
from storefront.domain.pricing import OrderTotals, compute_totals
from storefront.repos.base import Storage
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.services.payment_gateway import RazorpayClient
from storefront.utils.logging import get_logger
from storefront.utils.settings import CHECKOUT_LOCK_TTL_SECONDS

logger = get_logger(__name__)

CURRENCY = "INR"
DELIVERY_DAYS = 7
ADDRESS_FIELDS = ("name", "phone", "address_line1", "address_line2", "city", "state", "pincode")


def new_order_number() -> str:
    stamp = int(datetime.now(timezone.utc).timestamp() * 1000)
    return f"ORD-{stamp}-{uuid.uuid4().hex[:6].upper()}"


class OrderService:
    """
    Checkout and order lifecycle.

    Placing an order:
    1. resolve the shipping address (AddressRequired without one)
    2. snapshot the cart and compute totals
    3. online: verify the gateway signature and the paid amount; cod: nothing
    4. persist order + items + stock decrement in one unit
    5. clear the cart
    6. queue the confirmation email (best-effort)

    Anything failing before step 4 leaves cart and catalog untouched.
    """

    def __init__(
        self,
        storage: Storage,
        gateway: RazorpayClient,
        lock_service: LockService,
        notifications: NotificationService | None = None,
    ):
        self.orders = storage.orders
        self.carts = storage.carts
        self.addresses = storage.addresses
        self.users = storage.users
        self.gateway = gateway
        self.lock_service = lock_service
        self.notifications = notifications or NotificationService()

    # ---------- helpers ----------

    def resolve_shipping_address(
        self,
        ctx: RequestContext,
        address_id: int | None = None,
        shipping_address: Dict[str, Any] | None = None,
    ) -> Dict[str, Any]:
        if address_id is not None:
            address = self.addresses.get_address(address_id)
            if not address:
                raise NotFound("Address", address_id)
            ctx.require_owner(address.user_id)
            return {field: getattr(address, field) for field in ADDRESS_FIELDS}
        if shipping_address:
            return {field: shipping_address.get(field) for field in ADDRESS_FIELDS}
        raise AddressRequired()

    def _cart_snapshot(self, user_id: int) -> List[CartItemModel]:
        items = [i for i in self.carts.list_items(user_id) if i.product is not None]
        if not items:
            raise ValidationError("Cart is empty")
        return items

    @staticmethod
    def _totals(items: List[CartItemModel]) -> OrderTotals:
        return compute_totals((i.product.price, i.quantity) for i in items)

    @staticmethod
    def _check_stock(items: List[CartItemModel]):
        for item in items:
            if item.product.stock_quantity < item.quantity:
                raise OutOfStock(item.product_id, item.quantity, item.product.stock_quantity)

    @staticmethod
    def _totals_dict(totals: OrderTotals, items: List[CartItemModel]) -> Dict[str, Any]:
        return {
            "subtotal": totals.subtotal,
            "shipping_cost": totals.shipping_cost,
            "tax": totals.tax,
            "total": totals.total,
            "item_count": sum(i.quantity for i in items),
        }

    @contextmanager
    def _checkout_lock(self, user_id: int):
        token = self.lock_service.acquire_checkout_lock(user_id, ttl=CHECKOUT_LOCK_TTL_SECONDS)
        if not token:
            raise CheckoutInProgress()
        try:
            yield
        finally:
            try:
                self.lock_service.release_checkout_lock(user_id, token)
            except Exception as e:
                # the lock still expires on its TTL
                logger.warning(f"Failed to release checkout lock for user {user_id}: {e}")

    def _place(
        self,
        user_id: int,
        items: List[CartItemModel],
        shipping_address: Dict[str, Any],
        payment_method: str,
        payment_status: str,
        status: str,
        gateway_order_id: str | None = None,
        gateway_payment_id: str | None = None,
    ) -> OrderModel:
        totals = self._totals(items)
        now = datetime.now(timezone.utc)

        order = OrderModel(
            order_number=new_order_number(),
            user_id=user_id,
            status=status,
            subtotal=totals.subtotal,
            shipping_cost=totals.shipping_cost,
            tax=totals.tax,
            total=totals.total,
            payment_method=payment_method,
            payment_status=payment_status,
            gateway_order_id=gateway_order_id,
            gateway_payment_id=gateway_payment_id,
            shipping_address=shipping_address,
            estimated_delivery=now + timedelta(days=DELIVERY_DAYS),
            created_at=now,
        )
        # price frozen from the cart snapshot, not linked to the catalog
        order_items = [
            OrderItemModel(product_id=i.product_id, quantity=i.quantity, price=i.product.price)
            for i in items
        ]

        created = self.orders.create_order(order, order_items)
        logger.info(
            f"Order {created.order_number} created for user {user_id}: "
            f"{len(order_items)} item(s), total {created.total}, {payment_method}/{payment_status}"
        )

        try:
            self.carts.clear(user_id)
        except Exception:
            # the order is committed; a stale cart is the lesser problem
            logger.exception(f"Order {created.order_number} placed but cart of user {user_id} was not cleared")

        return created

    def _notify_created(self, order: OrderModel):
        self.notifications.notify_order_created(self.users.get_user(order.user_id), order)

    # ---------- checkout ----------

    def checkout_summary(self, ctx: RequestContext) -> Dict[str, Any]:
        user_id = ctx.require_user()
        items = self._cart_snapshot(user_id)
        return self._totals_dict(self._totals(items), items)

    def create_payment_order(self, ctx: RequestContext, amount_minor_units: int, currency: str = CURRENCY) -> dict:
        ctx.require_user()
        try:
            return self.gateway.create_remote_order(amount_minor_units, currency)
        except GatewayUnavailable as e:
            raise PaymentInitiationFailed() from e

    def initiate_online_checkout(
        self,
        ctx: RequestContext,
        address_id: int | None = None,
        shipping_address: Dict[str, Any] | None = None,
    ) -> Dict[str, Any]:
        user_id = ctx.require_user()
        self.resolve_shipping_address(ctx, address_id, shipping_address)

        items = self._cart_snapshot(user_id)
        self._check_stock(items)
        totals = self._totals(items)

        try:
            remote = self.gateway.create_remote_order(
                totals.amount_minor_units,
                CURRENCY,
                receipt=f"user_{user_id}_{int(datetime.now(timezone.utc).timestamp())}",
            )
        except GatewayUnavailable as e:
            raise PaymentInitiationFailed() from e

        logger.info(f"Gateway order {remote.get('id')} opened for user {user_id}, {totals.amount_minor_units} paise")
        return {
            "gateway_order_id": remote["id"],
            "amount": remote.get("amount", totals.amount_minor_units),
            "currency": remote.get("currency", CURRENCY),
            "key_id": self.gateway.key_id,
            "totals": self._totals_dict(totals, items),
        }

    def complete_online_checkout(
        self,
        ctx: RequestContext,
        gateway_order_id: str,
        payment_id: str,
        signature: str,
        address_id: int | None = None,
        shipping_address: Dict[str, Any] | None = None,
    ) -> OrderModel:
        user_id = ctx.require_user()
        address = self.resolve_shipping_address(ctx, address_id, shipping_address)

        if not self.gateway.verify_signature(gateway_order_id, payment_id, signature):
            logger.warning(f"Payment verification failed - signature mismatch for gateway order {gateway_order_id}")
            raise PaymentVerificationFailed()

        with self._checkout_lock(user_id):
            existing = self.orders.get_by_gateway_order(gateway_order_id)
            if existing:
                if existing.user_id != user_id:
                    raise PaymentVerificationFailed()
                logger.info(f"Gateway order {gateway_order_id} already settled as {existing.order_number}")
                return existing

            items = self._cart_snapshot(user_id)
            totals = self._totals(items)

            remote = self.gateway.fetch_remote_order(gateway_order_id)
            if int(remote.get("amount", -1)) != totals.amount_minor_units:
                logger.warning(
                    f"Gateway order {gateway_order_id} amount {remote.get('amount')} "
                    f"!= cart total {totals.amount_minor_units} for user {user_id}"
                )
                raise PaymentVerificationFailed(
                    "Paid amount does not match the cart total. "
                    "Please contact support if money was deducted."
                )

            order = self._place(
                user_id,
                items,
                address,
                payment_method="razorpay",
                payment_status=order_status.PAYMENT_COMPLETED,
                status=order_status.CONFIRMED,
                gateway_order_id=gateway_order_id,
                gateway_payment_id=payment_id,
            )

        self._notify_created(order)
        return order

    def place_cod_order(
        self,
        ctx: RequestContext,
        address_id: int | None = None,
        shipping_address: Dict[str, Any] | None = None,
    ) -> OrderModel:
        user_id = ctx.require_user()
        address = self.resolve_shipping_address(ctx, address_id, shipping_address)

        with self._checkout_lock(user_id):
            items = self._cart_snapshot(user_id)
            order = self._place(
                user_id,
                items,
                address,
                payment_method="cod",
                payment_status=order_status.PAYMENT_PENDING,
                status=order_status.PENDING,
            )

        self._notify_created(order)
        return order

    # ---------- orders ----------

    def list_orders(self, ctx: RequestContext, user_id: int) -> List[OrderModel]:
        ctx.require_owner(user_id)
        return self.orders.list_for_user(user_id)

    def get_order(self, ctx: RequestContext, order_id: int) -> OrderModel:
        user_id = ctx.require_user()
        order = self.orders.get_order(order_id)
        if not order:
            raise NotFound("Order", order_id)
        if order.user_id != user_id:
            raise AuthorizationError("Order belongs to another user")
        return order

    def _transition(self, order: OrderModel, target: str) -> OrderModel:
        old_status = order.status
        order_status.ensure_transition(old_status, target)
        # the repo re-checks old_status atomically; a concurrent change raises there
        updated = self.orders.update_status(
            order.id,
            old_status,
            target,
            restock=(target == order_status.CANCELLED),
        )
        if updated is None:
            raise NotFound("Order", order.id)
        logger.info(f"Order {updated.order_number}: {old_status} -> {target}")
        self.notifications.notify_status_changed(self.users.get_user(updated.user_id), updated, old_status)
        return updated

    def cancel_order(self, ctx: RequestContext, order_id: int) -> OrderModel:
        order = self.get_order(ctx, order_id)
        return self._transition(order, order_status.CANCELLED)

    def update_status(self, order_id: int, status: str) -> OrderModel:
        """Staff-side fulfillment update; ownership is not checked here."""
        order = self.orders.get_order(order_id)
        if not order:
            raise NotFound("Order", order_id)
        return self._transition(order, status)
