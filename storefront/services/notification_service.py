# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.data.models.order import OrderModel
from storefront.data.models.user import UserModel
from storefront.services.email_client import EmailClient
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

SUPPORT_LINE = "Need help? Contact support@sareeshop.com | +91 12345 67890"

STATUS_MESSAGES = {
    "confirmed": "Your order has been confirmed and is being prepared.",
    "processing": "Your order is currently being processed.",
    "shipped": "Great news! Your order has been shipped and is on its way.",
    "delivered": "Your order has been delivered. We hope you love your purchase!",
    "cancelled": "Your order has been cancelled as requested.",
}


def _address_lines(address: dict) -> str:
    lines = [address.get("name", ""), address.get("address_line1", "")]
    if address.get("address_line2"):
        lines.append(address["address_line2"])
    lines.append(f"{address.get('city', '')}, {address.get('state', '')} {address.get('pincode', '')}")
    lines.append(f"Phone: {address.get('phone', '')}")
    return "\n".join(lines)


def render_order_confirmation(user: UserModel, order: OrderModel) -> dict:
    item_lines = "\n".join(
        f"- {item.product.name if item.product else item.product_id} x{item.quantity}: Rs.{item.price}"
        for item in order.items
    )
    delivery = (
        order.estimated_delivery.strftime("%d %b %Y") if order.estimated_delivery else "5-7 business days"
    )
    text = (
        f"Order Confirmed! Thank you for your purchase, {user.username}.\n\n"
        f"Order Number: {order.order_number}\n"
        f"Payment Method: {order.payment_method}\n"
        f"Subtotal: Rs.{order.subtotal}\n"
        f"Shipping: Rs.{order.shipping_cost}\n"
        f"Tax: Rs.{order.tax}\n"
        f"Total Amount: Rs.{order.total}\n\n"
        f"Items:\n{item_lines}\n\n"
        f"Shipping Address:\n{_address_lines(order.shipping_address)}\n\n"
        f"Estimated delivery: {delivery}\n\n"
        f"{SUPPORT_LINE}\n"
    )
    return {
        "to": user.email,
        "subject": f"Order Confirmation - {order.order_number}",
        "text": text,
    }


def render_status_update(user: UserModel, order: OrderModel, old_status: str) -> dict:
    new_status = order.status
    message = STATUS_MESSAGES.get(new_status, f"Your order status has been updated to {new_status}.")
    text = (
        f"{message}\n\n"
        f"Order Number: {order.order_number}\n"
        f"Status: {old_status} -> {new_status}\n"
        f"Total Amount: Rs.{order.total}\n"
        f"Payment Status: {order.payment_status}\n\n"
        f"{SUPPORT_LINE}\n"
    )
    return {
        "to": user.email,
        "subject": f"Order {order.order_number} - Status Updated to {new_status}",
        "text": text,
    }


def render_welcome(user: UserModel) -> dict:
    text = (
        f"Welcome to Saree Shop, {user.username}!\n\n"
        "Thank you for joining us. Discover traditional and contemporary sarees "
        "crafted by master artisans from across India.\n\n"
        f"{SUPPORT_LINE}\n"
    )
    return {
        "to": user.email,
        "subject": f"Welcome to Saree Shop, {user.username}!",
        "text": text,
    }


class NotificationService:
    """
    Transactional email, best-effort.
    Content is rendered in the request, delivery happens in a Celery task;
    any failure is logged and never reaches the caller.
    """

    def _dispatch(self, email: dict) -> bool:
        try:
            send_email_task.delay(email["to"], email["subject"], email["text"])
            return True
        except Exception:
            logger.exception(f"[NOTIFICATION] could not queue '{email['subject']}'")
            return False

    def _render_and_dispatch(self, render, *args, label: str) -> bool:
        try:
            email = render(*args)
        except Exception:
            logger.exception(f"[NOTIFICATION] could not render {label}")
            return False
        return self._dispatch(email)

    def notify_order_created(self, user: UserModel | None, order: OrderModel) -> bool:
        if user is None:
            logger.warning(f"[NOTIFICATION] order {order.order_number} has no user to notify")
            return False
        return self._render_and_dispatch(
            render_order_confirmation, user, order, label=f"confirmation for {order.order_number}"
        )

    def notify_status_changed(self, user: UserModel | None, order: OrderModel, old_status: str) -> bool:
        if user is None:
            return False
        return self._render_and_dispatch(
            render_status_update, user, order, old_status, label=f"status update for {order.order_number}"
        )

    def notify_welcome(self, user: UserModel) -> bool:
        return self._render_and_dispatch(render_welcome, user, label=f"welcome for user {user.id}")


@celery_app.task(name="storefront.services.notification_service.send_email_task")
def send_email_task(to: str, subject: str, text: str):
    sent = EmailClient().send(to, subject, text)
    logger.info(f"[NOTIFICATION] '{subject}' to {to}: {'sent' if sent else 'not sent'}")
    return {"to": to, "subject": subject, "status": "sent" if sent else "skipped"}
