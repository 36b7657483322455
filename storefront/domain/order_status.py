# storefront/domain/order_status.py
from storefront.domain.errors import InvalidStatusTransition, ValidationError

PENDING = "pending"
CONFIRMED = "confirmed"
PROCESSING = "processing"
SHIPPED = "shipped"
DELIVERED = "delivered"
CANCELLED = "cancelled"

PROGRESSION = (PENDING, CONFIRMED, PROCESSING, SHIPPED, DELIVERED)
ALL_STATUSES = PROGRESSION + (CANCELLED,)

PAYMENT_PENDING = "pending"
PAYMENT_COMPLETED = "completed"


def can_transition(current: str, target: str) -> bool:
    if current in (DELIVERED, CANCELLED):
        return False
    if target == CANCELLED:
        return True
    if current not in PROGRESSION or target not in PROGRESSION:
        return False
    return PROGRESSION.index(target) == PROGRESSION.index(current) + 1


def ensure_transition(current: str, target: str) -> None:
    if target not in ALL_STATUSES:
        raise ValidationError(f"Unknown order status: {target}")
    if not can_transition(current, target):
        raise InvalidStatusTransition(current, target)
