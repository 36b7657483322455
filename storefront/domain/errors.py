"""Exceptions raised by storefront services.

Every error the API can report derives from StorefrontError; the HTTP status
for each type lives in storefront.main.ERROR_STATUS_CODES.
"""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(StorefrontError):
    default_message = "Invalid request data"


class NotFound(StorefrontError):
    """Raised when an entity id or slug does not resolve."""

    def __init__(self, entity: str, key=None):
        self.entity = entity
        self.key = key
        msg = f"{entity} not found"
        if key is not None:
            msg = f"{entity} not found: {key}"
        super().__init__(msg)


class NotAuthenticated(StorefrontError):
    default_message = "Authentication required"


class AuthorizationError(StorefrontError):
    default_message = "Not allowed to access this resource"


class AddressRequired(ValidationError):
    default_message = "A shipping address must be selected"


class OutOfStock(StorefrontError):
    def __init__(self, product_id, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Only {available} unit(s) of product {product_id} in stock, {requested} requested"
        )


class CheckoutInProgress(StorefrontError):
    default_message = "A checkout for this account is already in progress"


class InvalidStatusTransition(StorefrontError):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Order cannot move from '{current}' to '{target}'")


class PaymentVerificationFailed(StorefrontError):
    default_message = (
        "Payment verification failed. Please contact support if money was deducted."
    )


class GatewayUnavailable(StorefrontError):
    default_message = "Payment gateway is unavailable, please try again"


class PaymentInitiationFailed(GatewayUnavailable):
    default_message = "Could not start the payment, please try again"


class PersistenceError(StorefrontError):
    default_message = "Something went wrong, please try again later"
