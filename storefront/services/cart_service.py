# storefront/services/cart_service.py
from typing import Any, Dict, List

from storefront.data.models.cart_item import CartItemModel
from storefront.domain.context import RequestContext
from storefront.domain.errors import AuthorizationError, NotFound, ValidationError
from storefront.domain.pricing import line_subtotal
from storefront.repos.base import Storage
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Per-user cart: product -> quantity.
    Commands (add, update, remove, clear) change state,
    get_cart is a read joined with live catalog prices.
    """

    def __init__(self, storage: Storage):
        self.repo = storage.carts
        self.catalog = storage.catalog

    # query
    def get_cart(self, ctx: RequestContext, user_id: int) -> Dict[str, Any]:
        ctx.require_owner(user_id)
        items = [i for i in self.repo.list_items(user_id) if i.product is not None]
        return self._render(user_id, items)

    @staticmethod
    def _render(user_id: int, items: List[CartItemModel]) -> Dict[str, Any]:
        lines = [(i.product.price, i.quantity) for i in items]
        return {
            "user_id": user_id,
            "items": [
                {
                    "id": i.id,
                    "user_id": i.user_id,
                    "product_id": i.product_id,
                    "quantity": i.quantity,
                    "product": i.product,
                    "line_total": i.product.price * i.quantity,
                }
                for i in items
            ],
            "total": line_subtotal(lines),
            "count": sum(i.quantity for i in items),
        }

    # commands
    def add_to_cart(self, ctx: RequestContext, product_id: int, quantity: int = 1) -> CartItemModel:
        user_id = ctx.require_user()

        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        product = self.catalog.get_product(product_id)
        if not product or not product.is_active:
            raise NotFound("Product", product_id)

        item = self.repo.add_or_increment(user_id, product_id, quantity)
        logger.info(f"User {user_id}: product {product_id} x{quantity} added, line now {item.quantity}")
        return item

    def _owned_item(self, ctx: RequestContext, cart_item_id: int) -> CartItemModel | None:
        user_id = ctx.require_user()
        item = self.repo.get_item(cart_item_id)
        if item and item.user_id != user_id:
            raise AuthorizationError("Cart item belongs to another user")
        return item

    def update_quantity(self, ctx: RequestContext, cart_item_id: int, quantity: int) -> CartItemModel | None:
        """Set the line quantity; zero or less removes the line and returns None."""
        item = self._owned_item(ctx, cart_item_id)
        if not item:
            raise NotFound("Cart item", cart_item_id)

        if quantity <= 0:
            self.remove_from_cart(ctx, cart_item_id)
            return None

        return self.repo.set_quantity(cart_item_id, quantity)

    def remove_from_cart(self, ctx: RequestContext, cart_item_id: int) -> bool:
        # idempotent, a missing line is not an error
        item = self._owned_item(ctx, cart_item_id)
        if not item:
            return False
        removed = self.repo.delete_item(cart_item_id)
        if removed:
            logger.info(f"Cart item {cart_item_id} removed for user {item.user_id}")
        return removed

    def clear_cart(self, ctx: RequestContext, user_id: int) -> int:
        ctx.require_owner(user_id)
        removed = self.repo.clear(user_id)
        logger.info(f"Cart cleared for user {user_id}, {removed} line(s) removed")
        return removed
