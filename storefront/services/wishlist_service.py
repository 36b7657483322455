# storefront/services/wishlist_service.py
from typing import List

from storefront.data.models.wishlist_item import WishlistItemModel
from storefront.domain.context import RequestContext
from storefront.domain.errors import AuthorizationError, NotFound
from storefront.repos.base import Storage


class WishlistService:
    def __init__(self, storage: Storage):
        self.repo = storage.wishlist
        self.catalog = storage.catalog

    def list_items(self, ctx: RequestContext, user_id: int) -> List[WishlistItemModel]:
        ctx.require_owner(user_id)
        return self.repo.list_items(user_id)

    def add(self, ctx: RequestContext, product_id: int) -> WishlistItemModel:
        # adding the same product twice returns the existing row
        user_id = ctx.require_user()
        product = self.catalog.get_product(product_id)
        if not product or not product.is_active:
            raise NotFound("Product", product_id)
        return self.repo.add(user_id, product_id)

    def remove(self, ctx: RequestContext, item_id: int) -> bool:
        user_id = ctx.require_user()
        item = self.repo.get_item(item_id)
        if not item:
            return False
        if item.user_id != user_id:
            raise AuthorizationError("Wishlist item belongs to another user")
        return self.repo.delete_item(item_id)
