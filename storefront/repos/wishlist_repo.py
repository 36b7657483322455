# storefront/repos/wishlist_repo.py
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.wishlist_item import WishlistItemModel
from storefront.repos.base import WishlistRepo


class SqlWishlistRepo(WishlistRepo):
    def __init__(self, db: Session):
        self.db = db

    def list_items(self, user_id: int) -> List[WishlistItemModel]:
        stmt = (
            select(WishlistItemModel)
            .where(WishlistItemModel.user_id == user_id)
            .order_by(WishlistItemModel.created_at.desc(), WishlistItemModel.id.desc())
        )
        return list(self.db.execute(stmt).unique().scalars())

    def get_item(self, item_id: int) -> WishlistItemModel | None:
        return self.db.get(WishlistItemModel, item_id)

    def _find(self, user_id: int, product_id: int) -> WishlistItemModel | None:
        stmt = select(WishlistItemModel).where(
            WishlistItemModel.user_id == user_id,
            WishlistItemModel.product_id == product_id,
        )
        return self.db.execute(stmt).unique().scalar_one_or_none()

    def add(self, user_id: int, product_id: int) -> WishlistItemModel:
        existing = self._find(user_id, product_id)
        if existing:
            return existing

        item = WishlistItemModel(user_id=user_id, product_id=product_id)
        self.db.add(item)
        try:
            self.db.commit()
        except IntegrityError:
            # concurrent add of the same pair won the unique constraint
            self.db.rollback()
            return self._find(user_id, product_id)
        self.db.refresh(item)
        return item

    def delete_item(self, item_id: int) -> bool:
        result = self.db.execute(delete(WishlistItemModel).where(WishlistItemModel.id == item_id))
        self.db.commit()
        return result.rowcount > 0
