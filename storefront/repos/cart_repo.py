# storefront/repos/cart_repo.py
from typing import List

from sqlalchemy import delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from storefront.data.models.cart_item import CartItemModel
from storefront.repos.base import CartRepo

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SqlCartRepo(CartRepo):
    def __init__(self, db: Session):
        self.db = db

    def list_items(self, user_id: int) -> List[CartItemModel]:
        stmt = (
            select(CartItemModel)
            .where(CartItemModel.user_id == user_id)
            .order_by(CartItemModel.id)
        )
        return list(self.db.execute(stmt).unique().scalars())

    def get_item(self, item_id: int) -> CartItemModel | None:
        return self.db.get(CartItemModel, item_id)

    def get_item_for(self, user_id: int, product_id: int) -> CartItemModel | None:
        stmt = select(CartItemModel).where(
            CartItemModel.user_id == user_id,
            CartItemModel.product_id == product_id,
        )
        return self.db.execute(stmt).unique().scalar_one_or_none()

    def add_or_increment(self, user_id: int, product_id: int, quantity: int) -> CartItemModel:
        insert = _UPSERT_DIALECTS.get(self.db.get_bind().dialect.name)
        if insert is None:
            return self._add_or_increment_locked(user_id, product_id, quantity)

        # INSERT ... ON CONFLICT DO UPDATE, no read-then-write window
        stmt = insert(CartItemModel).values(
            user_id=user_id,
            product_id=product_id,
            quantity=quantity,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[CartItemModel.user_id, CartItemModel.product_id],
            set_={"quantity": CartItemModel.quantity + stmt.excluded.quantity},
        )
        self.db.execute(stmt)
        self.db.commit()

        item = self.get_item_for(user_id, product_id)
        self.db.refresh(item)
        return item

    def _add_or_increment_locked(self, user_id: int, product_id: int, quantity: int) -> CartItemModel:
        # other dialects: row lock, then increment in SQL
        stmt = (
            select(CartItemModel)
            .where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
            )
            .with_for_update()
        )
        existing = self.db.execute(stmt).unique().scalar_one_or_none()
        if existing:
            self.db.execute(
                update(CartItemModel)
                .where(CartItemModel.id == existing.id)
                .values(quantity=CartItemModel.quantity + quantity)
            )
        else:
            self.db.add(CartItemModel(user_id=user_id, product_id=product_id, quantity=quantity))
        self.db.commit()

        item = self.get_item_for(user_id, product_id)
        self.db.refresh(item)
        return item

    def set_quantity(self, item_id: int, quantity: int) -> CartItemModel | None:
        item = self.get_item(item_id)
        if not item:
            return None
        item.quantity = quantity
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete_item(self, item_id: int) -> bool:
        result = self.db.execute(delete(CartItemModel).where(CartItemModel.id == item_id))
        self.db.commit()
        return result.rowcount > 0

    def clear(self, user_id: int) -> int:
        result = self.db.execute(delete(CartItemModel).where(CartItemModel.user_id == user_id))
        self.db.commit()
        return result.rowcount
