# storefront/repos/order_repo.py
from typing import List, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.product import ProductModel
from storefront.domain.errors import InvalidStatusTransition, OutOfStock
from storefront.repos.base import OrderRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class SqlOrderRepo(OrderRepo):
    def __init__(self, db: Session):
        self.db = db

    def list_for_user(self, user_id: int) -> List[OrderModel]:
        stmt = (
            select(OrderModel)
            .where(OrderModel.user_id == user_id)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        )
        return list(self.db.execute(stmt).scalars())

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_by_gateway_order(self, gateway_order_id: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.gateway_order_id == gateway_order_id)
        ).scalar_one_or_none()

    def _decrement_stock(self, product_id: int, quantity: int):
        # conditional update keeps stock_quantity >= 0 under concurrent checkouts
        result = self.db.execute(
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.stock_quantity >= quantity,
            )
            .values(stock_quantity=ProductModel.stock_quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            available = self.db.execute(
                select(ProductModel.stock_quantity).where(ProductModel.id == product_id)
            ).scalar_one_or_none()
            raise OutOfStock(product_id, quantity, available or 0)

    def create_order(self, order: OrderModel, items: Sequence[OrderItemModel]) -> OrderModel:
        try:
            self.db.add(order)
            self.db.flush()

            for item in items:
                self._decrement_stock(item.product_id, item.quantity)
                item.order_id = order.id
                order.items.append(item)

            self.db.commit()
        except (OutOfStock, SQLAlchemyError):
            self.db.rollback()
            logger.warning(f"Order {order.order_number} rolled back")
            raise

        # stock changed behind the identity map
        for item in order.items:
            if item.product is not None:
                self.db.refresh(item.product)
        self.db.refresh(order)
        return order

    def update_status(
        self, order_id: int, expected: str, status: str, restock: bool = False
    ) -> OrderModel | None:
        try:
            # compare-and-set: a concurrent transition leaves rowcount at 0
            result = self.db.execute(
                update(OrderModel)
                .where(OrderModel.id == order_id, OrderModel.status == expected)
                .values(status=status)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                current = self.db.execute(
                    select(OrderModel.status).where(OrderModel.id == order_id)
                ).scalar_one_or_none()
                self.db.rollback()
                if current is None:
                    return None
                raise InvalidStatusTransition(current, status)

            if restock:
                lines = self.db.execute(
                    select(OrderItemModel.product_id, OrderItemModel.quantity)
                    .where(OrderItemModel.order_id == order_id)
                ).all()
                for product_id, quantity in lines:
                    self.db.execute(
                        update(ProductModel)
                        .where(ProductModel.id == product_id)
                        .values(stock_quantity=ProductModel.stock_quantity + quantity)
                        .execution_options(synchronize_session=False)
                    )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.warning(f"Status update of order {order_id} rolled back")
            raise

        order = self.get_order(order_id)
        self.db.refresh(order)
        if restock:
            for item in order.items:
                if item.product is not None:
                    self.db.refresh(item.product)
        return order
