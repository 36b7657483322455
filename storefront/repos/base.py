"""Storage interfaces.

Services only talk to these abstract repositories. Two implementations exist:
the SQLAlchemy repositories in this package and the in-memory ones in
storefront.repos.memory. Which one is used is decided once at startup by
build_storage_provider().
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Sequence

from storefront.data.models import (
    AddressModel,
    CartItemModel,
    CategoryModel,
    OrderItemModel,
    OrderModel,
    ProductModel,
    ReviewModel,
    UserModel,
    WishlistItemModel,
)

SORT_KEYS = ("newest", "price-low", "price-high", "rating", "name")
FEATURED_LIMIT = 8


@dataclass
class ProductFilters:
    category_id: int | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    fabric: str | None = None
    color: str | None = None
    search: str | None = None
    in_stock_only: bool = False
    sort_by: str = "newest"


class UserRepo(ABC):
    @abstractmethod
    def get_user(self, user_id: int) -> UserModel | None: ...

    @abstractmethod
    def get_by_email(self, email: str) -> UserModel | None: ...

    @abstractmethod
    def get_by_username(self, username: str) -> UserModel | None: ...

    @abstractmethod
    def create_user(self, user: UserModel) -> UserModel: ...


class CatalogRepo(ABC):
    @abstractmethod
    def list_categories(self) -> List[CategoryModel]: ...

    @abstractmethod
    def get_category(self, category_id: int) -> CategoryModel | None: ...

    @abstractmethod
    def get_category_by_slug(self, slug: str) -> CategoryModel | None: ...

    @abstractmethod
    def create_category(self, category: CategoryModel) -> CategoryModel: ...

    @abstractmethod
    def list_products(self, filters: ProductFilters) -> List[ProductModel]: ...

    @abstractmethod
    def get_product(self, product_id: int) -> ProductModel | None: ...

    @abstractmethod
    def featured_products(self, limit: int = FEATURED_LIMIT) -> List[ProductModel]: ...

    @abstractmethod
    def create_product(self, product: ProductModel) -> ProductModel: ...

    @abstractmethod
    def update_product(self, product_id: int, **fields) -> ProductModel | None: ...

    @abstractmethod
    def count_categories(self) -> int: ...


class CartRepo(ABC):
    @abstractmethod
    def list_items(self, user_id: int) -> List[CartItemModel]:
        """Cart rows for the user with .product loaded from the live catalog."""

    @abstractmethod
    def get_item(self, item_id: int) -> CartItemModel | None: ...

    @abstractmethod
    def add_or_increment(self, user_id: int, product_id: int, quantity: int) -> CartItemModel:
        """Atomically create the (user, product) row or add quantity to it."""

    @abstractmethod
    def set_quantity(self, item_id: int, quantity: int) -> CartItemModel | None: ...

    @abstractmethod
    def delete_item(self, item_id: int) -> bool: ...

    @abstractmethod
    def clear(self, user_id: int) -> int: ...


class WishlistRepo(ABC):
    @abstractmethod
    def list_items(self, user_id: int) -> List[WishlistItemModel]: ...

    @abstractmethod
    def get_item(self, item_id: int) -> WishlistItemModel | None: ...

    @abstractmethod
    def add(self, user_id: int, product_id: int) -> WishlistItemModel: ...

    @abstractmethod
    def delete_item(self, item_id: int) -> bool: ...


class AddressRepo(ABC):
    @abstractmethod
    def list_for_user(self, user_id: int) -> List[AddressModel]: ...

    @abstractmethod
    def get_address(self, address_id: int) -> AddressModel | None: ...

    @abstractmethod
    def create_address(self, address: AddressModel) -> AddressModel:
        """Store the address; a default address clears the user's other defaults."""

    @abstractmethod
    def update_address(self, address_id: int, **fields) -> AddressModel | None: ...

    @abstractmethod
    def delete_address(self, address_id: int) -> bool: ...


class OrderRepo(ABC):
    @abstractmethod
    def list_for_user(self, user_id: int) -> List[OrderModel]: ...

    @abstractmethod
    def get_order(self, order_id: int) -> OrderModel | None: ...

    @abstractmethod
    def get_by_gateway_order(self, gateway_order_id: str) -> OrderModel | None: ...

    @abstractmethod
    def create_order(self, order: OrderModel, items: Sequence[OrderItemModel]) -> OrderModel:
        """Persist the order, its items and the stock decrement as one unit.

        Raises OutOfStock (and writes nothing) when a product cannot cover
        its line quantity.
        """

    @abstractmethod
    def update_status(
        self, order_id: int, expected: str, status: str, restock: bool = False
    ) -> OrderModel | None:
        """Move the order from `expected` to `status`; restock=True returns the line quantities to stock.

        The check and the write are one step: raises InvalidStatusTransition
        (and writes nothing) when the stored status is no longer `expected`.
        Returns None for an unknown order.
        """


class ReviewRepo(ABC):
    @abstractmethod
    def list_for_product(self, product_id: int) -> List[ReviewModel]: ...

    @abstractmethod
    def create_review(self, review: ReviewModel) -> ReviewModel:
        """Store the review and refresh the product's rating and review_count."""


@dataclass
class Storage:
    users: UserRepo
    catalog: CatalogRepo
    carts: CartRepo
    wishlist: WishlistRepo
    addresses: AddressRepo
    orders: OrderRepo
    reviews: ReviewRepo
