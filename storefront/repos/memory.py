# storefront/repos/memory.py
"""In-memory storage backend.

Rows are transient instances of the SQLAlchemy model classes, never attached
to a session, so services see the same objects whichever backend is active.
All mutations go through one re-entrant lock.
"""
import itertools
import threading
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Sequence

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
from storefront.data.models._common import utcnow
from storefront.domain.errors import InvalidStatusTransition, OutOfStock
from storefront.repos.base import (
    AddressRepo,
    CartRepo,
    CatalogRepo,
    FEATURED_LIMIT,
    OrderRepo,
    ProductFilters,
    ReviewRepo,
    Storage,
    UserRepo,
    WishlistRepo,
)


class MemoryTable:
    def __init__(self):
        self.rows: Dict[int, object] = {}
        self._ids = itertools.count(1)

    def insert(self, row):
        row.id = next(self._ids)
        if hasattr(row, "created_at") and row.created_at is None:
            row.created_at = utcnow()
        self.rows[row.id] = row
        return row

    def get(self, row_id):
        return self.rows.get(row_id)

    def remove(self, row_id) -> bool:
        return self.rows.pop(row_id, None) is not None

    def all(self) -> List:
        return list(self.rows.values())


class MemoryDatabase:
    def __init__(self):
        self.lock = threading.RLock()
        self.users = MemoryTable()
        self.categories = MemoryTable()
        self.products = MemoryTable()
        self.addresses = MemoryTable()
        self.cart_items = MemoryTable()
        self.wishlist_items = MemoryTable()
        self.orders = MemoryTable()
        self.order_items = MemoryTable()
        self.reviews = MemoryTable()


def _product_defaults(product: ProductModel):
    if product.is_active is None:
        product.is_active = True
    if product.stock_quantity is None:
        product.stock_quantity = 0
    if product.rating is None:
        product.rating = Decimal("0")
    if product.review_count is None:
        product.review_count = 0
    if product.images is None:
        product.images = []
    if product.description is None:
        product.description = ""


class MemoryUserRepo(UserRepo):
    def __init__(self, mdb: MemoryDatabase):
        self.mdb = mdb

    def get_user(self, user_id: int) -> UserModel | None:
        return self.mdb.users.get(user_id)

    def get_by_email(self, email: str) -> UserModel | None:
        return next((u for u in self.mdb.users.all() if u.email == email), None)

    def get_by_username(self, username: str) -> UserModel | None:
        return next((u for u in self.mdb.users.all() if u.username == username), None)

    def create_user(self, user: UserModel) -> UserModel:
        with self.mdb.lock:
            if user.is_verified is None:
                user.is_verified = False
            return self.mdb.users.insert(user)


class MemoryCatalogRepo(CatalogRepo):
    def __init__(self, mdb: MemoryDatabase):
        self.mdb = mdb

    def list_categories(self) -> List[CategoryModel]:
        return sorted(self.mdb.categories.all(), key=lambda c: c.id)

    def get_category(self, category_id: int) -> CategoryModel | None:
        return self.mdb.categories.get(category_id)

    def get_category_by_slug(self, slug: str) -> CategoryModel | None:
        return next((c for c in self.mdb.categories.all() if c.slug == slug), None)

    def create_category(self, category: CategoryModel) -> CategoryModel:
        with self.mdb.lock:
            return self.mdb.categories.insert(category)

    def count_categories(self) -> int:
        return len(self.mdb.categories.rows)

    def list_products(self, filters: ProductFilters) -> List[ProductModel]:
        def matches(p: ProductModel) -> bool:
            if not p.is_active:
                return False
            if filters.category_id is not None and p.category_id != filters.category_id:
                return False
            if filters.min_price is not None and p.price < filters.min_price:
                return False
            if filters.max_price is not None and p.price > filters.max_price:
                return False
            if filters.fabric and filters.fabric.lower() not in (p.fabric or "").lower():
                return False
            if filters.color and filters.color.lower() not in (p.color or "").lower():
                return False
            if filters.search:
                needle = filters.search.lower()
                if needle not in p.name.lower() and needle not in (p.description or "").lower():
                    return False
            if filters.in_stock_only and p.stock_quantity <= 0:
                return False
            return True

        products = [p for p in self.mdb.products.all() if matches(p)]
        sort_by = filters.sort_by
        if sort_by == "price-low":
            products.sort(key=lambda p: (p.price, p.id))
        elif sort_by == "price-high":
            products.sort(key=lambda p: (-p.price, p.id))
        elif sort_by == "rating":
            products.sort(key=lambda p: (-p.rating, p.id))
        elif sort_by == "name":
            products.sort(key=lambda p: (p.name, p.id))
        else:
            products.sort(key=lambda p: (p.created_at, p.id), reverse=True)
        return products

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.mdb.products.get(product_id)

    def featured_products(self, limit: int = FEATURED_LIMIT) -> List[ProductModel]:
        active = [p for p in sorted(self.mdb.products.all(), key=lambda p: p.id) if p.is_active]
        return active[:limit]

    def create_product(self, product: ProductModel) -> ProductModel:
        with self.mdb.lock:
            _product_defaults(product)
            return self.mdb.products.insert(product)

    def update_product(self, product_id: int, **fields) -> ProductModel | None:
        with self.mdb.lock:
            product = self.mdb.products.get(product_id)
            if not product:
                return None
            for key, value in fields.items():
                setattr(product, key, value)
            return product


class MemoryCartRepo(CartRepo):
    def __init__(self, mdb: MemoryDatabase):
        self.mdb = mdb

    def _join(self, item: CartItemModel) -> CartItemModel:
        item.product = self.mdb.products.get(item.product_id)
        return item

    def list_items(self, user_id: int) -> List[CartItemModel]:
        items = sorted(
            (i for i in self.mdb.cart_items.all() if i.user_id == user_id),
            key=lambda i: i.id,
        )
        return [self._join(i) for i in items]

    def get_item(self, item_id: int) -> CartItemModel | None:
        item = self.mdb.cart_items.get(item_id)
        return self._join(item) if item else None

    def add_or_increment(self, user_id: int, product_id: int, quantity: int) -> CartItemModel:
        with self.mdb.lock:
            existing = next(
                (
                    i
                    for i in self.mdb.cart_items.all()
                    if i.user_id == user_id and i.product_id == product_id
                ),
                None,
            )
            if existing:
                existing.quantity += quantity
                return self._join(existing)
            item = CartItemModel(user_id=user_id, product_id=product_id, quantity=quantity)
            return self._join(self.mdb.cart_items.insert(item))

    def set_quantity(self, item_id: int, quantity: int) -> CartItemModel | None:
        with self.mdb.lock:
            item = self.mdb.cart_items.get(item_id)
            if not item:
                return None
            item.quantity = quantity
            return self._join(item)

    def delete_item(self, item_id: int) -> bool:
        with self.mdb.lock:
            return self.mdb.cart_items.remove(item_id)

    def clear(self, user_id: int) -> int:
        with self.mdb.lock:
            ids = [i.id for i in self.mdb.cart_items.all() if i.user_id == user_id]
            for item_id in ids:
                self.mdb.cart_items.remove(item_id)
            return len(ids)


class MemoryWishlistRepo(WishlistRepo):
    def __init__(self, mdb: MemoryDatabase):
        self.mdb = mdb

    def _join(self, item: WishlistItemModel) -> WishlistItemModel:
        item.product = self.mdb.products.get(item.product_id)
        return item

    def list_items(self, user_id: int) -> List[WishlistItemModel]:
        items = [i for i in self.mdb.wishlist_items.all() if i.user_id == user_id]
        items.sort(key=lambda i: (i.created_at, i.id), reverse=True)
        return [self._join(i) for i in items]

    def get_item(self, item_id: int) -> WishlistItemModel | None:
        item = self.mdb.wishlist_items.get(item_id)
        return self._join(item) if item else None

    def add(self, user_id: int, product_id: int) -> WishlistItemModel:
        with self.mdb.lock:
            existing = next(
                (
                    i
                    for i in self.mdb.wishlist_items.all()
                    if i.user_id == user_id and i.product_id == product_id
                ),
                None,
            )
            if existing:
                return self._join(existing)
            item = WishlistItemModel(user_id=user_id, product_id=product_id)
            return self._join(self.mdb.wishlist_items.insert(item))

    def delete_item(self, item_id: int) -> bool:
        with self.mdb.lock:
            return self.mdb.wishlist_items.remove(item_id)


class MemoryAddressRepo(AddressRepo):
    def __init__(self, mdb: MemoryDatabase):
        self.mdb = mdb

    def list_for_user(self, user_id: int) -> List[AddressModel]:
        addresses = [a for a in self.mdb.addresses.all() if a.user_id == user_id]
        return sorted(addresses, key=lambda a: (not a.is_default, a.id))

    def get_address(self, address_id: int) -> AddressModel | None:
        return self.mdb.addresses.get(address_id)

    def _clear_defaults(self, user_id: int, keep_id: int | None = None):
        for address in self.mdb.addresses.all():
            if address.user_id == user_id and address.id != keep_id:
                address.is_default = False

    def create_address(self, address: AddressModel) -> AddressModel:
        with self.mdb.lock:
            if address.type is None:
                address.type = "home"
            if address.is_default is None:
                address.is_default = False
            if address.is_default:
                self._clear_defaults(address.user_id)
            return self.mdb.addresses.insert(address)

    def update_address(self, address_id: int, **fields) -> AddressModel | None:
        with self.mdb.lock:
            address = self.mdb.addresses.get(address_id)
            if not address:
                return None
            for key, value in fields.items():
                setattr(address, key, value)
            if address.is_default:
                self._clear_defaults(address.user_id, keep_id=address.id)
            return address

    def delete_address(self, address_id: int) -> bool:
        with self.mdb.lock:
            return self.mdb.addresses.remove(address_id)


class MemoryOrderRepo(OrderRepo):
    def __init__(self, mdb: MemoryDatabase):
        self.mdb = mdb

    def _join(self, order: OrderModel) -> OrderModel:
        items = sorted(
            (i for i in self.mdb.order_items.all() if i.order_id == order.id),
            key=lambda i: i.id,
        )
        for item in items:
            item.product = self.mdb.products.get(item.product_id)
        order.items = items
        return order

    def list_for_user(self, user_id: int) -> List[OrderModel]:
        orders = [o for o in self.mdb.orders.all() if o.user_id == user_id]
        orders.sort(key=lambda o: (o.created_at, o.id), reverse=True)
        return [self._join(o) for o in orders]

    def get_order(self, order_id: int) -> OrderModel | None:
        order = self.mdb.orders.get(order_id)
        return self._join(order) if order else None

    def get_by_gateway_order(self, gateway_order_id: str) -> OrderModel | None:
        order = next(
            (o for o in self.mdb.orders.all() if o.gateway_order_id == gateway_order_id),
            None,
        )
        return self._join(order) if order else None

    def create_order(self, order: OrderModel, items: Sequence[OrderItemModel]) -> OrderModel:
        with self.mdb.lock:
            # validate everything before the first write
            needed: Dict[int, int] = {}
            for item in items:
                needed[item.product_id] = needed.get(item.product_id, 0) + item.quantity
            for product_id, quantity in needed.items():
                product = self.mdb.products.get(product_id)
                available = product.stock_quantity if product else 0
                if available < quantity:
                    raise OutOfStock(product_id, quantity, available)

            self.mdb.orders.insert(order)
            inserted = []
            try:
                for item in items:
                    item.order_id = order.id
                    inserted.append(self.mdb.order_items.insert(item))
            except Exception:
                # compensate: never leave items without their order
                for item in inserted:
                    self.mdb.order_items.remove(item.id)
                self.mdb.orders.remove(order.id)
                raise

            for product_id, quantity in needed.items():
                self.mdb.products.get(product_id).stock_quantity -= quantity
            return self._join(order)

    def update_status(
        self, order_id: int, expected: str, status: str, restock: bool = False
    ) -> OrderModel | None:
        with self.mdb.lock:
            order = self.mdb.orders.get(order_id)
            if not order:
                return None
            if order.status != expected:
                raise InvalidStatusTransition(order.status, status)
            order.status = status
            if restock:
                for item in self.mdb.order_items.all():
                    product = self.mdb.products.get(item.product_id)
                    if item.order_id == order.id and product is not None:
                        product.stock_quantity += item.quantity
            return self._join(order)


class MemoryReviewRepo(ReviewRepo):
    def __init__(self, mdb: MemoryDatabase):
        self.mdb = mdb

    def _join(self, review: ReviewModel) -> ReviewModel:
        review.user = self.mdb.users.get(review.user_id)
        return review

    def list_for_product(self, product_id: int) -> List[ReviewModel]:
        reviews = [r for r in self.mdb.reviews.all() if r.product_id == product_id]
        reviews.sort(key=lambda r: (r.created_at, r.id), reverse=True)
        return [self._join(r) for r in reviews]

    def create_review(self, review: ReviewModel) -> ReviewModel:
        with self.mdb.lock:
            self.mdb.reviews.insert(review)
            ratings = [r.rating for r in self.mdb.reviews.all() if r.product_id == review.product_id]
            product = self.mdb.products.get(review.product_id)
            if product is not None:
                product.review_count = len(ratings)
                average = Decimal(sum(ratings)) / len(ratings)
                product.rating = average.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
            return self._join(review)


def build_memory_storage(mdb: MemoryDatabase) -> Storage:
    return Storage(
        users=MemoryUserRepo(mdb),
        catalog=MemoryCatalogRepo(mdb),
        carts=MemoryCartRepo(mdb),
        wishlist=MemoryWishlistRepo(mdb),
        addresses=MemoryAddressRepo(mdb),
        orders=MemoryOrderRepo(mdb),
        reviews=MemoryReviewRepo(mdb),
    )
