# storefront/repos/catalog_repo.py
from typing import List

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel
from storefront.repos.base import CatalogRepo, FEATURED_LIMIT, ProductFilters

_SORTS = {
    "newest": (ProductModel.created_at.desc(), ProductModel.id.desc()),
    "price-low": (ProductModel.price.asc(), ProductModel.id.asc()),
    "price-high": (ProductModel.price.desc(), ProductModel.id.asc()),
    "rating": (ProductModel.rating.desc(), ProductModel.id.asc()),
    "name": (ProductModel.name.asc(), ProductModel.id.asc()),
}


def _contains(column, text: str):
    return column.icontains(text, autoescape=True)


class SqlCatalogRepo(CatalogRepo):
    def __init__(self, db: Session):
        self.db = db

    # categories
    def list_categories(self) -> List[CategoryModel]:
        return list(self.db.execute(select(CategoryModel).order_by(CategoryModel.id)).scalars())

    def get_category(self, category_id: int) -> CategoryModel | None:
        return self.db.get(CategoryModel, category_id)

    def get_category_by_slug(self, slug: str) -> CategoryModel | None:
        return self.db.execute(
            select(CategoryModel).where(CategoryModel.slug == slug)
        ).scalar_one_or_none()

    def create_category(self, category: CategoryModel) -> CategoryModel:
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    def count_categories(self) -> int:
        return self.db.execute(select(func.count(CategoryModel.id))).scalar_one()

    # products
    def list_products(self, filters: ProductFilters) -> List[ProductModel]:
        stmt = select(ProductModel).where(ProductModel.is_active.is_(True))

        if filters.category_id is not None:
            stmt = stmt.where(ProductModel.category_id == filters.category_id)
        if filters.min_price is not None:
            stmt = stmt.where(ProductModel.price >= filters.min_price)
        if filters.max_price is not None:
            stmt = stmt.where(ProductModel.price <= filters.max_price)
        if filters.fabric:
            stmt = stmt.where(_contains(ProductModel.fabric, filters.fabric))
        if filters.color:
            stmt = stmt.where(_contains(ProductModel.color, filters.color))
        if filters.search:
            stmt = stmt.where(
                or_(
                    _contains(ProductModel.name, filters.search),
                    _contains(ProductModel.description, filters.search),
                )
            )
        if filters.in_stock_only:
            stmt = stmt.where(ProductModel.stock_quantity > 0)

        stmt = stmt.order_by(*_SORTS.get(filters.sort_by, _SORTS["newest"]))
        return list(self.db.execute(stmt).scalars())

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def featured_products(self, limit: int = FEATURED_LIMIT) -> List[ProductModel]:
        stmt = (
            select(ProductModel)
            .where(ProductModel.is_active.is_(True))
            .order_by(ProductModel.id)
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars())

    def create_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def update_product(self, product_id: int, **fields) -> ProductModel | None:
        product = self.get_product(product_id)
        if not product:
            return None
        for key, value in fields.items():
            setattr(product, key, value)
        self.db.commit()
        self.db.refresh(product)
        return product
