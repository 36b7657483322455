# storefront/services/catalog_service.py
from decimal import Decimal
from typing import List

from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel
from storefront.domain.errors import NotFound, ValidationError
from storefront.repos.base import FEATURED_LIMIT, SORT_KEYS, ProductFilters, Storage


class CatalogService:
    """Read side of the catalog. Inactive products are never listed or returned."""

    def __init__(self, storage: Storage):
        self.repo = storage.catalog

    def list_categories(self) -> List[CategoryModel]:
        return self.repo.list_categories()

    def get_category_by_slug(self, slug: str) -> CategoryModel:
        category = self.repo.get_category_by_slug(slug)
        if not category:
            raise NotFound("Category", slug)
        return category

    def list_products(self, filters: ProductFilters) -> List[ProductModel]:
        if filters.sort_by not in SORT_KEYS:
            raise ValidationError(f"sortBy must be one of {', '.join(SORT_KEYS)}")
        if filters.min_price is not None and filters.min_price < Decimal("0"):
            raise ValidationError("minPrice cannot be negative")
        if (
            filters.min_price is not None
            and filters.max_price is not None
            and filters.min_price > filters.max_price
        ):
            raise ValidationError("minPrice cannot exceed maxPrice")
        return self.repo.list_products(filters)

    def get_product(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product or not product.is_active:
            raise NotFound("Product", product_id)
        return product

    def get_featured_products(self) -> List[ProductModel]:
        return self.repo.featured_products(FEATURED_LIMIT)

    def products_by_category(self, category_id: int) -> List[ProductModel]:
        if not self.repo.get_category(category_id):
            raise NotFound("Category", category_id)
        return self.repo.list_products(ProductFilters(category_id=category_id))

    def search_products(self, query: str | None) -> List[ProductModel]:
        query = (query or "").strip()
        if not query:
            raise ValidationError("Search query required")
        return self.repo.list_products(ProductFilters(search=query))
