# storefront/api/routers/catalog.py
from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends, Query

from storefront.api.deps import get_storage
from storefront.domain.schemas import CategoryOut, ProductOut
from storefront.repos.base import ProductFilters, Storage
from storefront.services.catalog_service import CatalogService

categories_router = APIRouter(prefix="/api/categories", tags=["catalog"])
products_router = APIRouter(prefix="/api/products", tags=["catalog"])
search_router = APIRouter(prefix="/api/search", tags=["catalog"])


def get_service(storage: Storage = Depends(get_storage)) -> CatalogService:
    return CatalogService(storage)


@categories_router.get("", response_model=List[CategoryOut])
def list_categories(svc: CatalogService = Depends(get_service)):
    return svc.list_categories()


@categories_router.get("/{slug}", response_model=CategoryOut)
def get_category(slug: str, svc: CatalogService = Depends(get_service)):
    return svc.get_category_by_slug(slug)


@products_router.get("", response_model=List[ProductOut])
def list_products(
    category_id: int | None = Query(None, alias="categoryId"),
    min_price: Decimal | None = Query(None, alias="minPrice"),
    max_price: Decimal | None = Query(None, alias="maxPrice"),
    fabric: str | None = Query(None),
    color: str | None = Query(None),
    search: str | None = Query(None),
    in_stock_only: bool = Query(False, alias="inStockOnly"),
    sort_by: str = Query("newest", alias="sortBy"),
    svc: CatalogService = Depends(get_service),
):
    filters = ProductFilters(
        category_id=category_id,
        min_price=min_price,
        max_price=max_price,
        fabric=fabric,
        color=color,
        search=search,
        in_stock_only=in_stock_only,
        sort_by=sort_by,
    )
    return svc.list_products(filters)


# registered before /{product_id} so "featured" is not parsed as an id
@products_router.get("/featured", response_model=List[ProductOut])
def featured_products(svc: CatalogService = Depends(get_service)):
    return svc.get_featured_products()


@products_router.get("/category/{category_id}", response_model=List[ProductOut])
def products_by_category(category_id: int, svc: CatalogService = Depends(get_service)):
    return svc.products_by_category(category_id)


@products_router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, svc: CatalogService = Depends(get_service)):
    return svc.get_product(product_id)


@search_router.get("", response_model=List[ProductOut])
def search_products(q: str | None = Query(None), svc: CatalogService = Depends(get_service)):
    return svc.search_products(q)
