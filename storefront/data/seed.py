# storefront/data/seed.py
from decimal import Decimal

from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel
from storefront.repos.base import Storage
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CATEGORIES = [
    {
        "name": "Silk Sarees",
        "slug": "silk",
        "description": "Luxurious silk sarees for special occasions",
        "image": "https://images.unsplash.com/photo-1610030469983-98e550d6193c?w=400",
    },
    {
        "name": "Cotton Sarees",
        "slug": "cotton",
        "description": "Comfortable cotton sarees for daily wear",
        "image": "https://images.unsplash.com/photo-1583391733956-6c78276477e2?w=400",
    },
    {
        "name": "Banarasi Sarees",
        "slug": "banarasi",
        "description": "Traditional Banarasi sarees with intricate designs",
        "image": "https://images.unsplash.com/photo-1594736797933-d0401ba2fe65?w=400",
    },
    {
        "name": "Designer Sarees",
        "slug": "designer",
        "description": "Contemporary designer sarees",
        "image": "https://images.unsplash.com/photo-1583391733982-5c7b8b5e2e1a?w=400",
    },
]

# category given by slug
PRODUCTS = [
    {
        "category": "silk",
        "name": "Royal Blue Silk Saree",
        "description": "Elegant royal blue silk saree with golden border",
        "price": Decimal("12999"),
        "original_price": Decimal("15999"),
        "fabric": "Pure Silk",
        "color": "Royal Blue",
        "occasion": "Wedding",
        "brand": "Heritage",
        "images": [
            "https://images.unsplash.com/photo-1610030469983-98e550d6193c?w=800",
            "https://images.unsplash.com/photo-1594736797933-d0401ba2fe65?w=800",
        ],
        "stock_quantity": 5,
        "rating": Decimal("4.8"),
        "review_count": 124,
    },
    {
        "category": "cotton",
        "name": "Traditional Red Cotton Saree",
        "description": "Classic red cotton saree perfect for festivals",
        "price": Decimal("2999"),
        "original_price": Decimal("3999"),
        "fabric": "Cotton",
        "color": "Red",
        "occasion": "Festival",
        "brand": "Traditional",
        "images": [
            "https://images.unsplash.com/photo-1583391733956-6c78276477e2?w=800",
            "https://images.unsplash.com/photo-1610030469983-98e550d6193c?w=800",
        ],
        "stock_quantity": 12,
        "rating": Decimal("4.5"),
        "review_count": 89,
    },
    {
        "category": "banarasi",
        "name": "Golden Banarasi Saree",
        "description": "Luxurious golden Banarasi saree with intricate zari work",
        "price": Decimal("18999"),
        "original_price": Decimal("22999"),
        "fabric": "Banarasi Silk",
        "color": "Golden",
        "occasion": "Wedding",
        "brand": "Banarasi Heritage",
        "images": [
            "https://images.unsplash.com/photo-1594736797933-d0401ba2fe65?w=800",
            "https://images.unsplash.com/photo-1583391733982-5c7b8b5e2e1a?w=800",
        ],
        "stock_quantity": 3,
        "rating": Decimal("4.9"),
        "review_count": 156,
    },
]


def seed(storage: Storage) -> bool:
    # only seed if empty
    if storage.catalog.count_categories():
        return False

    by_slug = {}
    for data in CATEGORIES:
        category = storage.catalog.create_category(CategoryModel(**data))
        by_slug[category.slug] = category.id

    for data in PRODUCTS:
        fields = dict(data)
        fields["category_id"] = by_slug[fields.pop("category")]
        storage.catalog.create_product(ProductModel(is_active=True, **fields))

    logger.info(f"Seeded catalog: {len(CATEGORIES)} categories, {len(PRODUCTS)} products")
    return True
