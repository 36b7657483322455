from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Numeric, ForeignKey, JSON, CheckConstraint

from storefront.data.database import Base
from storefront.data.models._common import utcnow


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    original_price = Column(Numeric(10, 2), nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)

    fabric = Column(String(100), nullable=False, default="")
    color = Column(String(50), nullable=False, default="")
    occasion = Column(String(200), nullable=True)
    brand = Column(String(100), nullable=True)
    images = Column(JSON, nullable=False, default=list)

    stock_quantity = Column(Integer, nullable=False, default=0)
    rating = Column(Numeric(2, 1), nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (CheckConstraint("stock_quantity >= 0", name="ck_product_stock_non_negative"),)
