# storefront/repos/review_repo.py
from decimal import Decimal, ROUND_HALF_UP
from typing import List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.data.models.review import ReviewModel
from storefront.repos.base import ReviewRepo


class SqlReviewRepo(ReviewRepo):
    def __init__(self, db: Session):
        self.db = db

    def list_for_product(self, product_id: int) -> List[ReviewModel]:
        stmt = (
            select(ReviewModel)
            .where(ReviewModel.product_id == product_id)
            .order_by(ReviewModel.created_at.desc(), ReviewModel.id.desc())
        )
        return list(self.db.execute(stmt).unique().scalars())

    def create_review(self, review: ReviewModel) -> ReviewModel:
        self.db.add(review)
        self.db.flush()

        count, average = self.db.execute(
            select(func.count(ReviewModel.id), func.avg(ReviewModel.rating)).where(
                ReviewModel.product_id == review.product_id
            )
        ).one()
        product = self.db.get(ProductModel, review.product_id)
        if product is not None:
            product.review_count = count
            product.rating = Decimal(str(average or 0)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)

        self.db.commit()
        self.db.refresh(review)
        return review
