# storefront/services/review_service.py
from typing import Any, Dict, List

from storefront.data.models.review import ReviewModel
from storefront.domain.context import RequestContext
from storefront.domain.errors import NotFound, ValidationError
from storefront.repos.base import Storage
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def review_view(review: ReviewModel) -> Dict[str, Any]:
    return {
        "id": review.id,
        "user_id": review.user_id,
        "product_id": review.product_id,
        "rating": review.rating,
        "comment": review.comment,
        "username": review.user.username if review.user else "Anonymous",
        "created_at": review.created_at,
    }


class ReviewService:
    def __init__(self, storage: Storage):
        self.repo = storage.reviews
        self.catalog = storage.catalog

    def list_for_product(self, product_id: int) -> List[Dict[str, Any]]:
        return [review_view(r) for r in self.repo.list_for_product(product_id)]

    def create_review(self, ctx: RequestContext, product_id: int, rating: int, comment: str | None = None) -> Dict[str, Any]:
        user_id = ctx.require_user()
        if not 1 <= rating <= 5:
            raise ValidationError("Rating must be between 1 and 5")
        if not self.catalog.get_product(product_id):
            raise NotFound("Product", product_id)

        review = self.repo.create_review(
            ReviewModel(user_id=user_id, product_id=product_id, rating=rating, comment=comment)
        )
        logger.info(f"Review {review.id} ({rating}/5) for product {product_id} by user {user_id}")
        return review_view(review)
