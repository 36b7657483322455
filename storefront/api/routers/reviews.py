# storefront/api/routers/reviews.py
from typing import List

from fastapi import APIRouter, Depends

from storefront.api.deps import get_context, get_storage
from storefront.domain.context import RequestContext
from storefront.domain.schemas import ReviewIn, ReviewOut
from storefront.repos.base import Storage
from storefront.services.review_service import ReviewService

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


def get_service(storage: Storage = Depends(get_storage)) -> ReviewService:
    return ReviewService(storage)


@router.get("/{product_id}", response_model=List[ReviewOut])
def list_reviews(product_id: int, svc: ReviewService = Depends(get_service)):
    return svc.list_for_product(product_id)


@router.post("", response_model=ReviewOut, status_code=201)
def create_review(
    payload: ReviewIn,
    ctx: RequestContext = Depends(get_context),
    svc: ReviewService = Depends(get_service),
):
    return svc.create_review(ctx, payload.product_id, payload.rating, payload.comment)
