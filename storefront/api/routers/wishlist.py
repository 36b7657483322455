# storefront/api/routers/wishlist.py
from typing import List

from fastapi import APIRouter, Depends

from storefront.api.deps import get_context, get_storage
from storefront.domain.context import RequestContext
from storefront.domain.schemas import MessageOut, WishlistItemIn, WishlistItemOut
from storefront.repos.base import Storage
from storefront.services.wishlist_service import WishlistService

router = APIRouter(prefix="/api/wishlist", tags=["wishlist"])


def get_service(storage: Storage = Depends(get_storage)) -> WishlistService:
    return WishlistService(storage)


@router.get("/{user_id}", response_model=List[WishlistItemOut])
def list_wishlist(
    user_id: int,
    ctx: RequestContext = Depends(get_context),
    svc: WishlistService = Depends(get_service),
):
    return svc.list_items(ctx, user_id)


@router.post("", response_model=WishlistItemOut, status_code=201)
def add_to_wishlist(
    payload: WishlistItemIn,
    ctx: RequestContext = Depends(get_context),
    svc: WishlistService = Depends(get_service),
):
    return svc.add(ctx, payload.product_id)


@router.delete("/{item_id}", response_model=MessageOut)
def remove_from_wishlist(
    item_id: int,
    ctx: RequestContext = Depends(get_context),
    svc: WishlistService = Depends(get_service),
):
    svc.remove(ctx, item_id)
    return {"message": "Item removed from wishlist"}
