# storefront/api/routers/cart.py
from fastapi import APIRouter, Depends

from storefront.api.deps import get_context, get_storage
from storefront.domain.context import RequestContext
from storefront.domain.schemas import CartItemIn, CartOut, CartQuantityIn, MessageOut
from storefront.repos.base import Storage
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/api/cart", tags=["cart"])


def get_service(storage: Storage = Depends(get_storage)) -> CartService:
    return CartService(storage)


@router.get("/{user_id}", response_model=CartOut)
def get_cart(
    user_id: int,
    ctx: RequestContext = Depends(get_context),
    svc: CartService = Depends(get_service),
):
    return svc.get_cart(ctx, user_id)


@router.post("", response_model=CartOut, status_code=201)
def add_to_cart(
    payload: CartItemIn,
    ctx: RequestContext = Depends(get_context),
    svc: CartService = Depends(get_service),
):
    """Adds the product or increases the quantity of its existing line; returns the whole cart."""
    item = svc.add_to_cart(ctx, payload.product_id, payload.quantity)
    return svc.get_cart(ctx, item.user_id)


@router.patch("/{item_id}", response_model=CartOut)
def update_quantity(
    item_id: int,
    payload: CartQuantityIn,
    ctx: RequestContext = Depends(get_context),
    svc: CartService = Depends(get_service),
):
    svc.update_quantity(ctx, item_id, payload.quantity)
    return svc.get_cart(ctx, ctx.require_user())


@router.delete("/clear/{user_id}", response_model=MessageOut)
def clear_cart(
    user_id: int,
    ctx: RequestContext = Depends(get_context),
    svc: CartService = Depends(get_service),
):
    svc.clear_cart(ctx, user_id)
    return {"message": "Cart cleared"}


@router.delete("/{item_id}", response_model=MessageOut)
def remove_from_cart(
    item_id: int,
    ctx: RequestContext = Depends(get_context),
    svc: CartService = Depends(get_service),
):
    svc.remove_from_cart(ctx, item_id)
    return {"message": "Item removed from cart"}
