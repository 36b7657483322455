# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends

from storefront.api.deps import get_context, get_order_service, require_staff
from storefront.domain.context import RequestContext
from storefront.domain.schemas import OrderCreateIn, OrderDetailOut, OrderOut, OrderStatusIn
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("/detail/{order_id}", response_model=OrderDetailOut)
def get_order(
    order_id: int,
    ctx: RequestContext = Depends(get_context),
    svc: OrderService = Depends(get_order_service),
):
    return svc.get_order(ctx, order_id)


@router.get("/{user_id}", response_model=List[OrderOut])
def list_orders(
    user_id: int,
    ctx: RequestContext = Depends(get_context),
    svc: OrderService = Depends(get_order_service),
):
    return svc.list_orders(ctx, user_id)


@router.post("", response_model=OrderDetailOut, status_code=201)
def create_order(
    payload: OrderCreateIn,
    ctx: RequestContext = Depends(get_context),
    svc: OrderService = Depends(get_order_service),
):
    """
    Cash-on-delivery order from the caller's current cart.
    Prices are taken from the catalog, never from the request.
    """
    address = payload.shipping_address.model_dump() if payload.shipping_address else None
    return svc.place_cod_order(ctx, payload.address_id, address)


@router.post("/{order_id}/cancel", response_model=OrderDetailOut)
def cancel_order(
    order_id: int,
    ctx: RequestContext = Depends(get_context),
    svc: OrderService = Depends(get_order_service),
):
    return svc.cancel_order(ctx, order_id)


@router.patch("/{order_id}/status", response_model=OrderDetailOut, dependencies=[Depends(require_staff)])
def update_status(
    order_id: int,
    payload: OrderStatusIn,
    svc: OrderService = Depends(get_order_service),
):
    return svc.update_status(order_id, payload.status)
