# storefront/api/routers/payment.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from storefront.api.deps import get_context, get_order_service
from storefront.domain.context import RequestContext
from storefront.domain.errors import PaymentVerificationFailed
from storefront.domain.schemas import (
    CheckoutIn,
    OnlineCheckoutOut,
    PaymentOrderIn,
    PaymentVerifyIn,
    PaymentVerifyOut,
    TotalsOut,
)
from storefront.services.order_service import OrderService

checkout_router = APIRouter(prefix="/api/checkout", tags=["checkout"])
router = APIRouter(prefix="/api/payment", tags=["payment"])


@checkout_router.post("/summary", response_model=TotalsOut)
def checkout_summary(
    ctx: RequestContext = Depends(get_context),
    svc: OrderService = Depends(get_order_service),
):
    return svc.checkout_summary(ctx)


@router.post("/create-order")
def create_payment_order(
    payload: PaymentOrderIn,
    ctx: RequestContext = Depends(get_context),
    svc: OrderService = Depends(get_order_service),
):
    return svc.create_payment_order(ctx, payload.amount, payload.currency)


@router.post("/checkout", response_model=OnlineCheckoutOut)
def start_checkout(
    payload: CheckoutIn,
    ctx: RequestContext = Depends(get_context),
    svc: OrderService = Depends(get_order_service),
):
    """Opens a gateway order sized from the server-side cart."""
    address = payload.shipping_address.model_dump() if payload.shipping_address else None
    return svc.initiate_online_checkout(ctx, payload.address_id, address)


@router.post("/verify", response_model=PaymentVerifyOut)
def verify_payment(
    payload: PaymentVerifyIn,
    ctx: RequestContext = Depends(get_context),
    svc: OrderService = Depends(get_order_service),
):
    address = payload.shipping_address.model_dump() if payload.shipping_address else None
    try:
        order = svc.complete_online_checkout(
            ctx,
            payload.razorpay_order_id,
            payload.razorpay_payment_id,
            payload.razorpay_signature,
            payload.address_id,
            address,
        )
    except PaymentVerificationFailed as e:
        body = PaymentVerifyOut(success=False, message=e.message)
        return JSONResponse(status_code=400, content=body.model_dump(mode="json", by_alias=True))
    return PaymentVerifyOut(success=True, order_id=order.id, message="Payment verified successfully")
