# storefront/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

# money travels as a JSON number, stays Decimal in Python
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python, ids rendered as strings."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        coerce_numbers_to_str=True,
    )


# ---------- users ----------

class RegisterIn(ApiModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    phone: str | None = Field(None, max_length=20)


class LoginIn(ApiModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserOut(ApiModel):
    id: str
    username: str
    email: str
    phone: str | None = None
    is_verified: bool = False
    created_at: datetime


class LoginOut(UserOut):
    access_token: str
    token_type: str = "bearer"


# ---------- catalog ----------

class CategoryOut(ApiModel):
    id: str
    name: str
    slug: str
    description: str | None = None
    image: str | None = None


class ProductOut(ApiModel):
    id: str
    name: str
    description: str
    price: Money
    original_price: Money | None = None
    category_id: str | None = None
    fabric: str
    color: str
    occasion: str | None = None
    brand: str | None = None
    images: List[str] = []
    stock_quantity: int
    rating: Money
    review_count: int
    is_active: bool
    created_at: datetime


# ---------- cart / wishlist ----------

class CartItemIn(ApiModel):
    product_id: int = Field(..., gt=0)
    quantity: int = Field(1, ge=1, le=100)


class CartQuantityIn(ApiModel):
    # zero or negative removes the line
    quantity: int = Field(..., le=100)


class CartLineOut(ApiModel):
    id: str
    user_id: str
    product_id: str
    quantity: int
    product: ProductOut
    line_total: Money


class CartOut(ApiModel):
    user_id: str
    items: List[CartLineOut]
    total: Money
    count: int


class WishlistItemIn(ApiModel):
    product_id: int = Field(..., gt=0)


class WishlistItemOut(ApiModel):
    id: str
    user_id: str
    product_id: str
    created_at: datetime
    product: ProductOut | None = None


# ---------- addresses ----------

class ShippingAddress(ApiModel):
    name: str = Field(..., min_length=1, max_length=120)
    phone: str = Field(..., min_length=10, max_length=15, pattern=r"^\+?[0-9 ]+$")
    address_line1: str = Field(..., min_length=1, max_length=255)
    address_line2: str | None = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    pincode: str = Field(..., pattern=r"^[0-9]{6}$")


class AddressIn(ShippingAddress):
    type: Literal["home", "office"] = "home"
    is_default: bool = False


class AddressUpdate(ApiModel):
    name: str | None = Field(None, min_length=1, max_length=120)
    phone: str | None = Field(None, min_length=10, max_length=15, pattern=r"^\+?[0-9 ]+$")
    address_line1: str | None = Field(None, min_length=1, max_length=255)
    address_line2: str | None = Field(None, max_length=255)
    city: str | None = Field(None, min_length=1, max_length=100)
    state: str | None = Field(None, min_length=1, max_length=100)
    pincode: str | None = Field(None, pattern=r"^[0-9]{6}$")
    type: Literal["home", "office"] | None = None
    is_default: bool | None = None

    # omitted keeps the stored value; null would clear a required column
    @field_validator(
        "name", "phone", "address_line1", "city", "state", "pincode", "type", "is_default",
        mode="before",
    )
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class AddressOut(ShippingAddress):
    id: str
    user_id: str
    type: str
    is_default: bool


# ---------- checkout / payment ----------

class CheckoutIn(ApiModel):
    """Either a saved address id or a full shipping address."""

    address_id: int | None = Field(None, gt=0)
    shipping_address: ShippingAddress | None = None


class OrderCreateIn(CheckoutIn):
    payment_method: Literal["cod"] = "cod"


class TotalsOut(ApiModel):
    subtotal: Money
    shipping_cost: Money
    tax: Money
    total: Money
    item_count: int


class PaymentOrderIn(ApiModel):
    amount: int = Field(..., gt=0, description="Amount in minor units (paise)")
    currency: str = Field("INR", min_length=3, max_length=3)


class OnlineCheckoutOut(ApiModel):
    gateway_order_id: str
    amount: int
    currency: str
    key_id: str
    totals: TotalsOut


class PaymentVerifyIn(CheckoutIn):
    razorpay_order_id: str = Field(..., alias="razorpay_order_id", min_length=1)
    razorpay_payment_id: str = Field(..., alias="razorpay_payment_id", min_length=1)
    razorpay_signature: str = Field(..., alias="razorpay_signature", min_length=1)


class PaymentVerifyOut(ApiModel):
    success: bool
    order_id: str | None = None
    message: str


# ---------- orders ----------

class OrderItemOut(ApiModel):
    id: str
    order_id: str
    product_id: str
    quantity: int
    price: Money
    product: ProductOut | None = None


class OrderOut(ApiModel):
    id: str
    order_number: str
    user_id: str
    status: str
    subtotal: Money
    shipping_cost: Money
    tax: Money
    total: Money
    payment_method: str
    payment_status: str
    shipping_address: ShippingAddress
    estimated_delivery: datetime | None = None
    created_at: datetime


class OrderDetailOut(OrderOut):
    items: List[OrderItemOut]


class OrderStatusIn(ApiModel):
    status: str = Field(..., min_length=1)


# ---------- reviews ----------

class ReviewIn(ApiModel):
    product_id: int = Field(..., gt=0)
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=2000)


class ReviewOut(ApiModel):
    id: str
    user_id: str
    product_id: str
    rating: int
    comment: str | None = None
    username: str
    created_at: datetime


class MessageOut(ApiModel):
    message: str
