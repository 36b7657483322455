# storefront/domain/pricing.py
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple

FREE_SHIPPING_THRESHOLD = Decimal("999")
FLAT_SHIPPING_COST = Decimal("99")
TAX_RATE = Decimal("0.05")


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    shipping_cost: Decimal
    tax: Decimal
    total: Decimal

    @property
    def amount_minor_units(self) -> int:
        # paise
        return int((self.total * 100).to_integral_value(rounding=ROUND_HALF_UP))


def _money(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def line_subtotal(lines: Iterable[Tuple[object, int]]) -> Decimal:
    """Sum of price x quantity over (price, quantity) pairs."""
    return sum((_money(price) * qty for price, qty in lines), Decimal("0"))


def shipping_cost(subtotal) -> Decimal:
    if _money(subtotal) >= FREE_SHIPPING_THRESHOLD:
        return Decimal("0")
    return FLAT_SHIPPING_COST


def tax_for(subtotal) -> Decimal:
    # whole units, half rounds up
    return (_money(subtotal) * TAX_RATE).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def compute_totals(lines: Iterable[Tuple[object, int]]) -> OrderTotals:
    subtotal = line_subtotal(lines)
    shipping = shipping_cost(subtotal)
    tax = tax_for(subtotal)
    return OrderTotals(
        subtotal=subtotal,
        shipping_cost=shipping,
        tax=tax,
        total=subtotal + shipping + tax,
    )
