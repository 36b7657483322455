"""Tests for order totals."""

from decimal import Decimal

import pytest

from storefront.domain.pricing import compute_totals, line_subtotal, shipping_cost, tax_for


def test_free_shipping_at_threshold():
    totals = compute_totals([(Decimal("1200"), 2)])

    assert totals.subtotal == Decimal("2400")
    assert totals.shipping_cost == Decimal("0")
    assert totals.tax == Decimal("120")
    assert totals.total == Decimal("2520")
    assert totals.amount_minor_units == 252000


def test_flat_shipping_below_threshold():
    totals = compute_totals([(Decimal("500"), 1)])

    assert totals.shipping_cost == Decimal("99")
    assert totals.tax == Decimal("25")
    assert totals.total == Decimal("624")
    assert totals.amount_minor_units == 62400


@pytest.mark.parametrize(
    "subtotal,expected",
    [
        ("998.99", "99"),
        ("999", "0"),
        ("999.01", "0"),
    ],
)
def test_shipping_boundary(subtotal, expected):
    assert shipping_cost(Decimal(subtotal)) == Decimal(expected)


def test_tax_rounds_half_up_to_whole_units():
    # 5% of 10 = 0.5, of 30 = 1.5, of 29 = 1.45
    assert tax_for(Decimal("10")) == Decimal("1")
    assert tax_for(Decimal("30")) == Decimal("2")
    assert tax_for(Decimal("29")) == Decimal("1")


def test_subtotal_over_several_lines():
    lines = [(Decimal("12999"), 1), (Decimal("2999"), 3)]
    assert line_subtotal(lines) == Decimal("21996")


def test_empty_lines():
    totals = compute_totals([])
    assert totals.subtotal == Decimal("0")
    assert totals.shipping_cost == Decimal("99")


def test_accepts_float_prices():
    totals = compute_totals([(19.99, 2)])
    assert totals.subtotal == Decimal("39.98")
