from decimal import Decimal

from storefront.services.pricing import compute_totals, shipping_for


def test_free_shipping_above_threshold():
    totals = compute_totals([(Decimal("30.00"), 2)])
    assert totals.subtotal == Decimal("60.00")
    assert totals.shipping == Decimal("0.00")
    assert totals.total == Decimal("60.00")


def test_flat_shipping_below_threshold():
    totals = compute_totals([(Decimal("10.00"), 1)])
    assert totals.subtotal == Decimal("10.00")
    assert totals.shipping == Decimal("5.99")
    assert totals.total == Decimal("15.99")


def test_exactly_fifty_still_pays_shipping():
    assert shipping_for(Decimal("50.00")) == Decimal("5.99")
    assert shipping_for(Decimal("50.01")) == Decimal("0.00")


def test_amount_in_cents_rounds_half_up():
    totals = compute_totals([(Decimal("19.99"), 1), (Decimal("24.99"), 1)])
    assert totals.total == Decimal("50.97")
    assert totals.amount_in_cents == 5097


def test_empty_lines_give_zero_subtotal():
    totals = compute_totals([])
    assert totals.subtotal == Decimal("0.00")
    assert totals.shipping == Decimal("5.99")
