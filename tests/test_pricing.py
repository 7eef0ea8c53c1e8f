"""Line pricing, money rounding and checkout summary math."""

import pytest

from storefront.core.config import Settings
from storefront.models import OrderType
from storefront.services.cart.money import round_money
from storefront.services.cart.pricing import compute_line_price
from storefront.services.cart.summary import (
    build_checkout_summary,
    compute_checkout_total,
    compute_delivery_fee,
    compute_discount,
    compute_tax,
)


# =============================================================================
# MONEY
# =============================================================================

@pytest.mark.parametrize("value, expected", [
    (2.675, 2.68),
    (1.005, 1.01),
    (10.004, 10.0),
    (33.0, 33.0),
    (0.1 + 0.2, 0.3),
])
def test_round_money_is_half_up(value, expected):
    assert round_money(value) == expected


# =============================================================================
# LINE PRICING
# =============================================================================

def test_unit_price_and_line_total():
    price = compute_line_price(14.50, 2.00, 2)

    assert price.unit_price == 16.50
    assert price.line_total == 33.00


def test_rounding_happens_at_unit_price():
    # base rounds to 1.12 and unit to 2.12 before the quantity is applied
    price = compute_line_price(1.115, 1.0, 3)

    assert price.unit_price == 2.12
    assert price.line_total == 6.36


@pytest.mark.parametrize("quantity", [1, 2, 7, 20])
def test_line_total_matches_rounded_unit_price(quantity):
    price = compute_line_price(12.99, 0.50, quantity)

    assert price.unit_price == 13.49
    assert price.line_total == round_money(13.49 * quantity)


# =============================================================================
# SUMMARY
# =============================================================================

@pytest.mark.parametrize("subtotal, expected", [
    (0.0, 0.0),
    (39.99, 0.0),
    (40.00, 4.00),
    (59.99, 4.00),
    (60.00, 8.00),
    (150.00, 8.00),
])
def test_discount_tiers(settings, subtotal, expected):
    assert compute_discount(subtotal, settings) == expected


@pytest.mark.parametrize("order_type, subtotal, expected", [
    (OrderType.DELIVERY, 34.99, 3.99),
    (OrderType.DELIVERY, 35.00, 0.0),
    (OrderType.PICKUP, 10.00, 0.0),
    (OrderType.DINE_IN, 10.00, 0.0),
])
def test_delivery_fee(settings, order_type, subtotal, expected):
    assert compute_delivery_fee(order_type, subtotal, settings) == expected


def test_inclusive_tax_is_embedded_portion(settings):
    assert compute_tax(52.00, settings) == 4.07


def test_exclusive_tax_is_charged_on_top():
    settings = Settings(tax_included_in_menu_prices=False)

    assert compute_tax(52.00, settings) == 4.42


def test_checkout_total():
    assert compute_checkout_total(23.9, discount=2, tax=1.72, delivery_fee=3.5) == 27.12


def test_inclusive_summary_does_not_add_tax(settings):
    summary = build_checkout_summary(OrderType.DELIVERY, 60.00, settings)

    assert summary.discount == 8.00
    assert summary.tax == 4.07
    assert summary.delivery_fee == 0.0
    assert summary.total == 52.00
    assert summary.tax_included_in_menu_prices is True
    assert summary.currency == "USD"


def test_exclusive_summary_adds_tax():
    settings = Settings(tax_included_in_menu_prices=False)

    summary = build_checkout_summary(OrderType.DELIVERY, 60.00, settings)

    assert summary.tax == 4.42
    assert summary.total == 56.42


def test_small_delivery_order_pays_fee(settings):
    summary = build_checkout_summary(OrderType.DELIVERY, 33.00, settings)

    assert summary.discount == 0.0
    assert summary.tax == 2.59
    assert summary.delivery_fee == 3.99
    assert summary.total == 36.99


def test_pickup_never_pays_fee(settings):
    summary = build_checkout_summary(OrderType.PICKUP, 10.00, settings)

    assert summary.delivery_fee == 0.0
    assert summary.total == 10.00


def test_discount_tiers_must_be_ordered():
    with pytest.raises(ValueError):
        Settings(discount_tier_low_threshold=80, discount_tier_high_threshold=60)
