"""
Checkout Summary

Pure functions turning an order type and subtotal into the numbers shown at
checkout: tiered discount, tax (inclusive or exclusive), delivery fee, total.
"""

from typing import Optional

from storefront.core.config import Settings, get_settings
from storefront.models import OrderType
from storefront.schemas import CheckoutSummary
from storefront.services.cart.money import round_money


def compute_discount(subtotal: float, settings: Optional[Settings] = None) -> float:
    settings = settings or get_settings()
    if subtotal >= settings.discount_tier_high_threshold:
        return settings.discount_tier_high_amount
    if subtotal >= settings.discount_tier_low_threshold:
        return settings.discount_tier_low_amount
    return 0.0


def compute_delivery_fee(order_type: OrderType, subtotal: float, settings: Optional[Settings] = None) -> float:
    settings = settings or get_settings()
    if order_type != OrderType.DELIVERY:
        return 0.0
    if subtotal >= settings.delivery_free_threshold:
        return 0.0
    return settings.delivery_base_fee


def compute_tax(taxable_amount: float, settings: Optional[Settings] = None) -> float:
    """
    Tax on the taxable amount.

    With tax-inclusive menu prices this is the portion already embedded in
    the price; otherwise it is charged on top.
    """
    settings = settings or get_settings()
    if settings.tax_included_in_menu_prices:
        return round_money(taxable_amount - taxable_amount / (1 + settings.tax_rate))
    return round_money(taxable_amount * settings.tax_rate)


def compute_checkout_total(
    subtotal: float,
    discount: float = 0.0,
    tax: float = 0.0,
    delivery_fee: float = 0.0,
) -> float:
    """
    >>> compute_checkout_total(23.9, discount=2, tax=1.72, delivery_fee=3.5)
    27.12
    """
    return round_money(subtotal - discount + tax + delivery_fee)


def build_checkout_summary(
    order_type: OrderType,
    subtotal: float,
    settings: Optional[Settings] = None,
) -> CheckoutSummary:
    """
    Build the checkout summary for a cart subtotal.

    Args:
        order_type: Delivery orders may carry a delivery fee
        subtotal: Sum of the priced line totals

    Returns:
        CheckoutSummary: Amounts rounded to cents plus the tax configuration
    """
    settings = settings or get_settings()

    discount = compute_discount(subtotal, settings)
    taxable_amount = max(0.0, subtotal - discount)
    tax = compute_tax(taxable_amount, settings)
    delivery_fee = compute_delivery_fee(order_type, subtotal, settings)
    tax_applied_to_total = 0.0 if settings.tax_included_in_menu_prices else tax

    return CheckoutSummary(
        subtotal=round_money(subtotal),
        discount=round_money(discount),
        tax=tax,
        delivery_fee=round_money(delivery_fee),
        total=compute_checkout_total(
            subtotal,
            discount=discount,
            tax=tax_applied_to_total,
            delivery_fee=delivery_fee,
        ),
        tax_rate=settings.tax_rate,
        tax_included_in_menu_prices=settings.tax_included_in_menu_prices,
        currency=settings.currency,
    )
