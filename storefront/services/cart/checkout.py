"""
Checkout Orchestration

Turns a cart into a checkout preparation:

    EMPTY_CART -> reject CART_EMPTY
    STRICT_REVALIDATION -> MINIMUM_CHECK -> ADDRESS_RESOLUTION -> SUMMARY

The orchestrator never mutates the cart. Persisting the preview choices and
placing the order are the store's job, so a failure at any step leaves the
cart exactly as it was.
"""

import asyncio
import logging
from typing import Optional

from storefront.core.config import Settings, get_settings
from storefront.core.errors import (
    CartValidationError,
    CART_EMPTY,
    DELIVERY_ADDRESS_REQUIRED,
    MINIMUM_ORDER_NOT_MET,
)
from storefront.models import Cart, OrderType
from storefront.schemas import CheckoutPreparation, CheckoutRequest, DeliveryAddress
from storefront.services.cart.money import round_money
from storefront.services.cart.pricing import assess_line, require_valid
from storefront.services.cart.summary import build_checkout_summary
from storefront.services.catalog.base import BaseCatalogService
from storefront.services.identity import SessionUser

logger = logging.getLogger(__name__)


class CheckoutOrchestrator:
    """
    Validates and prices a cart for checkout.

    Attributes:
        catalog: Catalog every line is re-priced against
        settings: Pricing rules and order minimums
    """

    def __init__(self, catalog: BaseCatalogService, settings: Optional[Settings] = None):
        self.catalog = catalog
        self.settings = settings or get_settings()

    def minimum_order_total(self, order_type: OrderType) -> float:
        return self.settings.minimum_order_totals.get(order_type.value, 0.0)

    def resolve_delivery_address(
        self,
        order_type: OrderType,
        requested: Optional[DeliveryAddress],
        user: Optional[SessionUser],
        draft: Optional[DeliveryAddress],
    ) -> Optional[DeliveryAddress]:
        """
        Pick the delivery address for an order.

        Delivery orders use the requested address, then the user's saved
        address, then the cart's draft. Other order types carry no address.

        Raises:
            CartValidationError: ``DELIVERY_ADDRESS_REQUIRED`` when a delivery
                order has no usable address
        """
        if order_type != OrderType.DELIVERY:
            return None

        address = requested
        if address is None and user is not None and user.address_line1 and user.address_city:
            address = DeliveryAddress(line1=user.address_line1.strip(), city=user.address_city.strip())
        if address is None:
            address = draft

        if address is None or not address.line1.strip() or not address.city.strip():
            raise CartValidationError(
                "Delivery address line1 and city are required for delivery orders.",
                400,
                DELIVERY_ADDRESS_REQUIRED,
            )
        return address

    async def prepare(
        self,
        cart: Cart,
        request: CheckoutRequest,
        user: Optional[SessionUser] = None,
    ) -> CheckoutPreparation:
        """
        Run every checkout step against the cart's current lines.

        Raises:
            CartValidationError: ``CART_EMPTY``, any strict line error,
                ``MINIMUM_ORDER_NOT_MET`` or ``DELIVERY_ADDRESS_REQUIRED``
        """
        lines = list(cart.lines)
        if not lines:
            raise CartValidationError("Cart is empty.", 409, CART_EMPTY)

        order_type = request.order_type or cart.order_type

        outcomes = await asyncio.gather(*(assess_line(line, self.catalog) for line in lines))
        items = [require_valid(outcome) for outcome in outcomes]
        subtotal = round_money(sum(item.line_total for item in items))

        minimum = self.minimum_order_total(order_type)
        if subtotal < minimum:
            label = order_type.value.replace("_", " ").lower()
            logger.info(
                f"Checkout rejected for {cart.owner_key}: subtotal {subtotal:.2f} "
                f"below {label} minimum {minimum:.2f}"
            )
            raise CartValidationError(
                f"Minimum order total for {label} is ${minimum:.2f}.",
                409,
                MINIMUM_ORDER_NOT_MET,
            )

        delivery_address = self.resolve_delivery_address(
            order_type, request.delivery_address, user, cart.delivery_address
        )

        return CheckoutPreparation(
            order_type=order_type,
            payment_method=request.payment_method,
            minimum_order_total=minimum,
            delivery_address=delivery_address,
            items=items,
            summary=build_checkout_summary(order_type, subtotal, self.settings),
        )
