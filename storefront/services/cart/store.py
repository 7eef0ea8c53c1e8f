"""
Cart Store

Owns per-owner cart state and exposes every cart and checkout operation.

Write discipline:
    1. Await every catalog lookup first
    2. Build the new line/cart state completely
    3. Apply it to the cart in one synchronous step and touch ``updated_at``

A validation failure therefore never leaves a half-updated cart, and no
await happens while a cart is between two states.
"""

import asyncio
import logging
from typing import Optional

from storefront.core.config import Settings, get_settings
from storefront.core.errors import (
    CartValidationError,
    CART_ITEM_NOT_FOUND,
    INVALID_QUANTITY,
    ORDER_NOT_FOUND,
)
from storefront.models import Cart, CartLine
from storefront.schemas import (
    CartItemCreate,
    CartItemUpdate,
    CartPatch,
    CartSnapshot,
    CheckoutPreparation,
    CheckoutRequest,
    Order,
)
from storefront.services.cart.checkout import CheckoutOrchestrator
from storefront.services.cart.clock import MonotonicClock
from storefront.services.cart.money import round_money
from storefront.services.cart.pricing import (
    assess_line,
    compute_line_price,
    display_view,
    resolve_item,
)
from storefront.services.cart.repository import BaseCartRepository, InMemoryCartRepository
from storefront.services.cart.validation import validate_selection_strict
from storefront.services.catalog.base import BaseCatalogService
from storefront.services.identity import ROLE_ADMIN, SessionUser

logger = logging.getLogger(__name__)


class CartStore:
    """
    Cart and checkout operations keyed by owner key.

    Attributes:
        catalog: Read-only menu lookups, queried fresh on every call
        repository: Cart and order storage
        clock: Timestamp source for ``created_at`` / ``updated_at``
        settings: Pricing rules and limits

    Example:
        >>> store = CartStore(catalog=get_catalog_service())
        >>> snapshot = await store.add_item("guest:abc", CartItemCreate(
        ...     item_id="item-margherita", quantity=2,
        ...     selected_option_ids=["opt-margherita-large"]))
        >>> snapshot.subtotal
        33.0
    """

    def __init__(
        self,
        catalog: BaseCatalogService,
        repository: Optional[BaseCartRepository] = None,
        clock: Optional[MonotonicClock] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.catalog = catalog
        self.repository = repository or InMemoryCartRepository(self.settings.order_number_start)
        self.clock = clock or MonotonicClock()
        self.checkout = CheckoutOrchestrator(catalog, self.settings)

        logger.info(
            f"CartStore initialized (catalog={catalog.provider_name}, "
            f"repository={type(self.repository).__name__})"
        )

    # =========================================================================
    # INTERNAL HELPERS
    # =========================================================================

    def _ensure_cart(self, owner_key: str) -> Cart:
        cart = self.repository.get_cart(owner_key)
        if cart is not None:
            return cart

        timestamp = self.clock.now()
        cart = Cart(owner_key=owner_key, created_at=timestamp, updated_at=timestamp)
        self.repository.save_cart(cart)
        logger.debug(f"Created cart for {owner_key}")
        return cart

    def _touch(self, cart: Cart) -> None:
        cart.updated_at = self.clock.next_after(cart.updated_at)
        self.repository.save_cart(cart)

    @staticmethod
    def _find_line_or_raise(cart: Cart, line_id: str) -> CartLine:
        line = cart.find_line(line_id)
        if line is None:
            raise CartValidationError("Cart item not found.", 404, CART_ITEM_NOT_FOUND)
        return line

    def _check_quantity(self, quantity: int) -> int:
        limit = self.settings.max_line_quantity
        if not 1 <= quantity <= limit:
            raise CartValidationError(
                f"Quantity must be between 1 and {limit}.", 400, INVALID_QUANTITY
            )
        return quantity

    async def _snapshot(self, cart: Cart) -> CartSnapshot:
        lines = list(cart.lines)
        outcomes = await asyncio.gather(*(assess_line(line, self.catalog) for line in lines))
        items = await asyncio.gather(*(
            display_view(outcome, line, self.catalog) for outcome, line in zip(outcomes, lines)
        ))

        return CartSnapshot(
            order_type=cart.order_type,
            item_count=sum(item.quantity for item in items),
            subtotal=round_money(sum(item.line_total for item in items)),
            has_validation_issues=any(item.validation_issues for item in items),
            items=list(items),
            delivery_address=cart.delivery_address,
            updated_at=cart.updated_at,
        )

    # =========================================================================
    # CART OPERATIONS
    # =========================================================================

    async def get_snapshot(self, owner_key: str) -> CartSnapshot:
        """Current cart view. Creates an empty cart on first access; never touches it."""
        return await self._snapshot(self._ensure_cart(owner_key))

    async def update_cart(self, owner_key: str, patch: CartPatch) -> CartSnapshot:
        cart = self._ensure_cart(owner_key)
        if patch.order_type is not None:
            cart.order_type = patch.order_type
            self._touch(cart)
            logger.debug(f"Cart {owner_key}: order type -> {patch.order_type.value}")
        return await self._snapshot(cart)

    async def add_item(self, owner_key: str, command: CartItemCreate) -> CartSnapshot:
        """
        Add an item, merging into an identical line when one exists.

        Raises:
            CartValidationError: ``ITEM_UNAVAILABLE``, modifier errors, or
                ``INVALID_QUANTITY`` when a merge would exceed the line limit
        """
        self._ensure_cart(owner_key)
        item = await resolve_item(self.catalog, command.item_id)
        quantity = self._check_quantity(command.quantity)
        selection = validate_selection_strict(item, command.selected_option_ids)
        price = compute_line_price(item.base_price, selection.modifier_total, 1)

        cart = self._ensure_cart(owner_key)
        existing = cart.find_matching_line(
            command.item_id, command.special_instructions, selection.selected_option_ids
        )
        timestamp = self.clock.now()

        if existing is not None:
            merged = existing.evolve(
                quantity=self._check_quantity(existing.quantity + quantity),
                selected_option_ids=selection.selected_option_ids,
                special_instructions=command.special_instructions,
                item_name_snapshot=item.name,
                base_price_snapshot=price.base_price,
                modifier_total_snapshot=price.modifier_total,
                unit_price_snapshot=price.unit_price,
                updated_at=self.clock.next_after(existing.updated_at),
            )
            cart.replace_line(merged)
            logger.debug(f"Cart {owner_key}: merged {command.item_id} into {merged.id} (qty {merged.quantity})")
        else:
            line = CartLine(
                id=self.repository.next_line_id(),
                item_id=command.item_id,
                quantity=quantity,
                selected_option_ids=selection.selected_option_ids,
                special_instructions=command.special_instructions,
                item_name_snapshot=item.name,
                base_price_snapshot=price.base_price,
                modifier_total_snapshot=price.modifier_total,
                unit_price_snapshot=price.unit_price,
                created_at=timestamp,
                updated_at=timestamp,
            )
            cart.lines.append(line)
            logger.debug(f"Cart {owner_key}: added {command.item_id} as {line.id} (qty {quantity})")

        self._touch(cart)
        return await self._snapshot(cart)

    async def update_cart_item(self, owner_key: str, line_id: str, patch: CartItemUpdate) -> CartSnapshot:
        """
        Partially update a line and re-validate it strictly.

        When the update makes the line identical to another line, the two are
        merged into the other line and the quantity limit applies to the sum.

        Raises:
            CartValidationError: ``CART_ITEM_NOT_FOUND`` when the line is not
                in this owner's cart, plus any strict validation error
        """
        line = self._find_line_or_raise(self._ensure_cart(owner_key), line_id)
        item = await resolve_item(self.catalog, line.item_id)

        # The line may have changed or disappeared while the catalog was queried.
        cart = self._ensure_cart(owner_key)
        line = self._find_line_or_raise(cart, line_id)

        quantity = line.quantity if patch.quantity is None else self._check_quantity(patch.quantity)
        special_instructions = (
            line.special_instructions if patch.special_instructions is None else patch.special_instructions
        )
        requested = line.selected_option_ids if patch.selected_option_ids is None else patch.selected_option_ids
        selection = validate_selection_strict(item, requested)
        price = compute_line_price(item.base_price, selection.modifier_total, quantity)

        # An update that makes this line identical to another folds it into that line.
        duplicate = next(
            (
                entry for entry in cart.lines
                if entry.id != line.id
                and entry.matches(line.item_id, special_instructions, selection.selected_option_ids)
            ),
            None,
        )
        target = line if duplicate is None else duplicate
        if duplicate is not None:
            quantity = self._check_quantity(duplicate.quantity + quantity)

        updated = target.evolve(
            quantity=quantity,
            special_instructions=special_instructions,
            selected_option_ids=selection.selected_option_ids,
            item_name_snapshot=item.name,
            base_price_snapshot=price.base_price,
            modifier_total_snapshot=price.modifier_total,
            unit_price_snapshot=price.unit_price,
            updated_at=self.clock.next_after(target.updated_at),
        )
        if duplicate is not None:
            cart.lines = [entry for entry in cart.lines if entry.id != line.id]
            logger.debug(f"Cart {owner_key}: merged {line_id} into {duplicate.id} (qty {quantity})")
        else:
            logger.debug(f"Cart {owner_key}: updated {line_id}")
        cart.replace_line(updated)
        self._touch(cart)
        return await self._snapshot(cart)

    async def remove_cart_item(self, owner_key: str, line_id: str) -> CartSnapshot:
        cart = self._ensure_cart(owner_key)
        line = self._find_line_or_raise(cart, line_id)
        cart.lines = [entry for entry in cart.lines if entry.id != line.id]
        self._touch(cart)
        logger.debug(f"Cart {owner_key}: removed {line_id}")
        return await self._snapshot(cart)

    # =========================================================================
    # CHECKOUT
    # =========================================================================

    async def preview_checkout(
        self,
        owner_key: str,
        request: CheckoutRequest,
        user: Optional[SessionUser] = None,
    ) -> CheckoutPreparation:
        """
        Price the cart for checkout without placing anything.

        Only the chosen order type and resolved address are remembered on the
        cart; lines are never touched.
        """
        cart = self._ensure_cart(owner_key)
        prepared = await self.checkout.prepare(cart, request, user)

        changed = False
        if prepared.delivery_address is not None and prepared.delivery_address != cart.delivery_address:
            cart.delivery_address = prepared.delivery_address
            changed = True
        if prepared.order_type != cart.order_type:
            cart.order_type = prepared.order_type
            changed = True
        if changed:
            self._touch(cart)

        return prepared

    async def place_checkout(
        self,
        owner_key: str,
        request: CheckoutRequest,
        user: SessionUser,
    ) -> Order:
        """
        Place an order from the cart.

        The cart is reset only after the order has been stored; any failure
        before that leaves the cart untouched.
        """
        cart = self._ensure_cart(owner_key)
        prepared = await self.checkout.prepare(cart, request, user)

        order = Order(
            id=self.repository.next_order_id(),
            user_id=user.id,
            user_email=user.email,
            order_type=prepared.order_type,
            payment_method=prepared.payment_method,
            summary=prepared.summary.model_copy(deep=True),
            minimum_order_total=prepared.minimum_order_total,
            delivery_address=prepared.delivery_address,
            items=tuple(item.model_copy(deep=True) for item in prepared.items),
            created_at=self.clock.now(),
        )
        self.repository.save_order(order)

        cart.clear()
        self._touch(cart)

        logger.info(
            f"Order {order.id} placed by {owner_key}: {order.order_type.value}, "
            f"{len(order.items)} lines, total ${order.summary.total:.2f} ({order.payment_method.value})"
        )
        return order

    # =========================================================================
    # ORDERS
    # =========================================================================

    async def get_order(self, order_id: str, user: SessionUser) -> Order:
        """
        Fetch a placed order. Customers only see their own orders.

        Raises:
            CartValidationError: ``ORDER_NOT_FOUND`` (404)
        """
        order = self.repository.get_order(str(order_id or "").strip())
        if order is None or (user.role != ROLE_ADMIN and order.user_id != user.id):
            raise CartValidationError("Order not found.", 404, ORDER_NOT_FOUND)
        return order

    def stats(self) -> dict[str, int]:
        return self.repository.stats()

    def reset(self) -> None:
        """Forget every cart and order. Intended for tests."""
        self.repository.reset()
        logger.debug("CartStore reset")
