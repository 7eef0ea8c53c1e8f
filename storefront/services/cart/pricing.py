"""
Line Item Pricing

Prices a cart line from scratch against the current catalog:

    unit_price = round2(base_price + modifier_total)
    line_total = round2(unit_price * quantity)

Rounding happens at the unit price, before multiplying by quantity.

``assess_line`` is the single pricing core and returns one of:

    Ok(view)                      line is valid as stored
    Degraded(view, issues, error) item resolves but the stored selection no
                                  longer satisfies the item's rules
    Err(error)                    item (or its category) cannot be sold

Write paths use ``require_valid``; read paths use ``display_view``, which
never raises and falls back to the line's price snapshot when the item is gone.
"""

import logging
from dataclasses import dataclass
from typing import Union

from storefront.core.errors import (
    CartValidationError,
    CatalogLookupError,
    CATEGORY_NOT_FOUND,
    ITEM_NOT_FOUND,
    ITEM_UNAVAILABLE,
)
from storefront.models import CartLine, LineAvailability
from storefront.schemas import CartLineView, ModifierGroupView, ModifierOptionView
from storefront.services.cart.money import round_money
from storefront.services.cart.validation import (
    ModifierSelection,
    normalize_option_ids,
    selection_error,
    validate_selection_display,
)
from storefront.services.catalog.base import BaseCatalogService, ItemDetail

logger = logging.getLogger(__name__)

UNAVAILABLE_ITEM_NAME = "Unavailable item"
UNAVAILABLE_ITEM_MESSAGE = "Menu item is unavailable. Please refresh your cart."


@dataclass(frozen=True)
class LinePrice:
    base_price: float
    modifier_total: float
    unit_price: float
    line_total: float


def compute_line_price(base_price: float, modifier_total: float, quantity: int) -> LinePrice:
    """
    Price one line.

    >>> compute_line_price(14.50, 2.00, 2).line_total
    33.0
    """
    base = round_money(base_price)
    modifiers = round_money(modifier_total)
    unit_price = round_money(base + modifiers)
    return LinePrice(
        base_price=base,
        modifier_total=modifiers,
        unit_price=unit_price,
        line_total=round_money(unit_price * quantity),
    )


# =============================================================================
# LINE OUTCOMES
# =============================================================================

@dataclass(frozen=True)
class Ok:
    view: CartLineView


@dataclass(frozen=True)
class Degraded:
    view: CartLineView
    issues: tuple[str, ...]
    error: CartValidationError


@dataclass(frozen=True)
class Err:
    error: CartValidationError


LineOutcome = Union[Ok, Degraded, Err]


async def resolve_item(catalog: BaseCatalogService, item_id: str) -> ItemDetail:
    """
    Fetch a sellable item.

    Raises:
        CartValidationError: ``ITEM_UNAVAILABLE`` (409) when the item or its
            category is missing or inactive
    """
    try:
        return await catalog.get_item_detail(item_id)
    except CatalogLookupError as exc:
        if exc.code in (ITEM_NOT_FOUND, CATEGORY_NOT_FOUND):
            raise CartValidationError(UNAVAILABLE_ITEM_MESSAGE, 409, ITEM_UNAVAILABLE) from exc
        raise


def _modifier_group_views(item: ItemDetail, selected_option_ids: tuple[str, ...]) -> list[ModifierGroupView]:
    selected = set(selected_option_ids)
    return [
        ModifierGroupView(
            id=group.id,
            name=group.name,
            is_required=group.is_required,
            min_select=group.min_select,
            max_select=group.max_select,
            options=[
                ModifierOptionView(
                    id=option.id,
                    name=option.name,
                    price_delta=round_money(option.price_delta),
                    is_active=option.is_active,
                    selected=option.id in selected,
                )
                for option in group.options
            ],
        )
        for group in item.modifier_groups
    ]


def build_line_view(
    line: CartLine,
    item: ItemDetail,
    selection: ModifierSelection,
    issues: tuple[str, ...] = (),
) -> CartLineView:
    """Priced view of a line against a resolved item and selection."""
    price = compute_line_price(item.base_price, selection.modifier_total, line.quantity)
    return CartLineView(
        id=line.id,
        item_id=line.item_id,
        item_name=item.name,
        quantity=line.quantity,
        special_instructions=line.special_instructions or "",
        selected_option_ids=list(selection.selected_option_ids),
        selected_modifiers=list(selection.selected_modifiers),
        modifier_groups=_modifier_group_views(item, selection.selected_option_ids),
        base_price=price.base_price,
        modifier_total=price.modifier_total,
        unit_price=price.unit_price,
        line_total=price.line_total,
        availability=LineAvailability.INACTIVE if issues else LineAvailability.ACTIVE,
        validation_issues=list(issues),
    )


async def assess_line(line: CartLine, catalog: BaseCatalogService) -> LineOutcome:
    """Price a stored line against the live catalog. Never raises."""
    try:
        item = await resolve_item(catalog, line.item_id)
    except CartValidationError as exc:
        return Err(exc)
    except CatalogLookupError as exc:
        logger.warning(f"Catalog lookup for {line.item_id} failed ({exc.code}): {exc.message}")
        return Err(CartValidationError(UNAVAILABLE_ITEM_MESSAGE, 409, ITEM_UNAVAILABLE))

    selection = validate_selection_display(item, line.selected_option_ids)
    if selection.is_valid:
        return Ok(build_line_view(line, item, selection))

    issues = tuple(selection.issues)
    return Degraded(
        view=build_line_view(line, item, selection, issues),
        issues=issues,
        error=selection_error(selection),
    )


def require_valid(outcome: LineOutcome) -> CartLineView:
    """Strict view of an outcome: the priced line, or the reason it cannot be sold."""
    if isinstance(outcome, Ok):
        return outcome.view
    raise outcome.error


async def display_view(outcome: LineOutcome, line: CartLine, catalog: BaseCatalogService) -> CartLineView:
    """
    Display view of an outcome. Never raises.

    Unsellable lines are shown from their price snapshot, marked inactive,
    with the reason as a validation issue.
    """
    if isinstance(outcome, (Ok, Degraded)):
        return outcome.view

    item_name = line.item_name_snapshot or UNAVAILABLE_ITEM_NAME
    try:
        item_name = await catalog.get_item_name(line.item_id) or item_name
    except CatalogLookupError:
        logger.debug(f"Catalog has no name for {line.item_id}; keeping snapshot name")

    unit_price = round_money(line.unit_price_snapshot or 0)
    return CartLineView(
        id=line.id,
        item_id=line.item_id,
        item_name=item_name,
        quantity=line.quantity,
        special_instructions=line.special_instructions or "",
        selected_option_ids=normalize_option_ids(line.selected_option_ids),
        selected_modifiers=[],
        modifier_groups=[],
        base_price=round_money(line.base_price_snapshot or 0),
        modifier_total=round_money(line.modifier_total_snapshot or 0),
        unit_price=unit_price,
        line_total=round_money(unit_price * line.quantity),
        availability=LineAvailability.INACTIVE,
        validation_issues=[outcome.error.message or "Item requires attention."],
    )
