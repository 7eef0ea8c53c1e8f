"""
Modifier Selection Validation

Checks a set of requested modifier option ids against an item's modifier
groups. One evaluation core, two entry points:

    validate_selection_strict   write paths; raises on the first problem
    validate_selection_display  read paths; never raises, unknown options
                                are dropped and rule violations are kept
                                for the caller to show as line issues
"""

from dataclasses import dataclass
from typing import Iterable

from storefront.core.errors import (
    CartValidationError,
    INVALID_MODIFIER_SELECTION,
    MODIFIER_RULE_VIOLATION,
)
from storefront.schemas import SelectedModifier
from storefront.services.cart.money import round_money
from storefront.services.catalog.base import ItemDetail, ModifierGroup, ModifierOption


@dataclass(frozen=True)
class RuleViolation:
    """A modifier group whose selection count is out of range."""
    group_id: str
    group_name: str
    selected_count: int
    min_select: int
    max_select: int

    @property
    def message(self) -> str:
        return (
            f'Modifier selection for "{self.group_name}" must be between '
            f"{self.min_select} and {self.max_select}."
        )


@dataclass(frozen=True)
class ModifierSelection:
    """
    Result of evaluating a selection against an item.

    Attributes:
        selected_option_ids: Resolved option ids, sorted
        selected_modifiers: Resolved options in request order
        modifier_total: Sum of price deltas, rounded to cents
        unknown_option_ids: Requested ids the item does not offer
        violations: Groups whose min/max rules are broken
    """
    selected_option_ids: tuple[str, ...]
    selected_modifiers: tuple[SelectedModifier, ...]
    modifier_total: float
    unknown_option_ids: tuple[str, ...] = ()
    violations: tuple[RuleViolation, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.unknown_option_ids and not self.violations

    @property
    def issues(self) -> list[str]:
        """Human-readable problems a customer can act on."""
        return [violation.message for violation in self.violations]


def normalize_option_ids(option_ids: Iterable[str]) -> list[str]:
    """Trim, drop empty ids and de-duplicate (exact match), keeping first-seen order."""
    seen: set[str] = set()
    normalized: list[str] = []
    for option_id in option_ids or ():
        text = str(option_id or "").strip()
        if not text or text in seen:
            continue
        seen.add(text)
        normalized.append(text)
    return normalized


def evaluate_selection(item: ItemDetail, requested_option_ids: Iterable[str]) -> ModifierSelection:
    """Resolve requested ids and check every group's selection count. Never raises."""
    options: dict[str, tuple[ModifierGroup, ModifierOption]] = {}
    for group in item.modifier_groups:
        for option in group.options:
            if option.is_active:
                options[option.id] = (group, option)

    selected: list[SelectedModifier] = []
    unknown: list[str] = []
    count_by_group: dict[str, int] = {}

    for option_id in normalize_option_ids(requested_option_ids):
        match = options.get(option_id)
        if match is None:
            unknown.append(option_id)
            continue

        group, option = match
        count_by_group[group.id] = count_by_group.get(group.id, 0) + 1
        selected.append(SelectedModifier(
            group_id=group.id,
            group_name=group.name,
            option_id=option.id,
            option_name=option.name,
            price_delta=round_money(option.price_delta),
        ))

    violations = []
    for group in item.modifier_groups:
        count = count_by_group.get(group.id, 0)
        if not group.effective_min <= count <= group.max_select:
            violations.append(RuleViolation(
                group_id=group.id,
                group_name=group.name,
                selected_count=count,
                min_select=group.effective_min,
                max_select=group.max_select,
            ))

    return ModifierSelection(
        selected_option_ids=tuple(sorted(modifier.option_id for modifier in selected)),
        selected_modifiers=tuple(selected),
        modifier_total=round_money(sum(modifier.price_delta for modifier in selected)),
        unknown_option_ids=tuple(unknown),
        violations=tuple(violations),
    )


def selection_error(selection: ModifierSelection) -> CartValidationError:
    """The error a strict write reports for an invalid selection."""
    if selection.unknown_option_ids:
        return CartValidationError(
            "One or more selected modifiers are invalid for this item.",
            400,
            INVALID_MODIFIER_SELECTION,
        )
    return CartValidationError(selection.violations[0].message, 400, MODIFIER_RULE_VIOLATION)


def validate_selection_strict(item: ItemDetail, requested_option_ids: Iterable[str]) -> ModifierSelection:
    """
    Validate a selection for a write.

    Raises:
        CartValidationError: ``INVALID_MODIFIER_SELECTION`` for ids the item
            does not offer, ``MODIFIER_RULE_VIOLATION`` for a group outside
            its min/max range
    """
    selection = evaluate_selection(item, requested_option_ids)
    if not selection.is_valid:
        raise selection_error(selection)
    return selection


def validate_selection_display(item: ItemDetail, requested_option_ids: Iterable[str]) -> ModifierSelection:
    """Evaluate a selection for display; problems are reported, never raised."""
    return evaluate_selection(item, requested_option_ids)
