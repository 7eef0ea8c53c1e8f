"""
Cart Domain Models

Mutable state owned by the cart store:
- Order type / payment method / order status enums
- Cart lines with their last-known price snapshots
- Carts keyed by owner key

Derived views (snapshots, checkout summaries, placed orders) are pydantic
models in ``storefront.schemas``; nothing here is ever sent over the wire
directly.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from storefront.schemas import DeliveryAddress


class OrderType(str, enum.Enum):
    """How the customer receives the order."""
    DINE_IN = "DINE_IN"
    DELIVERY = "DELIVERY"
    PICKUP = "PICKUP"


class PaymentMethod(str, enum.Enum):
    """Recorded with the order; nothing is charged."""
    CARD = "CARD"
    GOOGLE_PAY = "GOOGLE_PAY"
    APPLE_PAY = "APPLE_PAY"
    PAYPAL = "PAYPAL"
    CASH = "CASH"


class OrderStatus(str, enum.Enum):
    """Order status workflow."""
    ACCEPTED = "ACCEPTED"


class LineAvailability(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


DEFAULT_ORDER_TYPE = OrderType.DELIVERY


@dataclass(frozen=True)
class CartLine:
    """
    One distinct (item, modifier selection, instructions) combination.

    Lines are replaced, never edited in place: every write builds a new
    CartLine with ``dataclasses.replace`` and swaps it into the cart once all
    validation has passed.

    The ``*_snapshot`` fields hold the pricing from the last successful strict
    validation and are only shown when the catalog item can no longer be
    resolved.
    """
    id: str
    item_id: str
    quantity: int
    selected_option_ids: tuple[str, ...]
    special_instructions: str
    item_name_snapshot: str
    base_price_snapshot: float
    modifier_total_snapshot: float
    unit_price_snapshot: float
    created_at: datetime
    updated_at: datetime

    def matches(
        self,
        item_id: str,
        special_instructions: str,
        selected_option_ids: tuple[str, ...],
    ) -> bool:
        """True when this line is the same logical line as the given configuration."""
        return (
            self.item_id == item_id
            and self.special_instructions == special_instructions
            and tuple(sorted(set(self.selected_option_ids))) == selected_option_ids
        )

    def evolve(self, **changes) -> "CartLine":
        return replace(self, **changes)


@dataclass
class Cart:
    """
    Per-owner cart state.

    Attributes:
        owner_key: ``user:<id>`` or ``guest:<token>``, never changes
        order_type: Current order type draft
        lines: Cart lines in insertion order
        delivery_address: Address draft remembered from the last preview
        created_at: When the cart was first accessed
        updated_at: Strictly increasing modification timestamp
    """
    owner_key: str
    created_at: datetime
    updated_at: datetime
    order_type: OrderType = DEFAULT_ORDER_TYPE
    lines: list[CartLine] = field(default_factory=list)
    delivery_address: Optional["DeliveryAddress"] = None

    def find_line(self, line_id: str) -> Optional[CartLine]:
        for line in self.lines:
            if line.id == line_id:
                return line
        return None

    def find_matching_line(
        self,
        item_id: str,
        special_instructions: str,
        selected_option_ids: tuple[str, ...],
    ) -> Optional[CartLine]:
        """First line sharing item, instructions and selection, if any."""
        for line in self.lines:
            if line.matches(item_id, special_instructions, selected_option_ids):
                return line
        return None

    def replace_line(self, line: CartLine) -> None:
        self.lines = [line if entry.id == line.id else entry for entry in self.lines]

    def clear(self) -> None:
        """Drop all lines and reset order type and address to defaults."""
        self.lines = []
        self.order_type = DEFAULT_ORDER_TYPE
        self.delivery_address = None

    def __repr__(self) -> str:
        return f"<Cart {self.owner_key} - {self.order_type.value} - {len(self.lines)} lines>"
