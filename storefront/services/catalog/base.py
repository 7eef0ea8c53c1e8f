"""
Catalog Service Abstract Base Class

Defines the read-only menu lookup the cart engine depends on. The cart never
caches what it gets back: every mutation and every snapshot asks the catalog
again, because prices and availability can change between requests.

Design Pattern: Strategy Pattern
    - The in-memory catalog serves development and tests
    - A database-backed catalog can be plugged in without touching the cart
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class ModifierOption:
    """
    A selectable option inside a modifier group.

    Attributes:
        id: Option identifier referenced by cart selections
        name: Display name (e.g. "Large")
        price_delta: Amount added to the item's base price
        is_active: Inactive options cannot be selected
    """
    id: str
    name: str
    price_delta: float = 0.0
    is_active: bool = True


@dataclass(frozen=True)
class ModifierGroup:
    """
    A catalog-defined set of options governed by selection counts.

    Attributes:
        id: Group identifier
        name: Display name (e.g. "Size")
        is_required: Whether at least one option must be chosen
        min_select: Minimum number of options
        max_select: Maximum number of options
        options: Options in display order
    """
    id: str
    name: str
    is_required: bool = False
    min_select: int = 0
    max_select: int = 1
    options: tuple[ModifierOption, ...] = ()

    def __post_init__(self):
        if not 0 <= self.min_select <= self.max_select:
            raise ValueError(
                f"Modifier group {self.id!r} needs 0 <= min_select <= max_select "
                f"(got {self.min_select}..{self.max_select})"
            )

    @property
    def effective_min(self) -> int:
        """Minimum selections once the required flag is taken into account."""
        return max(self.min_select, 1 if self.is_required else 0)


@dataclass(frozen=True)
class ItemDetail:
    """
    Current definition of a sellable menu item.

    Attributes:
        id: Item identifier
        name: Display name
        base_price: Price before modifiers
        category_id: Owning category
        is_active: Whether the item is currently sold
        modifier_groups: Modifier groups in display order
    """
    id: str
    name: str
    base_price: float
    category_id: str
    is_active: bool = True
    description: str = ""
    modifier_groups: tuple[ModifierGroup, ...] = field(default_factory=tuple)


class BaseCatalogService(ABC):
    """
    Abstract base class for catalog lookups.

    Example:
        >>> catalog = get_catalog_service()
        >>> item = await catalog.get_item_detail("item-margherita")
        >>> print(item.base_price)
        14.5
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of the catalog provider."""
        pass

    @abstractmethod
    async def get_item_detail(self, item_id: str) -> ItemDetail:
        """
        Resolve a sellable item.

        Args:
            item_id: Item identifier

        Returns:
            ItemDetail: The item as customers currently see it

        Raises:
            CatalogLookupError: ``ITEM_NOT_FOUND`` when the item is missing or
                inactive, ``CATEGORY_NOT_FOUND`` when its category is missing
                or inactive
        """
        pass

    @abstractmethod
    async def get_item_name(self, item_id: str) -> Optional[str]:
        """
        Look up an item's name regardless of availability.

        Used only to label cart lines whose item can no longer be sold.

        Returns:
            The item name, or None when the item does not exist at all
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify the catalog can serve lookups.

        Returns:
            bool: True if service is operational
        """
        pass
