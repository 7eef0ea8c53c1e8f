"""
In-Memory Catalog Service Implementation

Serves menu lookups from process memory. Used in development mode and by the
test suite; a database-backed catalog implements the same interface.

Behavior:
    - Items and categories can be toggled active/inactive at runtime
    - Optional simulated lookup latency, like the other mock services
    - Lookups of inactive items or categories fail exactly like missing ones
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from storefront.core.errors import CatalogLookupError, CATEGORY_NOT_FOUND, ITEM_NOT_FOUND
from storefront.services.catalog.base import BaseCatalogService, ItemDetail

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    is_active: bool = True


class InMemoryCatalogService(BaseCatalogService):
    """
    Dictionary-backed catalog.

    Attributes:
        latency: Seconds to sleep before each lookup (0 disables)

    Example:
        >>> catalog = InMemoryCatalogService()
        >>> catalog.add_category(Category(id="cat-pizza", name="Pizza"))
        >>> catalog.upsert_item(ItemDetail(id="item-1", name="Margherita",
        ...                                base_price=14.5, category_id="cat-pizza"))
    """

    def __init__(
        self,
        categories: Iterable[Category] = (),
        items: Iterable[ItemDetail] = (),
        latency: float = 0.0,
    ):
        self.latency = latency
        self._categories: dict[str, Category] = {}
        self._items: dict[str, ItemDetail] = {}

        for category in categories:
            self.add_category(category)
        for item in items:
            self.upsert_item(item)

        logger.info(
            f"InMemoryCatalogService initialized "
            f"({len(self._categories)} categories, {len(self._items)} items, "
            f"latency={latency}s)"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "memory"

    async def _simulate_latency(self) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    # =========================================================================
    # ADMIN-SIDE MUTATIONS
    # =========================================================================

    def add_category(self, category: Category) -> None:
        self._categories[category.id] = category

    def upsert_item(self, item: ItemDetail) -> None:
        """Create or replace an item definition."""
        self._items[item.id] = item
        logger.debug(f"Catalog: upserted item {item.id} ({item.name} @ {item.base_price:.2f})")

    def set_item_active(self, item_id: str, is_active: bool) -> None:
        item = self._items[item_id]
        self._items[item_id] = replace(item, is_active=is_active)

    def set_category_active(self, category_id: str, is_active: bool) -> None:
        category = self._categories[category_id]
        self._categories[category_id] = replace(category, is_active=is_active)

    def remove_item(self, item_id: str) -> None:
        self._items.pop(item_id, None)

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    async def get_item_detail(self, item_id: str) -> ItemDetail:
        await self._simulate_latency()

        normalized = str(item_id or "").strip()
        item = self._items.get(normalized)
        if item is None or not item.is_active:
            raise CatalogLookupError("Menu item not found.", ITEM_NOT_FOUND)

        category = self._categories.get(item.category_id)
        if category is None or not category.is_active:
            raise CatalogLookupError("Menu category not found.", CATEGORY_NOT_FOUND)

        return item

    async def get_item_name(self, item_id: str) -> Optional[str]:
        await self._simulate_latency()
        item = self._items.get(str(item_id or "").strip())
        return item.name if item else None

    async def health_check(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._items)
