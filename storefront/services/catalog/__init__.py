"""
Catalog Service Factory

Provides a single entry point for obtaining the catalog the cart prices
against.

Usage:
    from storefront.services.catalog import get_catalog_service

    catalog = get_catalog_service()
    item = await catalog.get_item_detail("item-margherita")
"""

import logging
from functools import lru_cache

from storefront.core.config import get_settings
from storefront.services.catalog.base import (
    BaseCatalogService,
    ItemDetail,
    ModifierGroup,
    ModifierOption,
)
from storefront.services.catalog.mock import Category, InMemoryCatalogService
from storefront.services.catalog.seed import SAMPLE_CATEGORIES, SAMPLE_ITEMS

logger = logging.getLogger(__name__)


@lru_cache()
def get_catalog_service() -> BaseCatalogService:
    """
    Get the configured catalog service instance.

    The instance is cached so every request prices against the same catalog.

    Returns:
        BaseCatalogService: Seeded in-memory catalog
    """
    settings = get_settings()
    logger.info(f"Catalog Service: Using InMemoryCatalogService ({settings.env_mode.value} mode)")
    return InMemoryCatalogService(
        categories=SAMPLE_CATEGORIES,
        items=SAMPLE_ITEMS,
        latency=settings.catalog_latency_seconds,
    )


def reset_catalog_service() -> None:
    """
    Clear the cached catalog instance.

    The next call to get_catalog_service() builds a fresh, re-seeded catalog.
    """
    get_catalog_service.cache_clear()
    logger.debug("Catalog service cache cleared")


__all__ = [
    "get_catalog_service",
    "reset_catalog_service",
    "BaseCatalogService",
    "InMemoryCatalogService",
    "Category",
    "ItemDetail",
    "ModifierGroup",
    "ModifierOption",
]
