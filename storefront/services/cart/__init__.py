"""
Cart Service Factory

Usage:
    from storefront.services.cart import get_cart_store

    store = get_cart_store()
    snapshot = await store.get_snapshot("guest:4f2a...")
"""

import logging
from functools import lru_cache

from storefront.core.config import get_settings
from storefront.services.cart.clock import MonotonicClock
from storefront.services.cart.repository import BaseCartRepository, InMemoryCartRepository
from storefront.services.cart.store import CartStore
from storefront.services.catalog import get_catalog_service

logger = logging.getLogger(__name__)


@lru_cache()
def get_cart_store() -> CartStore:
    """
    Get the process-wide cart store.

    Cached so every request shares the same in-memory carts and orders.
    """
    settings = get_settings()
    return CartStore(
        catalog=get_catalog_service(),
        repository=InMemoryCartRepository(settings.order_number_start),
        clock=MonotonicClock(),
        settings=settings,
    )


def reset_cart_store() -> None:
    """Clear the cached store; the next call builds an empty one."""
    get_cart_store.cache_clear()
    logger.debug("Cart store cache cleared")


__all__ = [
    "get_cart_store",
    "reset_cart_store",
    "CartStore",
    "BaseCartRepository",
    "InMemoryCartRepository",
    "MonotonicClock",
]
