"""Shared fixtures: a seeded catalog, a controllable clock and a fresh store per test."""

from datetime import datetime, timedelta, timezone

import pytest

from storefront.core.config import Settings
from storefront.services.cart import CartStore, InMemoryCartRepository, MonotonicClock
from storefront.services.catalog import InMemoryCatalogService
from storefront.services.catalog.base import ItemDetail
from storefront.services.catalog.seed import SAMPLE_CATEGORIES, SAMPLE_ITEMS
from storefront.services.identity import SessionUser

FIXED_NOW = datetime(2026, 3, 14, 12, 30, 0, 123456, tzinfo=timezone.utc)


class SteppingTimeSource:
    """Time source that only moves when told to."""

    def __init__(self, start: datetime = FIXED_NOW):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **delta) -> None:
        self.current += timedelta(**delta)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def catalog() -> InMemoryCatalogService:
    catalog = InMemoryCatalogService(categories=SAMPLE_CATEGORIES, items=SAMPLE_ITEMS)
    # Flat-priced items for exact subtotal scenarios
    catalog.upsert_item(ItemDetail(id="item-five", name="Five Dollar Side", base_price=5.00, category_id="cat-sides"))
    catalog.upsert_item(ItemDetail(id="item-ten", name="Ten Dollar Bowl", base_price=10.00, category_id="cat-pasta"))
    catalog.upsert_item(ItemDetail(id="item-twenty", name="Twenty Dollar Platter", base_price=20.00, category_id="cat-pasta"))
    return catalog


@pytest.fixture
def time_source() -> SteppingTimeSource:
    return SteppingTimeSource()


@pytest.fixture
def store(catalog, time_source, settings) -> CartStore:
    return CartStore(
        catalog=catalog,
        repository=InMemoryCartRepository(settings.order_number_start),
        clock=MonotonicClock(time_source),
        settings=settings,
    )


@pytest.fixture
def customer() -> SessionUser:
    return SessionUser(
        id="user-1",
        email="ada@example.com",
        phone_verified=True,
        address_line1="350 Fifth Avenue",
        address_city="New York",
    )


@pytest.fixture
def owner_key(customer) -> str:
    return f"user:{customer.id}"
