"""
                        Services Module

Business logic behind the storefront API. Each external collaborator has an
abstract base class and a default implementation chosen by a cached factory.

Services:
    - catalog: read-only menu lookups (in-memory in development)
    - cart: cart state, modifier validation, pricing and checkout
    - identity: caller identity and guest cart tokens
"""

from storefront.services.cart import get_cart_store
from storefront.services.catalog import get_catalog_service

__all__ = ["get_cart_store", "get_catalog_service"]
