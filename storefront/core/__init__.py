"""
Core module initialization.
Exports configuration, logging utilities and typed errors.
"""

from storefront.core.config import get_settings, Settings, EnvironmentMode
from storefront.core.errors import (
    StorefrontError,
    CartValidationError,
    AuthError,
    CatalogLookupError,
)

__all__ = [
    "get_settings",
    "Settings",
    "EnvironmentMode",
    "StorefrontError",
    "CartValidationError",
    "AuthError",
    "CatalogLookupError",
]
