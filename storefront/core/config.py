"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Supports three modes:
    - DEVELOPMENT: Seeded in-memory catalog, verbose defaults
    - STAGING: Pre-production settings
    - PRODUCTION: Secure cookies, no debug detail in error bodies

Pricing rules (tax mode, delivery fee, discount tiers, order minimums) live
here as well so the checkout math can be tuned per deployment without code
changes.

Usage:
    from storefront.core.config import get_settings

    settings = get_settings()
    minimum = settings.minimum_order_totals["DELIVERY"]
"""

import logging
import sys
from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local testing with the seeded catalog
        PRODUCTION: Live environment
        STAGING: Pre-production testing
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.

    Attributes:
        env_mode: Current environment (development/production/staging)
        debug: Enable verbose logging and error details

        # Pricing
        tax_rate: Sales tax rate (decimal)
        tax_included_in_menu_prices: Menu prices already contain tax
        delivery_base_fee: Flat delivery charge below the free threshold
        delivery_free_threshold: Subtotal at which delivery becomes free

        # Cart limits
        max_line_quantity: Largest quantity a single cart line may hold
        max_special_instructions: Longest allowed special instructions text
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    app_name: str = Field(
        default="Food Storefront",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    api_port: int = Field(
        default=8001,
        description="API server port"
    )

    # ==========================================================================
    # PRICING
    # ==========================================================================

    currency: str = Field(
        default="USD",
        description="Currency code reported with every summary"
    )
    tax_rate: float = Field(
        default=0.085,
        ge=0,
        description="Tax rate as decimal (8.5%)"
    )
    tax_included_in_menu_prices: bool = Field(
        default=True,
        description="Menu prices already include tax"
    )
    delivery_base_fee: float = Field(
        default=3.99,
        ge=0,
        description="Delivery fee charged below the free-delivery threshold"
    )
    delivery_free_threshold: float = Field(
        default=35.0,
        ge=0,
        description="Subtotal at or above which delivery is free"
    )
    discount_tier_low_threshold: float = Field(
        default=40.0,
        description="Subtotal that unlocks the first discount tier"
    )
    discount_tier_low_amount: float = Field(
        default=4.0,
        description="Discount granted by the first tier"
    )
    discount_tier_high_threshold: float = Field(
        default=60.0,
        description="Subtotal that unlocks the second discount tier"
    )
    discount_tier_high_amount: float = Field(
        default=8.0,
        description="Discount granted by the second tier"
    )

    # ==========================================================================
    # ORDER MINIMUMS
    # ==========================================================================

    minimum_order_delivery: float = Field(
        default=15.0,
        ge=0,
        description="Minimum subtotal for delivery orders"
    )
    minimum_order_dine_in: float = Field(
        default=0.0,
        ge=0,
        description="Minimum subtotal for dine-in orders"
    )
    minimum_order_pickup: float = Field(
        default=0.0,
        ge=0,
        description="Minimum subtotal for pickup orders"
    )

    # ==========================================================================
    # CART LIMITS
    # ==========================================================================

    max_line_quantity: int = Field(
        default=20,
        ge=1,
        description="Maximum quantity for a single cart line"
    )
    max_special_instructions: int = Field(
        default=280,
        ge=0,
        description="Maximum length of special instructions"
    )
    max_selected_options: int = Field(
        default=24,
        ge=1,
        description="Maximum number of modifier options per request"
    )
    order_number_start: int = Field(
        default=2001,
        ge=1,
        description="First sequential public order number"
    )

    # ==========================================================================
    # GUEST CART COOKIE
    # ==========================================================================

    guest_cart_cookie_name: str = Field(
        default="foodapp_guest_cart",
        description="Cookie holding the guest cart token"
    )
    guest_cart_cookie_max_age: int = Field(
        default=60 * 60 * 24 * 30,
        description="Guest cart cookie lifetime in seconds"
    )

    # ==========================================================================
    # CATALOG
    # ==========================================================================

    catalog_latency_seconds: float = Field(
        default=0.0,
        ge=0,
        description="Simulated lookup latency of the in-memory catalog"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    @model_validator(mode="after")
    def validate_discount_tiers(self) -> "Settings":
        """The high tier must sit above the low tier."""
        if self.discount_tier_high_threshold < self.discount_tier_low_threshold:
            raise ValueError(
                "discount_tier_high_threshold must be >= discount_tier_low_threshold"
            )
        return self

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env_mode == EnvironmentMode.PRODUCTION

    @property
    def minimum_order_totals(self) -> dict[str, float]:
        """Minimum subtotal keyed by order type value."""
        return {
            "DELIVERY": self.minimum_order_delivery,
            "DINE_IN": self.minimum_order_dine_in,
            "PICKUP": self.minimum_order_pickup,
        }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded only once so every component sees the same pricing
    rules for the lifetime of the process.

    Returns:
        Settings: Configured application settings
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured root logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return logging.getLogger("storefront")

