"""
Typed Errors

Every failure the cart and checkout engine reports carries a stable
machine-readable ``code`` and an HTTP-style ``status``. The HTTP layer turns
them into JSON bodies; nothing else needs to know about FastAPI.
"""

from typing import Optional


class StorefrontError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    default_code = "REQUEST_ERROR"

    def __init__(self, message: str, status: int = 400, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        """Convert to the error body returned by the API."""
        return {"success": False, "code": self.code, "message": self.message}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.code} ({self.status}): {self.message}>"


class CartValidationError(StorefrontError):
    """Raised by the cart store, the checkout path and the request boundary."""

    default_code = "CART_VALIDATION_ERROR"


class AuthError(StorefrontError):
    """Caller identity is missing or lacks the required role or verification."""

    default_code = "AUTH_ERROR"


class CatalogLookupError(Exception):
    """Raised by catalog services when an item or its category cannot be served."""

    def __init__(self, message: str, code: str = "ITEM_NOT_FOUND"):
        super().__init__(message)
        self.message = message
        self.code = code


# Error codes
INVALID_INPUT = "INVALID_INPUT"
INVALID_QUANTITY = "INVALID_QUANTITY"
INVALID_SPECIAL_INSTRUCTIONS = "INVALID_SPECIAL_INSTRUCTIONS"
INVALID_ORDER_TYPE = "INVALID_ORDER_TYPE"
INVALID_PAYMENT_METHOD = "INVALID_PAYMENT_METHOD"
ITEM_UNAVAILABLE = "ITEM_UNAVAILABLE"
CART_ITEM_NOT_FOUND = "CART_ITEM_NOT_FOUND"
ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
INVALID_MODIFIER_SELECTION = "INVALID_MODIFIER_SELECTION"
MODIFIER_RULE_VIOLATION = "MODIFIER_RULE_VIOLATION"
CART_EMPTY = "CART_EMPTY"
MINIMUM_ORDER_NOT_MET = "MINIMUM_ORDER_NOT_MET"
DELIVERY_ADDRESS_REQUIRED = "DELIVERY_ADDRESS_REQUIRED"
ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"
AUTH_REQUIRED = "AUTH_REQUIRED"
ROLE_FORBIDDEN = "ROLE_FORBIDDEN"
PHONE_VERIFICATION_REQUIRED = "PHONE_VERIFICATION_REQUIRED"
