"""
Pydantic Schemas for Request/Response Validation

Request models are the single validation boundary of the cart API: raw JSON
goes in, a typed and already-normalized command comes out. Validators raise
``PydanticCustomError`` whose type is the public error code, so a bad
quantity is reported as ``INVALID_QUANTITY`` rather than a pydantic type name.

Response models are the derived, read-only views (cart snapshots, checkout
preparations, placed orders). JSON uses camelCase keys.
"""

from datetime import datetime
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from storefront.core.config import get_settings
from storefront.core.errors import (
    CartValidationError,
    DELIVERY_ADDRESS_REQUIRED,
    INVALID_INPUT,
    INVALID_ORDER_TYPE,
    INVALID_PAYMENT_METHOD,
    INVALID_QUANTITY,
    INVALID_SPECIAL_INSTRUCTIONS,
)
from storefront.models import LineAvailability, OrderStatus, OrderType, PaymentMethod

ModelT = TypeVar("ModelT", bound=BaseModel)

# Error codes the boundary reports as-is; anything else becomes INVALID_INPUT.
BOUNDARY_ERROR_CODES = frozenset({
    INVALID_INPUT,
    INVALID_QUANTITY,
    INVALID_SPECIAL_INSTRUCTIONS,
    INVALID_ORDER_TYPE,
    INVALID_PAYMENT_METHOD,
    DELIVERY_ADDRESS_REQUIRED,
})


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ViewModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# =============================================================================
# FIELD PARSERS
# =============================================================================

def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def parse_quantity(value: Any) -> int:
    """Parse a quantity, accepting numeric strings, within 1..max_line_quantity."""
    limit = get_settings().max_line_quantity
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    try:
        quantity = int(str(value).strip())
    except (TypeError, ValueError):
        quantity = None
    if isinstance(value, bool) or quantity is None or not 1 <= quantity <= limit:
        raise PydanticCustomError(
            INVALID_QUANTITY, "Quantity must be between 1 and {limit}.", {"limit": limit}
        )
    return quantity


def parse_special_instructions(value: Any) -> str:
    limit = get_settings().max_special_instructions
    text = "" if value is None else str(value).strip()
    if len(text) > limit:
        raise PydanticCustomError(
            INVALID_SPECIAL_INSTRUCTIONS,
            "Special instructions cannot exceed {limit} characters.",
            {"limit": limit},
        )
    return text


def parse_selected_option_ids(value: Any) -> list[str]:
    """Trim, reject empty ids and drop duplicates while keeping first-seen order."""
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise PydanticCustomError(
            INVALID_INPUT, "selectedOptionIds must be an array of modifier option ids."
        )

    seen: set[str] = set()
    option_ids: list[str] = []
    for entry in value:
        option_id = "" if entry is None else str(entry).strip()
        if not option_id:
            raise PydanticCustomError(INVALID_INPUT, "Modifier option id is required.")
        if option_id in seen:
            continue
        seen.add(option_id)
        option_ids.append(option_id)

    if len(option_ids) > get_settings().max_selected_options:
        raise PydanticCustomError(INVALID_INPUT, "Too many modifier options selected.")
    return option_ids


def parse_order_type(value: Any) -> OrderType:
    if isinstance(value, OrderType):
        return value
    try:
        return OrderType(str(value).strip().upper())
    except ValueError:
        raise PydanticCustomError(INVALID_ORDER_TYPE, "Order type is invalid.")


def parse_payment_method(value: Any) -> PaymentMethod:
    if isinstance(value, PaymentMethod):
        return value
    try:
        return PaymentMethod(str(value).strip().upper())
    except ValueError:
        raise PydanticCustomError(INVALID_PAYMENT_METHOD, "Payment method is invalid.")


def _optional_text(value: Any, max_length: int) -> str:
    text = "" if value is None else str(value).strip()
    if len(text) > max_length:
        raise PydanticCustomError(
            INVALID_INPUT, "Text exceeds max length of {limit}.", {"limit": max_length}
        )
    return text


# =============================================================================
# DELIVERY ADDRESS
# =============================================================================

class DeliveryAddress(ViewModel):
    """A complete delivery address: line1 and city are always non-empty."""
    line1: str = Field(..., min_length=1, max_length=255, examples=["350 Fifth Avenue"])
    city: str = Field(..., min_length=1, max_length=120, examples=["New York"])
    postal_code: str = Field(default="", max_length=32, examples=["10001"])
    notes: str = Field(default="", max_length=280)

    @classmethod
    def parse(cls, value: Any) -> Optional["DeliveryAddress"]:
        """
        Normalize a raw address payload.

        Returns None when every field is empty; raises
        ``DELIVERY_ADDRESS_REQUIRED`` when only line1 or city is missing.
        """
        if value is None:
            return None
        if isinstance(value, DeliveryAddress):
            return value
        if not isinstance(value, dict):
            raise PydanticCustomError(INVALID_INPUT, "Delivery address is invalid.")

        line1 = _optional_text(value.get("line1"), 255)
        city = _optional_text(value.get("city"), 120)
        postal_code = _optional_text(value.get("postalCode", value.get("postal_code")), 32)
        notes = _optional_text(value.get("notes"), get_settings().max_special_instructions)

        if not (line1 or city or postal_code or notes):
            return None
        if not line1 or not city:
            raise PydanticCustomError(
                DELIVERY_ADDRESS_REQUIRED,
                "Delivery address line1 and city are required for delivery orders.",
            )
        return cls(line1=line1, city=city, postal_code=postal_code, notes=notes)


# =============================================================================
# REQUEST SCHEMAS (commands)
# =============================================================================

class CartItemCreate(CamelModel):
    """Add an item to the cart."""
    item_id: Optional[str] = Field(default=None, validate_default=True, examples=["item-margherita"])
    quantity: int = Field(default=1, examples=[2])
    selected_option_ids: list[str] = Field(default_factory=list, examples=[["opt-margherita-large"]])
    special_instructions: str = Field(default="", examples=["Extra crispy"])

    @field_validator("item_id", mode="before")
    @classmethod
    def validate_item_id(cls, v: Any) -> str:
        if _is_blank(v):
            raise PydanticCustomError(INVALID_INPUT, "Item id is required.")
        return str(v).strip()

    @field_validator("quantity", mode="before")
    @classmethod
    def validate_quantity(cls, v: Any) -> int:
        if _is_blank(v):
            return 1
        return parse_quantity(v)

    @field_validator("selected_option_ids", mode="before")
    @classmethod
    def validate_selected_option_ids(cls, v: Any) -> list[str]:
        return parse_selected_option_ids(v)

    @field_validator("special_instructions", mode="before")
    @classmethod
    def validate_special_instructions(cls, v: Any) -> str:
        return parse_special_instructions(v)


class CartItemUpdate(CamelModel):
    """Partial update of a cart line; omitted fields stay unchanged."""
    quantity: Optional[int] = None
    selected_option_ids: Optional[list[str]] = None
    special_instructions: Optional[str] = None

    @field_validator("quantity", mode="before")
    @classmethod
    def validate_quantity(cls, v: Any) -> Optional[int]:
        if _is_blank(v):
            return None
        return parse_quantity(v)

    @field_validator("selected_option_ids", mode="before")
    @classmethod
    def validate_selected_option_ids(cls, v: Any) -> Optional[list[str]]:
        if v is None:
            return None
        return parse_selected_option_ids(v)

    @field_validator("special_instructions", mode="before")
    @classmethod
    def validate_special_instructions(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        return parse_special_instructions(v)

    @model_validator(mode="after")
    def require_any_field(self) -> "CartItemUpdate":
        if self.quantity is None and self.selected_option_ids is None and self.special_instructions is None:
            raise PydanticCustomError(INVALID_INPUT, "No cart item fields provided for update.")
        return self


class CartPatch(CamelModel):
    """Cart-level patch. Only the order type can change."""
    order_type: Optional[OrderType] = Field(default=None, validate_default=True, examples=["PICKUP"])

    @field_validator("order_type", mode="before")
    @classmethod
    def validate_order_type(cls, v: Any) -> OrderType:
        if _is_blank(v):
            raise PydanticCustomError(INVALID_INPUT, "No cart fields provided for update.")
        return parse_order_type(v)


class CheckoutRequest(CamelModel):
    """Checkout preview / place payload."""
    order_type: Optional[OrderType] = Field(default=None, examples=["DELIVERY"])
    payment_method: PaymentMethod = Field(default=PaymentMethod.CARD, examples=["CARD"])
    delivery_address: Optional[DeliveryAddress] = None

    @field_validator("order_type", mode="before")
    @classmethod
    def validate_order_type(cls, v: Any) -> Optional[OrderType]:
        if _is_blank(v):
            return None
        return parse_order_type(v)

    @field_validator("payment_method", mode="before")
    @classmethod
    def validate_payment_method(cls, v: Any) -> PaymentMethod:
        if _is_blank(v):
            return PaymentMethod.CARD
        return parse_payment_method(v)

    @field_validator("delivery_address", mode="before")
    @classmethod
    def validate_delivery_address(cls, v: Any) -> Optional[DeliveryAddress]:
        return DeliveryAddress.parse(v)


# =============================================================================
# BOUNDARY HELPERS
# =============================================================================

def error_from_validation(errors: list[dict]) -> CartValidationError:
    """
    Convert pydantic error details into a single typed error.

    The first error wins. Custom errors carry their public code as the
    error type; everything else is reported as INVALID_INPUT.
    """
    if not errors:
        return CartValidationError("Request is invalid.", 400, INVALID_INPUT)

    first = errors[0]
    error_type = first.get("type", "")
    if error_type in BOUNDARY_ERROR_CODES:
        return CartValidationError(first.get("msg", "Request is invalid."), 400, error_type)

    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Request is invalid.")
    if location:
        message = f"{location}: {message}"
    return CartValidationError(message, 400, INVALID_INPUT)


def validate_payload(model_cls: type[ModelT], payload: Any) -> ModelT:
    """Validate a raw payload into a command, raising CartValidationError."""
    try:
        return model_cls.model_validate(payload if payload is not None else {})
    except ValidationError as exc:
        raise error_from_validation(exc.errors()) from exc


# =============================================================================
# RESPONSE SCHEMAS (derived views)
# =============================================================================

class SelectedModifier(ViewModel):
    group_id: str
    group_name: str
    option_id: str
    option_name: str
    price_delta: float


class ModifierOptionView(ViewModel):
    id: str
    name: str
    price_delta: float
    is_active: bool
    selected: bool


class ModifierGroupView(ViewModel):
    id: str
    name: str
    is_required: bool
    min_select: int
    max_select: int
    options: list[ModifierOptionView]


class CartLineView(ViewModel):
    """A cart line priced against the current catalog (or its snapshot)."""
    id: str
    item_id: str
    item_name: str
    quantity: int
    special_instructions: str
    selected_option_ids: list[str]
    selected_modifiers: list[SelectedModifier]
    modifier_groups: list[ModifierGroupView]
    base_price: float
    modifier_total: float
    unit_price: float
    line_total: float
    availability: LineAvailability
    validation_issues: list[str]


class CartSnapshot(ViewModel):
    order_type: OrderType
    item_count: int
    subtotal: float
    has_validation_issues: bool
    items: list[CartLineView]
    delivery_address: Optional[DeliveryAddress]
    updated_at: datetime


class CheckoutSummary(ViewModel):
    subtotal: float
    discount: float
    tax: float
    delivery_fee: float
    total: float
    tax_rate: float
    tax_included_in_menu_prices: bool
    currency: str


class CheckoutPreparation(ViewModel):
    order_type: OrderType
    payment_method: PaymentMethod
    minimum_order_total: float
    delivery_address: Optional[DeliveryAddress]
    items: list[CartLineView]
    summary: CheckoutSummary


class Order(ViewModel):
    """A placed order. Frozen: nothing changes it after creation."""
    id: str
    user_id: str
    user_email: Optional[str]
    order_type: OrderType
    payment_method: PaymentMethod
    summary: CheckoutSummary
    minimum_order_total: float
    delivery_address: Optional[DeliveryAddress]
    items: tuple[CartLineView, ...]
    created_at: datetime
    status: OrderStatus = OrderStatus.ACCEPTED


class CartConfig(ViewModel):
    order_types: list[OrderType]
    tax_included_in_menu_prices: bool
    tax_rate: float
    currency: str


class CartResponse(ViewModel):
    cart: CartSnapshot
    config: CartConfig


class CartEnvelope(ViewModel):
    cart: CartSnapshot


class CheckoutEnvelope(ViewModel):
    checkout: CheckoutPreparation


class OrderEnvelope(ViewModel):
    order: Order


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    code: str
    message: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    catalog_service: str
    carts: int
    orders: int
    timestamp: datetime
