"""
FastAPI Application Entry Point

Food Storefront - cart and checkout API.

Endpoints:
    - GET    /api/cart: Cart snapshot plus pricing configuration
    - PATCH  /api/cart: Change the order type
    - POST   /api/cart/items: Add an item (merges identical lines)
    - PATCH  /api/cart/items/{cart_item_id}: Update a line
    - DELETE /api/cart/items/{cart_item_id}: Remove a line
    - POST   /api/checkout/preview: Price the cart for checkout
    - POST   /api/checkout/place: Place the order and reset the cart
    - GET    /api/orders/{order_id}: Fetch a placed order
    - GET    /health: System health check
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Optional

from fastapi import Body, Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.core.config import get_settings, setup_logging
from storefront.core.errors import StorefrontError
from storefront.models import OrderType
from storefront.schemas import (
    CartConfig,
    CartEnvelope,
    CartItemCreate,
    CartItemUpdate,
    CartPatch,
    CartResponse,
    CartSnapshot,
    CheckoutEnvelope,
    CheckoutRequest,
    ErrorResponse,
    HealthResponse,
    OrderEnvelope,
    error_from_validation,
)
from storefront.services.cart import CartStore, get_cart_store
from storefront.services.identity import (
    ROLE_ADMIN,
    ROLE_CUSTOMER,
    CallerIdentity,
    guest_cookie_options,
    require_user,
    resolve_caller_identity,
)

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Tax: {settings.tax_rate:.2%} ({'inclusive' if settings.tax_included_in_menu_prices else 'exclusive'})")
    logger.info("=" * 60)

    store = get_cart_store()
    logger.info(f"✅ Catalog Service: {store.catalog.provider_name}")
    logger.info(f"✅ Cart Repository: {type(store.repository).__name__}")

    yield  # Application runs

    logger.info("Shutting down...")
    stats = store.stats()
    logger.info(f"✅ Discarding {stats['carts']} carts and {stats['orders']} orders held in memory")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Cart and checkout API for a food-ordering storefront: per-customer "
        "carts, modifier validation, pricing and order placement."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# DEPENDENCIES & HELPERS
# =============================================================================

def caller_identity(request: Request) -> CallerIdentity:
    return resolve_caller_identity(request, settings)


def cart_config() -> CartConfig:
    return CartConfig(
        order_types=list(OrderType),
        tax_included_in_menu_prices=settings.tax_included_in_menu_prices,
        tax_rate=settings.tax_rate,
        currency=settings.currency,
    )


def with_guest_cookie(response: Response, identity: CallerIdentity) -> None:
    """Send the guest token back when one was minted for this request."""
    if identity.should_set_guest_cookie and identity.guest_token:
        response.set_cookie(
            settings.guest_cart_cookie_name,
            identity.guest_token,
            **guest_cookie_options(settings),
        )


def cart_response(cart: CartSnapshot) -> CartResponse:
    return CartResponse(cart=cart, config=cart_config())


ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"🍕 Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "cart": "/api/cart",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(store: CartStore = Depends(get_cart_store)) -> HealthResponse:
    """Verify the catalog is reachable and report in-memory counts."""
    catalog_status = "healthy" if await store.catalog.health_check() else "unhealthy"
    stats = store.stats()

    return HealthResponse(
        status="operational" if catalog_status == "healthy" else "degraded",
        catalog_service=catalog_status,
        carts=stats["carts"],
        orders=stats["orders"],
        timestamp=datetime.now(),
    )


# =============================================================================
# CART ENDPOINTS
# =============================================================================

@app.get("/api/cart", response_model=CartResponse, tags=["Cart"])
async def get_cart(
    response: Response,
    identity: CallerIdentity = Depends(caller_identity),
    store: CartStore = Depends(get_cart_store),
) -> CartResponse:
    """Current cart, re-priced against the live menu."""
    cart = await store.get_snapshot(identity.owner_key)
    with_guest_cookie(response, identity)
    return cart_response(cart)


@app.patch("/api/cart", response_model=CartResponse, responses=ERROR_RESPONSES, tags=["Cart"])
async def patch_cart(
    patch: CartPatch,
    response: Response,
    identity: CallerIdentity = Depends(caller_identity),
    store: CartStore = Depends(get_cart_store),
) -> CartResponse:
    """Change the cart's order type."""
    cart = await store.update_cart(identity.owner_key, patch)
    with_guest_cookie(response, identity)
    return cart_response(cart)


@app.post(
    "/api/cart/items",
    response_model=CartEnvelope,
    status_code=201,
    responses=ERROR_RESPONSES,
    tags=["Cart"],
)
async def add_cart_item(
    command: CartItemCreate,
    response: Response,
    identity: CallerIdentity = Depends(caller_identity),
    store: CartStore = Depends(get_cart_store),
) -> CartEnvelope:
    """Add an item; identical configurations merge into one line."""
    cart = await store.add_item(identity.owner_key, command)
    with_guest_cookie(response, identity)
    return CartEnvelope(cart=cart)


@app.patch(
    "/api/cart/items/{cart_item_id}",
    response_model=CartEnvelope,
    responses=ERROR_RESPONSES,
    tags=["Cart"],
)
async def update_cart_item(
    cart_item_id: str,
    patch: CartItemUpdate,
    response: Response,
    identity: CallerIdentity = Depends(caller_identity),
    store: CartStore = Depends(get_cart_store),
) -> CartEnvelope:
    """Update quantity, modifiers or instructions of a line."""
    cart = await store.update_cart_item(identity.owner_key, cart_item_id, patch)
    with_guest_cookie(response, identity)
    return CartEnvelope(cart=cart)


@app.delete(
    "/api/cart/items/{cart_item_id}",
    response_model=CartEnvelope,
    responses=ERROR_RESPONSES,
    tags=["Cart"],
)
async def delete_cart_item(
    cart_item_id: str,
    response: Response,
    identity: CallerIdentity = Depends(caller_identity),
    store: CartStore = Depends(get_cart_store),
) -> CartEnvelope:
    """Remove a line from the cart."""
    cart = await store.remove_cart_item(identity.owner_key, cart_item_id)
    with_guest_cookie(response, identity)
    return CartEnvelope(cart=cart)


# =============================================================================
# CHECKOUT ENDPOINTS
# =============================================================================

@app.post(
    "/api/checkout/preview",
    response_model=CheckoutEnvelope,
    responses=ERROR_RESPONSES,
    tags=["Checkout"],
)
async def preview_checkout(
    payload: Optional[CheckoutRequest] = Body(default=None),
    identity: CallerIdentity = Depends(caller_identity),
    store: CartStore = Depends(get_cart_store),
) -> CheckoutEnvelope:
    """Validate and price the cart for checkout without placing it."""
    user = require_user(identity, roles=(ROLE_CUSTOMER,), require_phone_verified=True)
    checkout = await store.preview_checkout(identity.owner_key, payload or CheckoutRequest(), user)
    return CheckoutEnvelope(checkout=checkout)


@app.post(
    "/api/checkout/place",
    response_model=OrderEnvelope,
    status_code=201,
    responses=ERROR_RESPONSES,
    tags=["Checkout"],
)
async def place_checkout(
    payload: Optional[CheckoutRequest] = Body(default=None),
    identity: CallerIdentity = Depends(caller_identity),
    store: CartStore = Depends(get_cart_store),
) -> OrderEnvelope:
    """Place the order and reset the cart. Payment is recorded, not charged."""
    user = require_user(identity, roles=(ROLE_CUSTOMER,), require_phone_verified=True)
    order = await store.place_checkout(identity.owner_key, payload or CheckoutRequest(), user)
    return OrderEnvelope(order=order)


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@app.get(
    "/api/orders/{order_id}",
    response_model=OrderEnvelope,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
)
async def get_order(
    order_id: str,
    identity: CallerIdentity = Depends(caller_identity),
    store: CartStore = Depends(get_cart_store),
) -> OrderEnvelope:
    """Get a placed order by its public id."""
    user = require_user(identity, roles=(ROLE_CUSTOMER, ROLE_ADMIN))
    return OrderEnvelope(order=await store.get_order(order_id, user))


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    """Typed cart, checkout and identity errors."""
    logger.debug(f"{request.method} {request.url.path} -> {exc.status} {exc.code}")
    return JSONResponse(status_code=exc.status, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request bodies that fail the schema boundary."""
    error = error_from_validation(list(exc.errors()))
    return JSONResponse(status_code=error.status, content=error.to_dict())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "code": "INTERNAL_ERROR",
            "message": "Unexpected server error.",
            "detail": str(exc) if settings.debug else None,
        },
    )
