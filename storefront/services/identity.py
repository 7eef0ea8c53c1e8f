"""
Caller Identity

Works out whose cart a request touches. Authentication itself happens
upstream: the auth gateway forwards the verified session as trusted headers.
Requests without a session get a guest cart keyed by a random token kept in
a cookie.

Owner keys:
    user:<user id>      authenticated customers
    guest:<token>       everyone else
"""

import logging
import re
import uuid
from dataclasses import dataclass
from typing import Any, Optional

from storefront.core.config import Settings, get_settings
from storefront.core.errors import (
    AuthError,
    AUTH_REQUIRED,
    PHONE_VERIFICATION_REQUIRED,
    ROLE_FORBIDDEN,
)

logger = logging.getLogger(__name__)

GUEST_TOKEN_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{10,120}$")

ROLE_CUSTOMER = "CUSTOMER"
ROLE_ADMIN = "ADMIN"

HEADER_USER_ID = "x-user-id"
HEADER_USER_EMAIL = "x-user-email"
HEADER_USER_ROLE = "x-user-role"
HEADER_PHONE_VERIFIED = "x-user-phone-verified"
HEADER_ADDRESS_LINE1 = "x-user-address-line1"
HEADER_ADDRESS_CITY = "x-user-address-city"

TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class SessionUser:
    """
    The authenticated user as seen by the cart.

    Attributes:
        id: User identifier
        email: Recorded on placed orders
        role: CUSTOMER or ADMIN
        phone_verified: Checkout requires a verified phone
        address_line1: Saved address, used as a delivery fallback
        address_city: Saved address city
    """
    id: str
    email: Optional[str] = None
    role: str = ROLE_CUSTOMER
    phone_verified: bool = False
    address_line1: Optional[str] = None
    address_city: Optional[str] = None


@dataclass(frozen=True)
class CallerIdentity:
    owner_key: str
    user: Optional[SessionUser] = None
    guest_token: Optional[str] = None
    should_set_guest_cookie: bool = False


def _header(headers: Any, name: str) -> Optional[str]:
    value = headers.get(name)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def read_session_user(headers: Any) -> Optional[SessionUser]:
    """Build the session user from gateway headers, or None for anonymous requests."""
    user_id = _header(headers, HEADER_USER_ID)
    if not user_id:
        return None

    return SessionUser(
        id=user_id,
        email=_header(headers, HEADER_USER_EMAIL),
        role=(_header(headers, HEADER_USER_ROLE) or ROLE_CUSTOMER).upper(),
        phone_verified=(_header(headers, HEADER_PHONE_VERIFIED) or "").lower() in TRUTHY,
        address_line1=_header(headers, HEADER_ADDRESS_LINE1),
        address_city=_header(headers, HEADER_ADDRESS_CITY),
    )


def normalize_guest_token(value: Any) -> Optional[str]:
    raw = str(value or "").strip()
    if not raw or not GUEST_TOKEN_PATTERN.match(raw):
        return None
    return raw


def resolve_caller_identity(request: Any, settings: Optional[Settings] = None) -> CallerIdentity:
    """
    Resolve the owner key for a request.

    Args:
        request: Anything with ``headers`` and ``cookies`` mappings
            (a Starlette request in the API)

    Returns:
        CallerIdentity: ``should_set_guest_cookie`` is True when a new guest
        token was minted and has to be sent back
    """
    settings = settings or get_settings()

    user = read_session_user(request.headers)
    if user is not None:
        return CallerIdentity(owner_key=f"user:{user.id}", user=user)

    existing = normalize_guest_token(request.cookies.get(settings.guest_cart_cookie_name))
    if existing:
        return CallerIdentity(owner_key=f"guest:{existing}", guest_token=existing)

    token = uuid.uuid4().hex
    logger.debug(f"Minted guest cart token {token[:8]}...")
    return CallerIdentity(
        owner_key=f"guest:{token}",
        guest_token=token,
        should_set_guest_cookie=True,
    )


def require_user(
    identity: CallerIdentity,
    roles: tuple[str, ...] = (ROLE_CUSTOMER,),
    require_phone_verified: bool = False,
) -> SessionUser:
    """
    Ensure the caller is signed in with an allowed role.

    Raises:
        AuthError: ``AUTH_REQUIRED`` (401), ``ROLE_FORBIDDEN`` or
            ``PHONE_VERIFICATION_REQUIRED`` (403)
    """
    user = identity.user
    if user is None:
        raise AuthError("Authentication required.", 401, AUTH_REQUIRED)
    if roles and user.role not in roles:
        raise AuthError("You do not have access to this resource.", 403, ROLE_FORBIDDEN)
    if require_phone_verified and not user.phone_verified:
        raise AuthError("Phone verification is required.", 403, PHONE_VERIFICATION_REQUIRED)
    return user


def guest_cookie_options(settings: Optional[Settings] = None) -> dict[str, Any]:
    """Keyword arguments for ``Response.set_cookie`` when storing the guest token."""
    settings = settings or get_settings()
    return {
        "httponly": True,
        "samesite": "lax",
        "secure": settings.is_production,
        "path": "/",
        "max_age": settings.guest_cart_cookie_max_age,
    }
