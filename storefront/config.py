"""
Store client configuration.

Values are read from the environment once at import time. Every value can be
overridden by passing the matching argument to StoreGateway / CartSession;
explicit arguments always win.

Environment Variables:
- STOREFRONT_API_NAMESPACE: Store API namespace (default "wc/store/v1")
- STOREFRONT_HTTP_TIMEOUT: Read/write timeout in seconds (default 10)
- STOREFRONT_HTTP_CONNECT_TIMEOUT: Connect timeout in seconds (default 5)
- STOREFRONT_CART_TTL_HOURS: Cart session lifetime, 0 disables expiry (default 48)
"""

import os
from datetime import timedelta
from typing import Optional

import httpx

DEFAULT_API_NAMESPACE = "wc/store/v1"
DEFAULT_CART_TTL_HOURS = 48

STOREFRONT_API_NAMESPACE = os.environ.get("STOREFRONT_API_NAMESPACE", DEFAULT_API_NAMESPACE)
STOREFRONT_HTTP_TIMEOUT = os.environ.get("STOREFRONT_HTTP_TIMEOUT", "10.0")
STOREFRONT_HTTP_CONNECT_TIMEOUT = os.environ.get("STOREFRONT_HTTP_CONNECT_TIMEOUT", "5.0")
STOREFRONT_CART_TTL_HOURS = os.environ.get("STOREFRONT_CART_TTL_HOURS", str(DEFAULT_CART_TTL_HOURS))


def _to_float(value: str, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def get_api_namespace() -> str:
    """Store API namespace, without surrounding slashes."""
    return (STOREFRONT_API_NAMESPACE or DEFAULT_API_NAMESPACE).strip("/")


def get_http_timeout() -> httpx.Timeout:
    """Timeout policy handed to the transport; the cart itself never times out."""
    timeout = _to_float(STOREFRONT_HTTP_TIMEOUT, 10.0)
    connect = _to_float(STOREFRONT_HTTP_CONNECT_TIMEOUT, 5.0)
    return httpx.Timeout(timeout, connect=connect)


def get_cart_ttl() -> Optional[timedelta]:
    """
    Cart session lifetime.

    Returns:
        timedelta, or None when expiry is disabled (0 or negative hours)
    """
    hours = _to_float(STOREFRONT_CART_TTL_HOURS, float(DEFAULT_CART_TTL_HOURS))
    if hours <= 0:
        return None
    return timedelta(hours=hours)
