"""
Storefront errors.

Message constants are shared between raise sites and tests; the exception
classes mirror the failure kinds a cart operation can surface.
"""

from typing import Any, Optional

# Discovery
ERROR_DISCOVERY_NO_API_LINK = "No REST API link found at base address"
ERROR_DISCOVERY_INDEX_INVALID = "REST API index is not a JSON object"
ERROR_DISCOVERY_NAMESPACE_MISSING = "Store API namespace not available"
ERROR_DISCOVERY_NETWORK = "Endpoint discovery request failed"

# Transport
ERROR_TRANSPORT = "HTTP exchange failed"

# Payloads
ERROR_EMPTY_RESPONSE = "Expected a JSON body, got none"
ERROR_INVALID_CART = "Cart payload does not match the expected shape"
ERROR_INVALID_CHECKOUT = "Checkout payload does not match the expected shape"


class StorefrontError(Exception):
    """Base class for all storefront client errors."""


class DiscoveryError(StorefrontError):
    """Endpoint resolution failed; the session cannot start."""


class TransportError(StorefrontError):
    """The HTTP exchange itself failed (network, invalid request setup)."""


class MalformedResponseError(StorefrontError):
    """A body required by the operation was missing or had the wrong shape."""


class StoreApiError(MalformedResponseError):
    """
    The store answered with its JSON error envelope instead of a resource.

    The Store API reports most failures (out of stock, invalid nonce, unknown
    item key) as {"code": ..., "message": ..., "data": {"status": ...}}
    rather than relying on the HTTP status alone.
    """

    def __init__(self, code: str, message: str, status: Optional[int] = None, data: Any = None):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message
        self.status = status
        self.data = data
