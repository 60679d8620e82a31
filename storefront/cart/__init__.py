"""
Cart package: session, line items, payload schemas, credential storage.

Note: Imports are lazy; storefront.api.gateway imports cart.models and
cart.storage while cart.service imports the gateway.
"""

__all__ = [
    "CartSession",
    "LineItem",
    "SessionCredentials",
    "CredentialStore",
    "NewLineItem",
    "CheckoutPayload",
    "Address",
]


def __getattr__(name):
    """Lazy attribute access to break the cart <-> gateway import cycle."""
    if name == "CartSession":
        from .service import CartSession
        return CartSession
    elif name in ("LineItem", "SessionCredentials"):
        from . import models
        return getattr(models, name)
    elif name == "CredentialStore":
        from .storage import CredentialStore
        return CredentialStore
    elif name in ("NewLineItem", "CheckoutPayload", "Address"):
        from . import schemas
        return getattr(schemas, name)
    raise AttributeError(f"module 'storefront.cart' has no attribute '{name}'")
