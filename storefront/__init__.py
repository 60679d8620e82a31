"""
Storefront Cart Client

Client-side session manager for a headless store cart:
- api: endpoint discovery and the authenticated request gateway
- cart: cart session, line items, payload schemas, credential storage
- services: money helpers
- utils: signing helpers

Note: Imports are lazy so that importing one submodule does not load the
whole package.
"""

__all__ = [
    "CartSession",
    "LineItem",
    "StoreGateway",
    "Money",
]


def __getattr__(name):
    """Lazy attribute access for the public entry points."""
    if name == "CartSession":
        from storefront.cart.service import CartSession
        return CartSession
    elif name == "LineItem":
        from storefront.cart.models import LineItem
        return LineItem
    elif name == "StoreGateway":
        from storefront.api.gateway import StoreGateway
        return StoreGateway
    elif name == "Money":
        from storefront.services.money import Money
        return Money
    raise AttributeError(f"module 'storefront' has no attribute '{name}'")
