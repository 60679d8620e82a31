"""Store API access: endpoint discovery and the authenticated request gateway."""
from .discovery import StoreRoutes, discover_routes
from .gateway import StoreGateway

__all__ = ["StoreRoutes", "StoreGateway", "discover_routes"]
