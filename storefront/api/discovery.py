"""
Store API endpoint discovery.

WordPress advertises its REST API root through a Link header on every page:

    Link: <https://shop.example/wp-json/>; rel="https://api.w.org/"

The index served at that root lists the registered namespaces. Discovery
succeeds once the Store API namespace is confirmed there, and yields a
StoreRoutes handle that builds every address the cart needs.
"""

from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import httpx

from storefront.config import get_api_namespace
from storefront.errors import (
    DiscoveryError,
    ERROR_DISCOVERY_INDEX_INVALID,
    ERROR_DISCOVERY_NAMESPACE_MISSING,
    ERROR_DISCOVERY_NETWORK,
    ERROR_DISCOVERY_NO_API_LINK,
)
from storefront.logging import get_logger, sanitize_string_for_logging

logger = get_logger(__name__)

API_LINK_REL = "https://api.w.org/"


@dataclass(frozen=True)
class StoreRoutes:
    """Builds Store API addresses from a discovered API root."""
    api_root: str
    namespace: str

    @property
    def base(self) -> str:
        return f"{self.api_root.rstrip('/')}/{self.namespace.strip('/')}"

    def cart(self) -> str:
        return f"{self.base}/cart"

    def add_item(self) -> str:
        return f"{self.base}/cart/add-item"

    def items(self) -> str:
        return f"{self.base}/cart/items"

    def item(self, key: str) -> str:
        return f"{self.items()}/{quote(str(key), safe='')}"

    def checkout(self) -> str:
        return f"{self.base}/checkout"


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _is_api_index(data: Any) -> bool:
    return isinstance(data, dict) and isinstance(data.get("namespaces"), list)


def _find_api_root(response: httpx.Response) -> Optional[str]:
    """Resolve the API root from a page's Link header."""
    link = response.links.get(API_LINK_REL)
    if not link or not link.get("url"):
        return None
    return str(response.url.join(link["url"]))


async def discover_routes(
    client: httpx.AsyncClient,
    base_url: str,
    namespace: Optional[str] = None,
) -> StoreRoutes:
    """
    Resolve the Store API routes behind a shop's base address.

    Args:
        client: HTTP client used for the discovery requests
        base_url: Shop front page or REST API root
        namespace: Store API namespace (default from config)

    Returns:
        StoreRoutes handle

    Raises:
        DiscoveryError: If no API root can be found, the index is unreadable,
            the namespace is not registered, or the network fails
    """
    namespace = (namespace or get_api_namespace()).strip("/")

    try:
        response = await client.get(base_url, headers={"Accept": "application/json"})
        index = _json_or_none(response)
        api_root = str(response.url)

        if not _is_api_index(index):
            api_root = _find_api_root(response)
            if not api_root:
                logger.error("Discovery failed: no API link at %s", sanitize_string_for_logging(base_url))
                raise DiscoveryError(f"{ERROR_DISCOVERY_NO_API_LINK}: {base_url}")
            response = await client.get(api_root, headers={"Accept": "application/json"})
            index = _json_or_none(response)
    except httpx.RequestError as e:
        logger.error("Discovery request failed for %s", sanitize_string_for_logging(base_url), exc_info=True)
        raise DiscoveryError(f"{ERROR_DISCOVERY_NETWORK}: {e!s}") from e
    except httpx.InvalidURL as e:
        raise DiscoveryError(f"{ERROR_DISCOVERY_NETWORK}: {e!s}") from e

    if not _is_api_index(index):
        raise DiscoveryError(f"{ERROR_DISCOVERY_INDEX_INVALID}: {api_root}")

    if namespace not in index["namespaces"]:
        logger.error(
            "Discovery failed: namespace %s not in %s", namespace, sanitize_string_for_logging(api_root)
        )
        raise DiscoveryError(f"{ERROR_DISCOVERY_NAMESPACE_MISSING}: {namespace}")

    logger.info("Store API discovered at %s (%s)", sanitize_string_for_logging(api_root), namespace)
    return StoreRoutes(api_root=api_root, namespace=namespace)
