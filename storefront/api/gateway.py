"""
Store API Gateway.

Owns the HTTP client and the session credentials. Every request carries the
current Cart-Token and Nonce; every response may rotate them. The gateway is
the only place credentials are written.
"""

import json
from typing import Any, Optional

import httpx

from storefront.api.discovery import StoreRoutes, discover_routes
from storefront.cart.models import SessionCredentials
from storefront.cart.storage import CredentialStore
from storefront.config import get_http_timeout
from storefront.errors import ERROR_TRANSPORT, TransportError
from storefront.logging import get_logger, sanitize_id_for_logging, sanitize_string_for_logging

logger = get_logger(__name__)

CART_TOKEN_HEADER = "Cart-Token"
NONCE_HEADER = "Nonce"


class StoreGateway:
    """Authenticated JSON request handler for the Store API."""

    def __init__(
        self,
        credentials: Optional[SessionCredentials] = None,
        store: Optional[CredentialStore] = None,
        client: Optional[httpx.AsyncClient] = None,
        namespace: Optional[str] = None,
        timeout: Optional[httpx.Timeout] = None,
    ):
        self.credentials = credentials or SessionCredentials()
        self.store = store
        self.namespace = namespace
        self._timeout = timeout
        self._routes: Optional[StoreRoutes] = None

        # Injected clients belong to the caller and are never closed here
        self._http_client = client
        self._owns_client = client is None

    @property
    def routes(self) -> Optional[StoreRoutes]:
        """Discovered endpoint builder, None until discover() succeeded."""
        return self._routes

    def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of the owned httpx client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self._timeout or get_http_timeout(),
                follow_redirects=True,
            )
        return self._http_client

    async def discover(self, base_url: str) -> StoreRoutes:
        """
        Resolve and cache the Store API routes.

        Repeated calls return the cached handle without network traffic.

        Raises:
            DiscoveryError: If the store cannot be resolved
        """
        if self._routes is None:
            self._routes = await discover_routes(self._get_http_client(), base_url, self.namespace)
        return self._routes

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.credentials.token:
            headers[CART_TOKEN_HEADER] = self.credentials.token
        if self.credentials.nonce:
            headers[NONCE_HEADER] = self.credentials.nonce
        return headers

    def _absorb_credentials(self, response: httpx.Response) -> None:
        """Last-write-wins: returned values replace ours, absent ones keep ours."""
        token = response.headers.get(CART_TOKEN_HEADER)
        nonce = response.headers.get(NONCE_HEADER)

        if token:
            if token != self.credentials.token:
                logger.debug("Cart token rotated: %s", sanitize_id_for_logging(token))
            self.credentials.token = token
            if self.store is not None:
                self.store.save_token(token)
        if nonce:
            self.credentials.nonce = nonce
            if self.store is not None:
                self.store.save_nonce(nonce)

    async def request(self, url: str, method: str = "GET", body: Any = None) -> Any:
        """
        Perform one authenticated JSON exchange.

        Non-2xx statuses are not errors here: the Store API puts its error
        envelope in the body, and the caller decides what shape it needs.

        Args:
            url: Absolute endpoint address
            method: HTTP method
            body: JSON-serializable payload, omitted when None

        Returns:
            Parsed JSON body, or None if the body is empty or not JSON

        Raises:
            TransportError: If the body cannot be JSON-encoded or the HTTP
                exchange itself fails
        """
        method = method.upper()
        client = self._get_http_client()
        logger.debug("%s %s", method, sanitize_string_for_logging(url))

        try:
            content = None if body is None else json.dumps(body)
        except (TypeError, ValueError) as e:
            logger.error("%s %s body is not JSON serializable: %s", method, sanitize_string_for_logging(url), e)
            raise TransportError(f"{ERROR_TRANSPORT}: {method} {url}: {e!s}") from e

        try:
            response = await client.request(method, url, headers=self._headers(), content=content)
        except httpx.RequestError as e:
            logger.error("%s %s failed", method, sanitize_string_for_logging(url), exc_info=True)
            raise TransportError(f"{ERROR_TRANSPORT}: {method} {url}: {e!s}") from e
        except httpx.InvalidURL as e:
            raise TransportError(f"{ERROR_TRANSPORT}: {method} {url}: {e!s}") from e

        self._absorb_credentials(response)

        try:
            return response.json()
        except ValueError:
            if response.content:
                logger.warning(
                    "%s %s returned non-JSON body (status %s)",
                    method,
                    sanitize_string_for_logging(url),
                    response.status_code,
                )
            return None

    async def aclose(self) -> None:
        """Close the owned HTTP client; injected clients are left to their owner."""
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
