"""
Cart session: client-side mirror of a server cart.

Every mutation is followed by a full re-read of the cart, so `items` always
holds the last server-confirmed snapshot and never a local projection.

Features:
- Lazy, idempotent initialization (discovery + first cart fetch)
- Advisory `loading` flag, cleared on every exit path
- Optional single-flight queue for mutations (serialize_mutations=True)
- Optional session expiry carried in credential storage
"""
import asyncio
import contextlib
import time
from collections.abc import Mapping, MutableMapping
from datetime import timedelta
from typing import Any, Optional

import httpx

from storefront.api.discovery import StoreRoutes
from storefront.api.gateway import StoreGateway
from storefront.config import get_cart_ttl
from storefront.logging import get_logger, sanitize_string_for_logging
from storefront.services.money import Money

from .models import LineItem, SessionCredentials
from .schemas import (
    CheckoutPayload,
    NewLineItem,
    StoreCart,
    decode_cart,
    decode_checkout,
    decode_mutation,
    to_request_body,
)
from .storage import CredentialStore

logger = get_logger(__name__)


class CartSession:
    """
    One anonymous store cart, driven by one owner.

    Args:
        base_url: Shop address (front page or REST API root)
        storage: Mutable mapping holding cart_token / cart_nonce / cart_expires;
            prior values resume that cart
        client: Optional httpx.AsyncClient (left open on aclose)
        namespace: Store API namespace override
        session_ttl: Cart lifetime; None reads STOREFRONT_CART_TTL_HOURS,
            timedelta(0) disables expiry
        serialize_mutations: Queue initialization and mutating operations behind
            a per-session lock
    """

    def __init__(
        self,
        base_url: str,
        storage: Optional[MutableMapping[str, Any]] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        namespace: Optional[str] = None,
        session_ttl: Optional[timedelta] = None,
        serialize_mutations: bool = False,
    ):
        self.base_url = base_url
        self.items: list[LineItem] = []

        self._store = CredentialStore(storage)
        ttl = session_ttl if session_ttl is not None else get_cart_ttl()
        self._ttl = ttl if ttl is not None and ttl > timedelta(0) else None
        self.expires_at = self._resolve_expiry()

        self._gateway = StoreGateway(
            credentials=self._store.load(),
            store=self._store,
            client=client,
            namespace=namespace,
        )
        self._initialized = False
        self._busy_depth = 0
        self._lock = asyncio.Lock() if serialize_mutations else None

    # ==================== STATE ====================

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def loading(self) -> bool:
        """True while any operation is in flight. Advisory only."""
        return self._busy_depth > 0

    @property
    def credentials(self) -> SessionCredentials:
        return self._gateway.credentials

    @property
    def routes(self) -> Optional[StoreRoutes]:
        return self._gateway.routes

    @property
    def expired(self) -> bool:
        """Whether the stored cart session has outlived its TTL."""
        return self.expires_at is not None and time.time() > self.expires_at

    def _resolve_expiry(self) -> Optional[float]:
        """Drop an expired stored session and stamp a new expiry if none is stored."""
        if self._ttl is None:
            return None
        now = time.time()
        expires_at = self._store.load_expiry()
        if expires_at is not None and now > expires_at:
            logger.info("Stored cart session expired, starting a new cart")
            self._store.forget()
            expires_at = None
        if expires_at is None:
            expires_at = now + self._ttl.total_seconds()
        return expires_at

    @contextlib.contextmanager
    def _busy(self):
        self._busy_depth += 1
        try:
            yield
        finally:
            self._busy_depth -= 1

    @contextlib.asynccontextmanager
    async def _mutation(self):
        if self._lock is None:
            with self._busy():
                yield
            return
        async with self._lock:
            with self._busy():
                yield

    # ==================== SNAPSHOT ====================

    def _replace_items(self, cart: StoreCart) -> None:
        self.items = [
            LineItem.from_store_item(item, self, cart.currency_code)
            for item in cart.items
        ]

    async def _load_cart(self, routes: StoreRoutes) -> None:
        payload = await self._gateway.request(routes.cart())
        self._replace_items(decode_cart(payload))

    # ==================== OPERATIONS ====================

    async def init(self) -> StoreRoutes:
        """
        Discover the store and fetch the cart once.

        Later calls return the cached routes without any request. A failure
        leaves the session uninitialized so the next call starts over. With
        serialize_mutations, concurrent first calls share one fetch.

        Raises:
            DiscoveryError, TransportError, MalformedResponseError
        """
        if self._initialized and self._gateway.routes is not None:
            return self._gateway.routes

        if self._lock is None:
            return await self._initialize()
        async with self._lock:
            if self._initialized and self._gateway.routes is not None:
                return self._gateway.routes
            return await self._initialize()

    async def _initialize(self) -> StoreRoutes:
        with self._busy():
            routes = await self._gateway.discover(self.base_url)
            await self._load_cart(routes)
            if self.expires_at is not None:
                self._store.save_expiry(self.expires_at)
            self._initialized = True

        logger.info("Cart initialized with %d line items", len(self.items))
        return routes

    async def refresh(self) -> None:
        """Re-read the cart and replace `items` wholesale."""
        routes = await self.init()
        async with self._mutation():
            await self._load_cart(routes)

    async def add(self, item: NewLineItem | Mapping[str, Any]) -> None:
        """
        Add a product, then refresh.

        Merging with an existing line of the same product is the server's job.
        """
        routes = await self.init()
        async with self._mutation():
            payload = await self._gateway.request(routes.add_item(), "POST", to_request_body(item))
            decode_mutation(payload)
            await self._load_cart(routes)

    async def clear(self) -> None:
        """Delete every line item, then refresh."""
        routes = await self.init()
        async with self._mutation():
            payload = await self._gateway.request(routes.items(), "DELETE")
            decode_mutation(payload)
            await self._load_cart(routes)

    async def update_item_quantity(self, key: str, quantity: int) -> None:
        """Set a line's quantity, then refresh. Zero or less removes the line."""
        if quantity <= 0:
            await self.remove_item(key)
            return
        routes = await self.init()
        async with self._mutation():
            payload = await self._gateway.request(routes.item(key), "PATCH", {"quantity": quantity})
            decode_mutation(payload)
            await self._load_cart(routes)

    async def remove_item(self, key: str) -> None:
        """Delete one line by key, then refresh."""
        routes = await self.init()
        async with self._mutation():
            payload = await self._gateway.request(routes.item(key), "DELETE")
            decode_mutation(payload)
            await self._load_cart(routes)

    async def checkout(self, payload: CheckoutPayload | Mapping[str, Any]) -> str:
        """
        Place the order and return the payment redirect address.

        `items` is left as is: a created order is not a completed payment.
        Call refresh() to see what the server kept.
        """
        routes = await self.init()
        async with self._mutation():
            response = await self._gateway.request(routes.checkout(), "POST", to_request_body(payload))
            redirect_url = decode_checkout(response)
        logger.info("Checkout placed, redirecting to %s", sanitize_string_for_logging(redirect_url))
        return redirect_url

    def item(self, key: str) -> Optional[LineItem]:
        """First line item with this key, or None."""
        return next((line for line in self.items if line.key == key), None)

    # ==================== TOTALS ====================

    @property
    def currency(self) -> Optional[str]:
        """Currency of the first line; carts are single-currency. None when empty."""
        if not self.items:
            return None
        return self.items[0].currency_code

    def _sum(self, field_name: str) -> Optional[Money]:
        if not self.items:
            return None
        first = self.items[0]
        amount = sum(getattr(line, field_name) for line in self.items)
        return Money(amount, first.currency_code, first.currency_minor_unit, first.currency_symbol or None)

    @property
    def subtotal(self) -> Optional[Money]:
        return self._sum("subtotal_minor")

    @property
    def tax(self) -> Optional[Money]:
        return self._sum("tax_minor")

    @property
    def total(self) -> Optional[Money]:
        return self._sum("total_minor")

    @property
    def item_count(self) -> int:
        """Total units across all lines."""
        return sum(line.quantity for line in self.items)

    # ==================== LIFECYCLE ====================

    async def aclose(self) -> None:
        await self._gateway.aclose()

    async def __aenter__(self) -> "CartSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
