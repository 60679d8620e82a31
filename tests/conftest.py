"""Pytest configuration and fixtures"""
import copy
import json
import os
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import unquote

import httpx
import pytest
import pytest_asyncio

# Deterministic session lifetime regardless of the caller environment
os.environ.setdefault("STOREFRONT_CART_TTL_HOURS", "48")

BASE_URL = "https://shop.test"
API_ROOT = "https://shop.test/wp-json/"
STORE_PATH = "/wp-json/wc/store/v1"


def make_item(
    key: str,
    product_id: int,
    quantity: int = 1,
    price: int = 1000,
    tax: int = 0,
    currency: str = "EUR",
) -> Dict[str, Any]:
    """Cart line in the shape the Store API returns (amounts as strings)."""
    subtotal = price * quantity
    return {
        "id": product_id,
        "key": key,
        "name": f"Product {product_id}",
        "quantity": quantity,
        "images": [
            {
                "id": product_id,
                "src": f"{BASE_URL}/img/{product_id}.jpg",
                "thumbnail": f"{BASE_URL}/img/{product_id}-150x150.jpg",
                "name": "",
                "alt": "",
            }
        ],
        "prices": {"price": str(price), "currency_code": currency},
        "totals": {
            "line_subtotal": str(subtotal),
            "line_subtotal_tax": str(tax),
            "line_total": str(subtotal + tax),
            "line_total_tax": str(tax),
            "currency_code": currency,
            "currency_symbol": "€" if currency == "EUR" else "$",
            "currency_minor_unit": 2,
        },
    }


class FakeStore:
    """
    In-memory Store API behind httpx.MockTransport.

    Records every request so tests can assert on the exact exchange sequence.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.items: List[Dict[str, Any]] = []
        self.prices: Dict[int, int] = {7: 500, 8: 1200, 9: 250}
        self.namespaces = ["wc/v3", "wc/store/v1"]
        self.issue_token: Optional[str] = None
        self.issue_nonce: Optional[str] = None
        self.empty_cart_body = False
        self.fail_on: set = set()
        self.error_on: Dict[Tuple[str, str], Tuple[int, Dict[str, Any]]] = {}
        self.on_request: Optional[Callable[[httpx.Request], None]] = None

    @property
    def calls(self) -> List[Tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.requests]

    @property
    def cart_calls(self) -> List[Tuple[str, str]]:
        """Calls against the store namespace, without discovery traffic."""
        return [c for c in self.calls if c[1].startswith(STORE_PATH)]

    def cart_body(self) -> Dict[str, Any]:
        return {
            "items": copy.deepcopy(self.items),
            "items_count": sum(i["quantity"] for i in self.items),
            "totals": {"currency_code": "EUR", "currency_symbol": "€", "currency_minor_unit": 2},
        }

    def _headers(self) -> Dict[str, str]:
        headers = {}
        if self.issue_token:
            headers["Cart-Token"] = self.issue_token
        if self.issue_nonce:
            headers["Nonce"] = self.issue_nonce
        return headers

    def _set_quantity(self, product_id: int, quantity: int) -> None:
        for item in self.items:
            if item["id"] == product_id:
                self.items[self.items.index(item)] = make_item(
                    item["key"], product_id, quantity, self.prices.get(product_id, 1000)
                )
                return
        key = f"key-{product_id}"
        self.items.append(make_item(key, product_id, quantity, self.prices.get(product_id, 1000)))

    def _find(self, key: str) -> Optional[Dict[str, Any]]:
        return next((i for i in self.items if i["key"] == key), None)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.on_request is not None:
            self.on_request(request)

        method, path = request.method, request.url.path
        headers = self._headers()

        if (method, path) in self.fail_on:
            raise httpx.ConnectError("connection refused", request=request)
        if (method, path) in self.error_on:
            status, body = self.error_on[(method, path)]
            return httpx.Response(status, json=body, headers=headers)

        if path == "/":
            headers["Link"] = f'<{API_ROOT}>; rel="https://api.w.org/"'
            return httpx.Response(200, text="<html>shop</html>", headers=headers)
        if path == "/wp-json/":
            return httpx.Response(200, json={"name": "Test shop", "namespaces": self.namespaces, "routes": {}})

        if path == f"{STORE_PATH}/cart" and method == "GET":
            if self.empty_cart_body:
                return httpx.Response(200, content=b"", headers=headers)
            return httpx.Response(200, json=self.cart_body(), headers=headers)

        if path == f"{STORE_PATH}/cart/add-item" and method == "POST":
            data = json.loads(request.content)
            existing = next((i for i in self.items if i["id"] == data["id"]), None)
            quantity = data.get("quantity", 1) + (existing["quantity"] if existing else 0)
            self._set_quantity(data["id"], quantity)
            return httpx.Response(201, json=self.cart_body(), headers=headers)

        if path == f"{STORE_PATH}/cart/items" and method == "DELETE":
            self.items = []
            return httpx.Response(200, json=[], headers=headers)

        if path.startswith(f"{STORE_PATH}/cart/items/"):
            raw_path = request.url.raw_path.decode("ascii").split("?", 1)[0]
            key = unquote(raw_path.rsplit("/", 1)[1])
            item = self._find(key)
            if item is None:
                return httpx.Response(
                    409,
                    json={
                        "code": "woocommerce_rest_cart_invalid_key",
                        "message": "Cart item does not exist.",
                        "data": {"status": 409},
                    },
                    headers=headers,
                )
            if method == "PATCH":
                data = json.loads(request.content)
                self._set_quantity(item["id"], data["quantity"])
                return httpx.Response(200, json=self._find(key), headers=headers)
            if method == "DELETE":
                self.items.remove(item)
                return httpx.Response(204, headers=headers)

        if path == f"{STORE_PATH}/checkout" and method == "POST":
            return httpx.Response(
                200,
                json={
                    "order_id": 42,
                    "status": "pending",
                    "payment_result": {
                        "payment_status": "pending",
                        "payment_details": [],
                        "redirect_url": "https://pay.test/order/42",
                    },
                },
                headers=headers,
            )

        return httpx.Response(
            404,
            json={"code": "rest_no_route", "message": "No route was found", "data": {"status": 404}},
        )


@pytest.fixture
def fake_store():
    """Store API with two lines in the cart"""
    store = FakeStore()
    store.items = [
        make_item("abc", 7, quantity=2, price=500),
        make_item("def", 9, quantity=1, price=250),
    ]
    return store


@pytest_asyncio.fixture
async def http_client(fake_store):
    """httpx client routed to the fake store"""
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_store.handler))
    yield client
    await client.aclose()


@pytest.fixture
def storage():
    """Credential storage bag"""
    return {}


@pytest.fixture
def cart(http_client, storage):
    """Cart session bound to the fake store"""
    from storefront.cart.service import CartSession

    return CartSession(BASE_URL, storage, client=http_client)
