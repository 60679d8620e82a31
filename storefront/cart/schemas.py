"""
Store API payload schemas.

Every assumption about the server's JSON lives here: one pydantic model per
payload and one decode function per endpoint. A contract change fails in
this module with MalformedResponseError instead of at attribute access.
"""
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from storefront.errors import (
    ERROR_EMPTY_RESPONSE,
    ERROR_INVALID_CART,
    ERROR_INVALID_CHECKOUT,
    MalformedResponseError,
    StoreApiError,
)
from storefront.logging import get_logger, sanitize_string_for_logging

logger = get_logger(__name__)


# ==================== RESPONSE MODELS ====================

class ItemImage(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int | None = None
    src: str
    thumbnail: str | None = None
    name: str = ""
    alt: str = ""


class ItemPrices(BaseModel):
    """Unit prices, integer minor units (sent as strings by the store)."""
    model_config = ConfigDict(extra="ignore")

    price: int
    regular_price: int | None = None
    sale_price: int | None = None
    currency_code: str | None = None


class ItemTotals(BaseModel):
    """Line totals, integer minor units."""
    model_config = ConfigDict(extra="ignore")

    line_subtotal: int
    line_subtotal_tax: int = 0
    line_total: int
    line_total_tax: int = 0
    currency_code: str | None = None
    currency_symbol: str = ""
    currency_minor_unit: int = 2


class StoreCartItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    key: str
    name: str = ""
    quantity: int = Field(..., ge=0)
    images: list[ItemImage] = []
    prices: ItemPrices
    totals: ItemTotals

    @field_validator("images", mode="before")
    @classmethod
    def _null_images(cls, value: Any) -> Any:
        return [] if value is None else value


class CartTotals(BaseModel):
    model_config = ConfigDict(extra="ignore")

    currency_code: str | None = None
    currency_symbol: str = ""
    currency_minor_unit: int = 2
    total_items: int = 0
    total_items_tax: int = 0
    total_price: int = 0
    total_tax: int = 0


class StoreCart(BaseModel):
    model_config = ConfigDict(extra="ignore")

    items: list[StoreCartItem] = []
    items_count: int = 0
    totals: CartTotals | None = None

    @field_validator("items", mode="before")
    @classmethod
    def _null_items(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def currency_code(self) -> Optional[str]:
        return self.totals.currency_code if self.totals else None


class PaymentResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    payment_status: str = ""
    payment_details: list[dict[str, Any]] = []
    redirect_url: str


class CheckoutResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    order_id: int | None = None
    status: str = ""
    payment_result: PaymentResult


# ==================== REQUEST MODELS ====================

class NewLineItem(BaseModel):
    """Body of POST cart/add-item."""
    id: int
    quantity: int = Field(1, ge=1)
    variation: list[dict[str, Any]] | None = None


class Address(BaseModel):
    first_name: str = ""
    last_name: str = ""
    company: str = ""
    address_1: str = ""
    address_2: str = ""
    city: str = ""
    state: str = ""
    postcode: str = ""
    country: str = ""
    email: str | None = None
    phone: str | None = None


class CheckoutPayload(BaseModel):
    """Body of POST checkout."""
    billing_address: Address
    shipping_address: Address | None = None
    payment_method: str
    payment_data: list[dict[str, Any]] = []
    customer_note: str = ""


def to_request_body(payload: BaseModel | Mapping[str, Any]) -> dict[str, Any]:
    """Serialize a request model (or pass a plain mapping through) as a JSON body."""
    if isinstance(payload, BaseModel):
        return payload.model_dump(exclude_none=True)
    return dict(payload)


# ==================== DECODERS ====================

def _raise_for_store_error(payload: Any) -> None:
    """Raise StoreApiError if the payload is the store's error envelope."""
    if not isinstance(payload, dict):
        return
    code = payload.get("code")
    message = payload.get("message")
    if not isinstance(code, str) or not isinstance(message, str):
        return
    data = payload.get("data")
    status = data.get("status") if isinstance(data, dict) else None
    logger.warning("Store API error %s: %s", code, sanitize_string_for_logging(message))
    raise StoreApiError(code, message, status if isinstance(status, int) else None, data)


def decode_cart(payload: Any) -> StoreCart:
    """
    Decode the body of GET cart (and of mutations that echo the cart).

    Raises:
        StoreApiError: If the store returned its error envelope
        MalformedResponseError: If the body is missing or has the wrong shape
    """
    if payload is None:
        raise MalformedResponseError(f"{ERROR_EMPTY_RESPONSE}: cart")
    _raise_for_store_error(payload)
    try:
        return StoreCart.model_validate(payload)
    except ValidationError as e:
        raise MalformedResponseError(f"{ERROR_INVALID_CART}: {e}") from e


def decode_checkout(payload: Any) -> str:
    """
    Decode the body of POST checkout.

    Returns:
        Payment redirect address (may be empty for offline payment methods)
    """
    if payload is None:
        raise MalformedResponseError(f"{ERROR_EMPTY_RESPONSE}: checkout")
    _raise_for_store_error(payload)
    try:
        result = CheckoutResult.model_validate(payload)
    except ValidationError as e:
        raise MalformedResponseError(f"{ERROR_INVALID_CHECKOUT}: {e}") from e
    return result.payment_result.redirect_url


def decode_mutation(payload: Any) -> None:
    """
    Check the body of a cart mutation (add, clear, update, remove).

    The body itself is discarded since a full refresh follows; only the
    error envelope matters. An empty body is fine.
    """
    _raise_for_store_error(payload)
