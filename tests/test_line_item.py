"""
Tests for LineItem snapshots and their mutations
"""

import json

import pytest

from storefront.cart.models import LineItem
from storefront.cart.schemas import StoreCartItem
from storefront.errors import StoreApiError
from storefront.services.money import Money

from .conftest import STORE_PATH, make_item

CART = ("GET", f"{STORE_PATH}/cart")


def _item_path(key: str) -> str:
    return f"{STORE_PATH}/cart/items/{key}"


class TestLineItemMutations:
    """Each mutation is one PATCH/DELETE followed by a cart refresh."""

    @pytest.mark.asyncio
    async def test_increase_patches_then_refreshes(self, cart, fake_store):
        """Test increase patches quantity + 1 and refreshes."""
        await cart.init()
        line = cart.item("abc")
        fake_store.requests.clear()

        await line.increase()

        assert fake_store.calls == [("PATCH", _item_path("abc")), CART]
        assert json.loads(fake_store.requests[0].content) == {"quantity": 3}
        assert cart.item("abc").quantity == 3

    @pytest.mark.asyncio
    async def test_old_instance_is_stale_after_mutation(self, cart):
        """Test the mutated instance is replaced, not updated."""
        await cart.init()
        line = cart.item("abc")

        await line.increase()

        assert line.quantity == 2
        assert cart.item("abc") is not line
        assert cart.item("abc").subtotal_minor == 1500

    @pytest.mark.asyncio
    async def test_decrease_patches_lower_quantity(self, cart, fake_store):
        """Test decrease patches quantity - 1."""
        await cart.init()
        fake_store.requests.clear()

        await cart.item("abc").decrease()

        assert fake_store.calls == [("PATCH", _item_path("abc")), CART]
        assert json.loads(fake_store.requests[0].content) == {"quantity": 1}
        assert cart.item("abc").quantity == 1

    @pytest.mark.asyncio
    async def test_decrease_last_unit_deletes(self, cart, fake_store):
        """Test decreasing the last unit deletes the line."""
        await cart.init()
        line = cart.item("def")
        assert line.quantity == 1
        fake_store.requests.clear()

        await line.decrease()

        assert fake_store.calls == [("DELETE", _item_path("def")), CART]
        assert all(r.method != "PATCH" for r in fake_store.requests)
        assert cart.item("def") is None

    @pytest.mark.asyncio
    async def test_remove_deletes_line(self, cart, fake_store):
        """Test remove deletes the line and refreshes."""
        await cart.init()
        fake_store.requests.clear()

        await cart.item("abc").remove()

        assert fake_store.calls == [("DELETE", _item_path("abc")), CART]
        assert [line.key for line in cart.items] == ["def"]

    @pytest.mark.asyncio
    async def test_update_to_zero_removes(self, cart, fake_store):
        """Test updating quantity to zero deletes the line."""
        await cart.init()
        fake_store.requests.clear()

        await cart.update_item_quantity("abc", 0)

        assert fake_store.calls == [("DELETE", _item_path("abc")), CART]

    @pytest.mark.asyncio
    async def test_item_key_is_url_quoted(self, cart, fake_store):
        """Test a key with a slash is quoted in the item URL."""
        fake_store.items = [make_item("a/b", 7, quantity=2, price=500)]
        await cart.init()
        fake_store.requests.clear()

        await cart.item("a/b").remove()

        assert fake_store.requests[0].url.raw_path.decode().endswith("/cart/items/a%2Fb")
        assert cart.items == []

    @pytest.mark.asyncio
    async def test_stale_key_raises_store_error_without_refresh(self, cart, fake_store):
        """Test mutating a line the server already dropped keeps the last snapshot."""
        await cart.init()
        line = cart.item("abc")
        before = list(cart.items)
        fake_store.items = [i for i in fake_store.items if i["key"] != "abc"]
        fake_store.requests.clear()

        with pytest.raises(StoreApiError) as exc_info:
            await line.increase()

        assert exc_info.value.code == "woocommerce_rest_cart_invalid_key"
        assert exc_info.value.status == 409
        assert fake_store.calls == [("PATCH", _item_path("abc"))]
        assert cart.loading is False
        assert cart.items == before

    @pytest.mark.asyncio
    async def test_loading_cleared_after_mutation(self, cart):
        """Test loading is cleared after a line mutation."""
        await cart.init()

        await cart.item("abc").increase()

        assert cart.loading is False

    @pytest.mark.asyncio
    async def test_detached_line_item_cannot_mutate(self):
        """Test a line item without a cart cannot mutate."""
        line = LineItem.from_store_item(StoreCartItem.model_validate(make_item("abc", 7)))

        with pytest.raises(RuntimeError):
            await line.increase()


class TestLineItemValues:
    """Tests for monetary views of a line."""

    def test_money_properties(self):
        """Test money views of a line."""
        line = LineItem.from_store_item(
            StoreCartItem.model_validate(make_item("abc", 7, quantity=2, price=500, tax=210))
        )

        assert line.unit_price == Money(500, "EUR", 2, "€")
        assert line.subtotal.amount == 1000
        assert line.tax.amount == 210
        assert line.total.amount == 1210
        assert line.total.format() == "€12.10"
        assert line.images[0].src.endswith("/img/7.jpg")

    def test_currency_falls_back_to_cart(self):
        """Test a line without currency uses the cart's."""
        data = make_item("abc", 7)
        del data["totals"]["currency_code"]

        line = LineItem.from_store_item(StoreCartItem.model_validate(data), currency_code="USD")

        assert line.currency_code == "USD"
