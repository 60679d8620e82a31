"""Cart value types: session credentials and line item snapshots."""
from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

from storefront.services.money import DEFAULT_MINOR_UNIT, Money

from .schemas import ItemImage, StoreCartItem

if TYPE_CHECKING:
    from .service import CartSession


@dataclass
class SessionCredentials:
    """Proof of an anonymous cart session. Written only by the gateway."""
    token: Optional[str] = None
    nonce: Optional[str] = None


@dataclass(frozen=True)
class LineItem:
    """
    Snapshot of one cart entry as last reported by the server.

    Instances are replaced wholesale on every cart refresh. After calling
    increase(), decrease() or remove() this instance is stale; read the
    fresh one from cart.items or cart.item(key).
    """
    id: int
    key: str
    name: str
    quantity: int
    currency_code: str
    unit_price_minor: int
    subtotal_minor: int
    tax_minor: int
    total_minor: int
    currency_symbol: str = ""
    currency_minor_unit: int = DEFAULT_MINOR_UNIT
    images: tuple[ItemImage, ...] = ()
    cart: Optional["CartSession"] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_store_item(
        cls,
        data: StoreCartItem,
        cart: Optional["CartSession"] = None,
        currency_code: Optional[str] = None,
    ) -> "LineItem":
        """Build a snapshot from a decoded cart item; currency falls back to the cart's."""
        totals = data.totals
        return cls(
            id=data.id,
            key=data.key,
            name=data.name,
            quantity=data.quantity,
            currency_code=totals.currency_code or currency_code or "",
            unit_price_minor=data.prices.price,
            subtotal_minor=totals.line_subtotal,
            tax_minor=totals.line_total_tax,
            total_minor=totals.line_total,
            currency_symbol=totals.currency_symbol,
            currency_minor_unit=totals.currency_minor_unit,
            images=tuple(data.images),
            cart=cart,
        )

    def _money(self, amount: int) -> Money:
        return Money(amount, self.currency_code, self.currency_minor_unit, self.currency_symbol or None)

    @property
    def unit_price(self) -> Money:
        return self._money(self.unit_price_minor)

    @property
    def subtotal(self) -> Money:
        return self._money(self.subtotal_minor)

    @property
    def tax(self) -> Money:
        return self._money(self.tax_minor)

    @property
    def total(self) -> Money:
        return self._money(self.total_minor)

    def _owner(self) -> "CartSession":
        if self.cart is None:
            raise RuntimeError(f"Line item {self.key} is not attached to a cart")
        return self.cart

    async def increase(self) -> None:
        """Add one unit, then refresh the owning cart."""
        await self._owner().update_item_quantity(self.key, self.quantity + 1)

    async def decrease(self) -> None:
        """Remove one unit; the last unit removes the line instead of sending quantity 0."""
        if self.quantity - 1 <= 0:
            await self.remove()
        else:
            await self._owner().update_item_quantity(self.key, self.quantity - 1)

    async def remove(self) -> None:
        """Delete the line, then refresh the owning cart."""
        await self._owner().remove_item(self.key)
