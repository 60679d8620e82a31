"""
Money Utilities - integer minor units in, Decimal only for presentation.

All protocol arithmetic (line totals, cart sums) is done on integers. Decimal
appears only when an amount is turned into something a human reads.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Optional, Union

# Minor unit exponent used when the store does not report one
DEFAULT_MINOR_UNIT = 2

# Symbols that go in front of the amount
PREFIX_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


def to_decimal(value: Union[str, int, float, Decimal, None]) -> Decimal:
    """
    Convert any value to Decimal safely.

    Returns:
        Decimal representation of the value, or Decimal("0") if None/invalid
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def to_minor(value: Union[str, int, float, Decimal], minor_unit: int = DEFAULT_MINOR_UNIT) -> int:
    """
    Convert a major-unit amount to integer minor units.

    Args:
        value: Amount in major units (e.g., 12.50)
        minor_unit: Currency exponent (2 for cents, 0 for JPY)

    Returns:
        Amount in minor units (e.g., 1250)
    """
    scaled = to_decimal(value).scaleb(minor_unit)
    return int(scaled.to_integral_value(rounding=ROUND_HALF_UP))


def from_minor(amount: int, minor_unit: int = DEFAULT_MINOR_UNIT) -> Decimal:
    """
    Convert integer minor units to a Decimal major-unit amount.

    Args:
        amount: Amount in minor units (e.g., 1250)
        minor_unit: Currency exponent

    Returns:
        Amount in major units (e.g., Decimal("12.50"))
    """
    quantum = Decimal(1).scaleb(-minor_unit)
    return Decimal(amount).scaleb(-minor_unit).quantize(quantum)


def format_money(
    value: Union[str, int, float, Decimal],
    currency: str,
    symbol: Optional[str] = None,
    minor_unit: int = DEFAULT_MINOR_UNIT,
) -> str:
    """
    Format a major-unit amount with its currency symbol.

    Args:
        value: Amount in major units
        currency: ISO currency code
        symbol: Symbol reported by the store; falls back to a known prefix or the code
        minor_unit: Number of decimals to show

    Returns:
        "€12.50" for prefix currencies, "12.50 SEK" otherwise
    """
    quantum = Decimal(1).scaleb(-minor_unit)
    amount = to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    formatted = f"{amount:,.{minor_unit}f}"

    if symbol is None:
        symbol = PREFIX_SYMBOLS.get(currency)
        if symbol is None:
            return f"{formatted} {currency}"
    if currency in PREFIX_SYMBOLS:
        return f"{symbol}{formatted}"
    return f"{formatted} {symbol}"


@dataclass(frozen=True)
class Money:
    """Integer minor-unit amount paired with its currency."""
    amount: int
    currency: str
    minor_unit: int = DEFAULT_MINOR_UNIT
    symbol: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise TypeError(f"Money amount must be int minor units, got {type(self.amount).__name__}")

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        if other.currency != self.currency:
            raise ValueError(f"Cannot add {other.currency} to {self.currency}")
        return Money(self.amount + other.amount, self.currency, self.minor_unit, self.symbol)

    def to_decimal(self) -> Decimal:
        """Major-unit Decimal value."""
        return from_minor(self.amount, self.minor_unit)

    def format(self) -> str:
        """Human-readable amount, e.g. "€12.50"."""
        return format_money(self.to_decimal(), self.currency, self.symbol, self.minor_unit)

    def __str__(self) -> str:
        return self.format()
