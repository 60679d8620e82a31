# Services Module
from .money import Money, format_money, from_minor, to_minor

__all__ = ["Money", "format_money", "from_minor", "to_minor"]
