"""
Centralized logging for the storefront client.

The package only creates loggers under "storefront" and never touches the
root logger on import; the host application owns handler setup. Scripts
without their own setup can call configure_logging().

Usage:
    from storefront.logging import get_logger
    logger = get_logger(__name__)

    logger.info("Cart initialized")
    logger.error("Request failed", exc_info=True)
"""

import logging
import os
import sys
from functools import cache

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s - %(name)s - %(message)s"

PACKAGE_LOGGER = "storefront"

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def _get_log_level() -> int:
    """Get log level from STOREFRONT_LOG_LEVEL or default to INFO."""
    level_name = os.environ.get("STOREFRONT_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def configure_logging() -> None:
    """
    Attach a stdout handler to the root logger unless one is already set up.

    Opt-in for scripts and small apps; never called by the package itself.
    Level comes from STOREFRONT_LOG_LEVEL, and STOREFRONT_ENV=production
    selects the compact format.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    root.setLevel(_get_log_level())

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(_get_log_level())

    is_production = os.environ.get("STOREFRONT_ENV") == "production"
    handler.setFormatter(logging.Formatter(LOG_FORMAT_SIMPLE if is_production else LOG_FORMAT))
    root.addHandler(handler)

    # Every cart operation is at least one request; keep transport chatter out
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@cache
def get_logger(name: str) -> logging.Logger:
    """
    Get or create a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def _escape_log_injection(value: str) -> str:
    """Escape control characters that could forge log lines (CWE-117)."""
    return (
        value.replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\x00", "")
    )


def sanitize_id_for_logging(id_value: str | None) -> str:
    """
    Shorten a credential (cart token, nonce) to its first 8 chars for logging.

    Returns:
        Sanitized prefix or "N/A" if empty
    """
    if not id_value:
        return "N/A"
    safe_value = _escape_log_injection(str(id_value))
    return safe_value[:8]


def sanitize_string_for_logging(value: str | None, max_length: int = 80) -> str:
    """
    Truncate server-supplied text (error messages, URLs) before logging it.

    Returns:
        Sanitized string or "N/A" if empty
    """
    if not value:
        return "N/A"
    safe_value = _escape_log_injection(str(value))
    if len(safe_value) <= max_length:
        return safe_value
    return safe_value[:max_length] + "..."


__all__ = [
    "LOG_FORMAT",
    "LOG_FORMAT_SIMPLE",
    "configure_logging",
    "get_logger",
    "sanitize_id_for_logging",
    "sanitize_string_for_logging",
]
