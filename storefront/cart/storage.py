"""Credential persistence: a thin pass-through over any mutable mapping."""
from collections.abc import MutableMapping
from typing import Any, Optional

from .models import SessionCredentials

TOKEN_KEY = "cart_token"
NONCE_KEY = "cart_nonce"
EXPIRES_KEY = "cart_expires"


class CredentialStore:
    """
    Reads and writes cart credentials in a caller-supplied key/value bag.

    The bag can be a plain dict, a web framework session, or a reactive
    wrapper around browser storage; only item access is used.
    """

    def __init__(self, storage: Optional[MutableMapping[str, Any]] = None):
        self.storage = storage if storage is not None else {}

    def load(self) -> SessionCredentials:
        return SessionCredentials(
            token=self.storage.get(TOKEN_KEY) or None,
            nonce=self.storage.get(NONCE_KEY) or None,
        )

    def save_token(self, token: str) -> None:
        self.storage[TOKEN_KEY] = token

    def save_nonce(self, nonce: str) -> None:
        self.storage[NONCE_KEY] = nonce

    def load_expiry(self) -> Optional[float]:
        value = self.storage.get(EXPIRES_KEY)
        try:
            return float(value) if value is not None else None
        except (TypeError, ValueError):
            return None

    def save_expiry(self, expires_at: float) -> None:
        self.storage[EXPIRES_KEY] = expires_at

    def forget(self) -> None:
        """Drop stored credentials so the next request starts a fresh cart."""
        for key in (TOKEN_KEY, NONCE_KEY, EXPIRES_KEY):
            self.storage.pop(key, None)
