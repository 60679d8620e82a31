# Utilities Module
from .signing import base64_hmac_sha256_digest, verify_base64_hmac_sha256

__all__ = [
    "base64_hmac_sha256_digest",
    "verify_base64_hmac_sha256",
]
