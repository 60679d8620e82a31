"""HMAC-SHA256 signing helpers for store callbacks."""
import base64
import hashlib
import hmac


def base64_hmac_sha256_digest(message: str, key: str) -> str:
    """
    Sign a message with HMAC-SHA256 and return the raw digest, base64 encoded.

    Args:
        message: Text to sign
        key: Shared secret

    Returns:
        Base64 string of the 32-byte digest
    """
    digest = hmac.new(key.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_base64_hmac_sha256(message: str, key: str, digest: str) -> bool:
    """Check a base64 HMAC-SHA256 digest in constant time."""
    if not digest:
        return False
    expected = base64_hmac_sha256_digest(message, key)
    return hmac.compare_digest(expected, digest)
