"""
Utility functions for the auth module.
"""

import hashlib
import hmac
from typing import Optional


def sign(value: str, secret: str) -> str:
    """Return `value.signature` where signature is HMAC-SHA256(secret, value) in hex."""
    digest = hmac.new(secret.encode(), value.encode(), hashlib.sha256).hexdigest()
    return f"{value}.{digest}"


def unsign(token: str, secret: str) -> Optional[str]:
    """Return the signed value, or None if the token is malformed or tampered with."""
    value, sep, _ = token.rpartition(".")
    if not sep or not value:
        return None
    if hmac.compare_digest(sign(value, secret), token):
        return value
    return None
