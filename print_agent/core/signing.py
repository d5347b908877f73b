"""
HMAC-SHA256 request signing.

Callers sign the exact JSON body they send with the agent secret and pass the
hex digest in the X-Signature header.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Optional, Union

SIGNATURE_HEADER = "X-Signature"

BytesLike = Union[bytes, str]


def _to_bytes(value: BytesLike) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def sign(secret: str, body: BytesLike) -> str:
    """Hex HMAC-SHA256 of body keyed with secret."""
    return hmac.new(_to_bytes(secret), _to_bytes(body), hashlib.sha256).hexdigest()


def verify(secret: Optional[str], body: BytesLike, signature: Optional[str]) -> bool:
    """
    True only when signature exactly matches the recomputed digest.
    A missing secret or signature never verifies.
    """
    if not secret or not signature:
        return False
    expected = sign(secret, body)
    try:
        return hmac.compare_digest(expected, signature)
    except TypeError:
        # compare_digest refuses non-ASCII str input
        return False


__all__ = ["SIGNATURE_HEADER", "sign", "verify"]
