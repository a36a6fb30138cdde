from __future__ import annotations

import hashlib
import hmac


def compute_razorpay_signature(payload: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def verify_razorpay_signature(payload: bytes, signature: str, secret: str) -> bool:
    """HMAC-SHA256 check of the raw body. Malformed input yields False, never an exception."""
    if not signature or not secret:
        return False
    expected = bytes.fromhex(compute_razorpay_signature(payload, secret))
    try:
        received = bytes.fromhex(signature)
    except (TypeError, ValueError):
        return False
    if len(expected) != len(received):
        return False
    return hmac.compare_digest(expected, received)
