"""
Webhook signature check shared by the gateway adapters

The gateway signs the raw request body with HMAC-SHA256 using the shared webhook secret and
sends the hex digest in the `X-Gateway-Signature` header.
"""

import hashlib
import hmac


def compute_signature(*, secret: str, payload: bytes) -> str:
    return hmac.new(secret.encode('utf-8'), payload, hashlib.sha256).hexdigest()


def signature_matches(*, secret: str, payload: bytes, signature: str | None) -> bool:
    if not signature:
        return False
    expected = compute_signature(secret=secret, payload=payload)
    return hmac.compare_digest(expected, signature.strip().lower())
