"""
Stripe webhook signature verification.

Stripe signs ``"<timestamp>.<raw body>"`` with HMAC-SHA256 using the
endpoint secret and sends ``Stripe-Signature: t=<timestamp>,v1=<hex>``
(possibly several v1 entries while secrets are rolled).
"""

import hashlib
import hmac
from datetime import datetime, timezone
from typing import Optional

from .exceptions import WebhookVerificationError

SIGNATURE_SCHEME = "v1"


def compute_signature(payload: bytes, secret: str, timestamp: int) -> str:
    """Hex HMAC-SHA256 of the signed payload."""
    signed = f"{timestamp}.".encode() + payload
    return hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()


def build_signature_header(payload: bytes, secret: str, timestamp: int) -> str:
    """Build a ``Stripe-Signature`` header value (used by tests and tooling)."""
    return f"t={timestamp},{SIGNATURE_SCHEME}={compute_signature(payload, secret, timestamp)}"


def verify_signature(
    payload: bytes,
    header: Optional[str],
    secret: str,
    tolerance: int = 300,
    now: Optional[datetime] = None,
) -> None:
    """
    Verify a webhook body against its signature header.

    Args:
        payload: Raw request body, exactly as received
        header: ``Stripe-Signature`` header value
        secret: Endpoint signing secret
        tolerance: Maximum age of the signature in seconds (0 disables)
        now: Current time (defaults to UTC now)

    Raises:
        WebhookVerificationError: If the secret is not configured, the header
            is missing or malformed, the timestamp is outside the tolerance,
            or no signature matches
    """
    if not secret:
        raise WebhookVerificationError("webhook secret not configured")
    if not header:
        raise WebhookVerificationError("missing signature header")

    timestamp: Optional[int] = None
    signatures: list[str] = []
    for item in header.split(","):
        key, _, value = item.strip().partition("=")
        if key == "t":
            try:
                timestamp = int(value)
            except ValueError:
                raise WebhookVerificationError("malformed timestamp")
        elif key == SIGNATURE_SCHEME and value:
            signatures.append(value)

    if timestamp is None or not signatures:
        raise WebhookVerificationError("malformed signature header")

    if tolerance > 0:
        now = now or datetime.now(timezone.utc)
        if abs(now.timestamp() - timestamp) > tolerance:
            raise WebhookVerificationError("timestamp outside tolerance")

    expected = compute_signature(payload, secret, timestamp)
    if not any(hmac.compare_digest(expected, candidate) for candidate in signatures):
        raise WebhookVerificationError("signature mismatch")
