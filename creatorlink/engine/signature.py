"""
creatorlink.engine.signature — Webhook HMAC Verification
=========================================================

Commerce webhooks are signed with HMAC-SHA256 over the raw request body,
base64-encoded into a header.  Verification MUST run against the exact
bytes received; parsing and re-serializing the JSON first changes the
bytes and breaks the signature.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging

logger = logging.getLogger(__name__)


def compute_signature(raw_body: bytes, secret: str) -> str:
    """Return the base64 HMAC-SHA256 of *raw_body* keyed with *secret*."""
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(raw_body: bytes, provided: str | None, secret: str | None) -> bool:
    """Check *provided* against the HMAC of *raw_body*.

    Returns False (never raises) when the header is missing, the secret
    is missing or empty, or the header value is malformed.
    """
    if not secret:
        logger.error("Webhook secret is not configured; rejecting request")
        return False
    if not provided:
        logger.warning("Webhook request without signature header")
        return False

    try:
        provided_bytes = provided.strip().encode("ascii")
    except UnicodeEncodeError:
        logger.warning("Webhook signature header is not ASCII")
        return False

    expected = compute_signature(raw_body, secret).encode("ascii")
    # Constant-time comparison
    if not hmac.compare_digest(expected, provided_bytes):
        logger.warning("Invalid webhook signature")
        return False
    return True
