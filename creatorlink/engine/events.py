"""
creatorlink.engine.events — Purchase Event Parsing
===================================================

Turns a verified ``orders/paid`` payload into a :class:`PurchaseEvent`.
Only the purchaser email and an order reference are extracted; the rest of
the order is ignored.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any


class MalformedPayload(ValueError):
    """The webhook body is not a JSON object."""


@dataclass(frozen=True, slots=True)
class PurchaseEvent:
    """A completed order, reduced to what the ledger needs."""

    email: str | None  # normalized lowercase, None when absent/blank
    order_id: str | None


def normalize_email(email: Any) -> str | None:
    """Strip and lowercase *email*; blank or non-string values become None."""
    if not isinstance(email, str):
        return None
    email = email.strip().lower()
    return email or None


def _first_email(payload: dict[str, Any]) -> str | None:
    customer = payload.get("customer")
    candidates = [
        payload.get("email"),
        payload.get("contact_email"),
        customer.get("email") if isinstance(customer, dict) else None,
    ]
    for candidate in candidates:
        email = normalize_email(candidate)
        if email:
            return email
    return None


def _first_order_id(payload: dict[str, Any]) -> str | None:
    for key in ("id", "order_id", "name"):
        value = payload.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def parse_purchase_event(raw_body: bytes) -> PurchaseEvent:
    """Parse a webhook body into a :class:`PurchaseEvent`.

    Raises
    ------
    MalformedPayload
        If the body is not valid UTF-8 JSON or not a JSON object.
    """
    try:
        payload = json.loads(raw_body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedPayload(f"Webhook body is not JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise MalformedPayload("Webhook body is not a JSON object")

    return PurchaseEvent(email=_first_email(payload), order_id=_first_order_id(payload))
