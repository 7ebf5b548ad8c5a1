"""
creatorlink.services.order_service — Purchase Webhook → Ledger Pipeline
========================================================================

The state machine behind ``POST /webhook/orders-paid``:

1. Verify the HMAC over the raw body (reject → :class:`WebhookUnauthorized`).
2. Parse the purchaser email; none → ignored.
3. Look up the email's member mapping; none → ignored (the purchaser has
   not verified yet).
4. Otherwise apply one atomic XP award to the member's ledger entry.

Ignored events are successful outcomes: the commerce platform retries
anything that is not a 2xx, and an unmapped order will never become
mappable by retrying.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from creatorlink.engine.events import MalformedPayload, parse_purchase_event
from creatorlink.engine.signature import verify_signature
from creatorlink.services.identity_service import get_mapping
from creatorlink.services.ledger_service import LedgerTotals, award_order

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


class WebhookUnauthorized(Exception):
    """The webhook signature is missing or does not match."""


class PurchaseOutcome(enum.StrEnum):
    AWARDED = "awarded"
    IGNORED_NO_EMAIL = "ignored_no_email"
    IGNORED_UNMAPPED = "ignored_unmapped"
    IGNORED_MALFORMED = "ignored_malformed"


@dataclass(frozen=True, slots=True)
class PurchaseResult:
    outcome: PurchaseOutcome
    order_id: str | None = None
    member_id: str | None = None
    totals: LedgerTotals | None = None


def handle_purchase(
    engine: Engine,
    raw_body: bytes,
    signature: str | None,
    *,
    secret: str | None,
    xp_per_order: int,
) -> PurchaseResult:
    """Authenticate and apply one ``orders/paid`` webhook.

    At most one ledger mutation per call; never sends gateway messages.

    Raises
    ------
    WebhookUnauthorized
        If the signature does not verify.  No state is touched.
    """
    if not verify_signature(raw_body, signature, secret):
        raise WebhookUnauthorized("Invalid webhook signature")

    try:
        event = parse_purchase_event(raw_body)
    except MalformedPayload as exc:
        logger.warning("Ignoring malformed order webhook: %s", exc)
        return PurchaseResult(PurchaseOutcome.IGNORED_MALFORMED)

    if not event.email:
        logger.info("Order %s has no purchaser email; ignored", event.order_id)
        return PurchaseResult(PurchaseOutcome.IGNORED_NO_EMAIL, order_id=event.order_id)

    mapping = get_mapping(engine, event.email)
    if mapping is None:
        logger.info(
            "Order %s from unverified purchaser %s; ignored", event.order_id, event.email
        )
        return PurchaseResult(PurchaseOutcome.IGNORED_UNMAPPED, order_id=event.order_id)

    totals = award_order(engine, mapping.member_id, xp_per_order)
    logger.info(
        "Order %s → member %s +%d XP (now %d XP, %d orders)",
        event.order_id, mapping.member_id, xp_per_order, totals.xp, totals.order_count,
    )
    return PurchaseResult(
        PurchaseOutcome.AWARDED,
        order_id=event.order_id,
        member_id=mapping.member_id,
        totals=totals,
    )
