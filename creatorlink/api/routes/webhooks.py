"""
creatorlink.api.routes.webhooks — Commerce Order Webhooks
==========================================================

``orders/paid`` is verified against the raw request bytes and then handed
to :func:`creatorlink.services.order_service.handle_purchase`.  Anything
other than a bad signature is answered with 200 so the commerce platform
doesn't retry orders we deliberately ignored.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import Engine

from creatorlink.api.deps import get_config, get_engine
from creatorlink.config import CreatorLinkConfig
from creatorlink.constants import WEBHOOK_SIGNATURE_HEADER
from creatorlink.database.engine import run_db
from creatorlink.services.order_service import WebhookUnauthorized, handle_purchase

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/webhook", tags=["webhooks"])


@router.post("/orders-paid")
async def orders_paid(
    request: Request,
    engine: Engine = Depends(get_engine),
    cfg: CreatorLinkConfig = Depends(get_config),
):
    # Raw bytes, untouched: the signature covers exactly these.
    raw_body = await request.body()
    signature = request.headers.get(WEBHOOK_SIGNATURE_HEADER)

    try:
        result = await run_db(
            handle_purchase,
            engine,
            raw_body,
            signature,
            secret=cfg.webhook_secret,
            xp_per_order=cfg.xp_per_order,
        )
    except WebhookUnauthorized:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid webhook signature")

    return {"ok": True, "outcome": result.outcome.value}
