"""
creatorlink.api.routes.leaderboard — Ranking Query & Publish
=============================================================
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import Engine

from creatorlink.api.deps import (
    get_bot,
    get_config,
    get_engine,
    get_leaderboard_state,
    require_internal_token,
)
from creatorlink.config import CreatorLinkConfig
from creatorlink.constants import DEFAULT_LEADERBOARD_SIZE
from creatorlink.database.engine import run_db
from creatorlink.services.leaderboard_service import LeaderboardState, publish_leaderboard
from creatorlink.services.ledger_service import clamp_limit, top_n

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


# ---------------------------------------------------------------------------
# GET /leaderboard
# ---------------------------------------------------------------------------
@router.get("")
async def get_leaderboard(
    limit: int = DEFAULT_LEADERBOARD_SIZE,
    engine: Engine = Depends(get_engine),
):
    """Public top-N by XP.  *limit* is clamped to 1..100."""
    rows = await run_db(top_n, engine, limit)
    return {
        "limit": clamp_limit(limit),
        "rows": [
            {"member_id": r.member_id, "xp": r.xp, "order_count": r.order_count}
            for r in rows
        ],
    }


# ---------------------------------------------------------------------------
# POST /leaderboard/publish
# ---------------------------------------------------------------------------
@router.post("/publish", dependencies=[Depends(require_internal_token)])
async def publish(
    engine: Engine = Depends(get_engine),
    cfg: CreatorLinkConfig = Depends(get_config),
    state: LeaderboardState = Depends(get_leaderboard_state),
    bot=Depends(get_bot),
):
    """Create or edit the pinned leaderboard message."""
    if cfg.leaderboard_channel_id is None:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Leaderboard channel is not configured")
    if bot is None:
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, "Discord client is not connected")

    try:
        channel = await bot.resolve_channel(cfg.leaderboard_channel_id)
        message_id = await publish_leaderboard(
            channel, engine, state, limit=cfg.leaderboard_size
        )
    except Exception:
        logger.exception(
            "Leaderboard publish failed (channel %s)", cfg.leaderboard_channel_id
        )
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "Leaderboard publish failed")

    return {"ok": True, "message_id": str(message_id)}
