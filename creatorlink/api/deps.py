"""
creatorlink.api.deps — FastAPI dependency injection
====================================================
"""

from __future__ import annotations

import hmac
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy import Engine

from creatorlink.config import CreatorLinkConfig, load_config
from creatorlink.database.engine import create_db_engine
from creatorlink.services.leaderboard_service import LeaderboardState


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> CreatorLinkConfig:
    return load_config()


@lru_cache(maxsize=1)
def get_leaderboard_state() -> LeaderboardState:
    """The process-wide slot for the live leaderboard message."""
    return LeaderboardState()


def get_bot(request: Request):
    """The connected gateway client, or None when running API-only."""
    return getattr(request.app.state, "bot", None)


def require_internal_token(
    authorization: Annotated[str | None, Header()] = None,
    cfg: CreatorLinkConfig = Depends(get_config),
) -> None:
    """Bearer-token gate for trusted internal callers.  Raises 401 on mismatch."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Missing token")
    token = authorization.split(" ", 1)[1].strip()
    if not hmac.compare_digest(token.encode("utf-8"), cfg.internal_api_secret.encode("utf-8")):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")
