"""
creatorlink.api.routes.identity — Email → Member Mapping Endpoint
==================================================================
Called by the verification flow once a purchaser has proven their Discord
identity.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy import Engine

from creatorlink.api.deps import get_engine, require_internal_token
from creatorlink.database.engine import run_db
from creatorlink.services.identity_service import map_email_to_member

logger = logging.getLogger(__name__)
router = APIRouter(tags=["identity"], dependencies=[Depends(require_internal_token)])


class MapEmailRequest(BaseModel):
    email: str | None = None
    member_id: str | int | None = None
    display_name: str | None = None


@router.post("/map-email")
async def map_email(
    body: MapEmailRequest,
    engine: Engine = Depends(get_engine),
):
    """Bind a purchaser email to a Discord member (upsert)."""
    if not body.email or not body.email.strip():
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "email is required")
    if body.member_id is None or not str(body.member_id).strip():
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "member_id is required")

    try:
        await run_db(
            map_email_to_member,
            engine,
            body.email,
            str(body.member_id),
            body.display_name,
        )
    except ValueError as exc:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, str(exc)) from exc

    return {"ok": True}
