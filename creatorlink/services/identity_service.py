"""
creatorlink.services.identity_service — Email → Member Mapping
===============================================================

Called by the trusted verification flow once a purchaser has proven which
Discord member they are.  Mapping is an idempotent upsert keyed on the
lowercase email: calling it again overwrites the member (last write wins)
and never creates a second row.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, bindparam, text

from creatorlink.database.engine import get_session
from creatorlink.database.models import CreatorMapping
from creatorlink.engine.events import normalize_email

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

_UPSERT_MAPPING = text("""
    INSERT INTO creator_mappings (email, member_id, display_name, created_at, updated_at)
    VALUES (:email, :member_id, :display_name, :now, :now)
    ON CONFLICT (email)
    DO UPDATE SET member_id = excluded.member_id,
                  display_name = excluded.display_name,
                  updated_at = excluded.updated_at
""").bindparams(bindparam("now", type_=DateTime(timezone=True)))


def map_email_to_member(
    engine: Engine,
    email: str,
    member_id: str,
    display_name: str | None = None,
) -> CreatorMapping:
    """Bind *email* to *member_id*, overwriting any previous binding.

    Raises
    ------
    ValueError
        If *email* or *member_id* is missing or blank.
    """
    normalized = normalize_email(email)
    if not normalized:
        raise ValueError("email is required")
    member_id = str(member_id).strip() if member_id is not None else ""
    if not member_id:
        raise ValueError("member_id is required")
    if display_name is not None:
        display_name = display_name.strip() or None

    with get_session(engine) as session:
        session.execute(
            _UPSERT_MAPPING,
            {
                "email": normalized,
                "member_id": member_id,
                "display_name": display_name,
                "now": datetime.now(UTC),
            },
        )
        mapping = session.get(CreatorMapping, normalized)

    logger.info("Mapped %s → member %s", normalized, member_id)
    return mapping


def get_mapping(engine: Engine, email: str) -> CreatorMapping | None:
    """Return the mapping for *email* (case-insensitive), or None."""
    normalized = normalize_email(email)
    if not normalized:
        return None
    with get_session(engine) as session:
        return session.get(CreatorMapping, normalized)
