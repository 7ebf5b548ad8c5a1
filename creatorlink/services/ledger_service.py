"""
creatorlink.services.ledger_service — XP Accrual & Ranking
===========================================================

The ledger holds one row per member with two monotonically increasing
counters.  Awards are applied with a single ``INSERT … ON CONFLICT … DO
UPDATE`` so concurrent orders for the same member never lose an
increment; the database serializes the writers, not the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, bindparam, select, text

from creatorlink.constants import MAX_LEADERBOARD_LIMIT, MIN_LEADERBOARD_LIMIT
from creatorlink.database.engine import get_session
from creatorlink.database.models import LedgerEntry

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

_AWARD_ORDER = text("""
    INSERT INTO ledger_entries (member_id, xp, order_count, updated_at)
    VALUES (:member_id, :xp, 1, :now)
    ON CONFLICT (member_id)
    DO UPDATE SET xp = ledger_entries.xp + excluded.xp,
                  order_count = ledger_entries.order_count + 1,
                  updated_at = excluded.updated_at
    RETURNING xp, order_count
""").bindparams(bindparam("now", type_=DateTime(timezone=True)))


@dataclass(frozen=True, slots=True)
class LedgerTotals:
    """Counters for one member right after an award."""

    member_id: str
    xp: int
    order_count: int


@dataclass(frozen=True, slots=True)
class LeaderboardRow:
    rank: int
    member_id: str
    xp: int
    order_count: int


def award_order(engine: Engine, member_id: str, xp: int) -> LedgerTotals:
    """Add *xp* and one order to *member_id*, creating the entry if needed.

    Raises
    ------
    ValueError
        If *xp* is negative (counters never decrease).
    """
    if xp < 0:
        raise ValueError("xp award must be non-negative")

    with get_session(engine) as session:
        row = session.execute(
            _AWARD_ORDER,
            {"member_id": member_id, "xp": xp, "now": datetime.now(UTC)},
        ).one()

    return LedgerTotals(member_id=member_id, xp=row.xp, order_count=row.order_count)


def get_entry(engine: Engine, member_id: str) -> LedgerEntry | None:
    with get_session(engine) as session:
        return session.get(LedgerEntry, member_id)


def clamp_limit(limit: int) -> int:
    """Clamp a requested leaderboard size to ``[1, 100]``."""
    return max(MIN_LEADERBOARD_LIMIT, min(MAX_LEADERBOARD_LIMIT, limit))


def top_n(engine: Engine, limit: int) -> list[LeaderboardRow]:
    """Return the top members by XP.

    Ties are broken by ``updated_at`` (whoever reached the score first
    ranks higher), then by ``member_id``.
    """
    limit = clamp_limit(limit)
    with get_session(engine) as session:
        entries = session.scalars(
            select(LedgerEntry)
            .order_by(
                LedgerEntry.xp.desc(),
                LedgerEntry.updated_at.asc(),
                LedgerEntry.member_id.asc(),
            )
            .limit(limit)
        ).all()

    return [
        LeaderboardRow(
            rank=index,
            member_id=entry.member_id,
            xp=entry.xp,
            order_count=entry.order_count,
        )
        for index, entry in enumerate(entries, start=1)
    ]
