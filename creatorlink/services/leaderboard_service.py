"""
creatorlink.services.leaderboard_service — Standing Leaderboard Message
========================================================================

Keeps exactly one leaderboard message alive in the configured channel:

* The first publish sends a new message, remembers its id in a
  :class:`LeaderboardState`, and tries to pin it.
* Later publishes edit that message in place.
* If the edit fails (message deleted, channel permissions changed, …) the
  stored id is dropped and a fresh message is sent instead.

The state lives in memory only.  After a restart the next publish simply
creates a new message.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import discord

from creatorlink.constants import (
    DEFAULT_LEADERBOARD_SIZE,
    LEADERBOARD_EMPTY,
    LEADERBOARD_TITLE,
    RANK_BADGES,
)
from creatorlink.database.engine import run_db
from creatorlink.services.ledger_service import LeaderboardRow, top_n

if TYPE_CHECKING:
    from discord.abc import Messageable
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


@dataclass
class LeaderboardState:
    """Id of the live leaderboard message, if one has been published.

    *lock* serializes publishes so only one message is ever created.
    """

    message_id: int | None = None
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------
def _rank_label(rank: int) -> str:
    if rank <= len(RANK_BADGES):
        return RANK_BADGES[rank - 1]
    return f"`#{rank}`"


def render_leaderboard(rows: list[LeaderboardRow], names: list[str]) -> str:
    """Render ranked rows as a fixed-format text block."""
    lines = [LEADERBOARD_TITLE, ""]
    if not rows:
        lines.append(LEADERBOARD_EMPTY)
        return "\n".join(lines)

    for row, name in zip(rows, names, strict=True):
        orders = "order" if row.order_count == 1 else "orders"
        lines.append(
            f"{_rank_label(row.rank)} **{name}** · {row.xp:,} XP · {row.order_count} {orders}"
        )
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Name resolution
# ---------------------------------------------------------------------------
async def resolve_display_name(guild: discord.Guild | None, member_id: str) -> str:
    """Return the member's display name, or *member_id* if it can't be resolved."""
    if guild is None:
        return member_id
    try:
        snowflake = int(member_id)
    except ValueError:
        return member_id

    member = guild.get_member(snowflake)
    if member is None:
        try:
            member = await guild.fetch_member(snowflake)
        except Exception as exc:
            logger.debug("Could not resolve member %s: %r", member_id, exc)
            return member_id
    return member.display_name


async def build_leaderboard_text(
    engine: Engine,
    guild: discord.Guild | None,
    limit: int,
) -> str:
    """Query the ledger and render the top *limit* rows with display names."""
    rows = await run_db(top_n, engine, limit)
    names = [await resolve_display_name(guild, row.member_id) for row in rows]
    return render_leaderboard(rows, names)


# ---------------------------------------------------------------------------
# Publish-or-edit
# ---------------------------------------------------------------------------
async def publish_leaderboard(
    channel: Messageable,
    engine: Engine,
    state: LeaderboardState,
    *,
    limit: int = DEFAULT_LEADERBOARD_SIZE,
) -> int:
    """Create or update the standing leaderboard message in *channel*.

    Returns the id of the live message.  Edit and pin failures are
    absorbed; a failure to send a new message propagates.  Overlapping
    calls on the same *state* run one at a time.
    """
    content = await build_leaderboard_text(engine, getattr(channel, "guild", None), limit)

    async with state.lock:
        if state.message_id is not None:
            try:
                message = await channel.fetch_message(state.message_id)
                await message.edit(content=content)
                logger.info("Leaderboard message %s updated", state.message_id)
                return state.message_id
            except Exception:
                logger.warning(
                    "Editing leaderboard message %s failed; sending a new one",
                    state.message_id, exc_info=True,
                )
                state.message_id = None

        message = await channel.send(
            content=content, allowed_mentions=discord.AllowedMentions.none()
        )
        state.message_id = message.id
        logger.info("Leaderboard message %s created", message.id)

    try:
        await message.pin(reason="Creator leaderboard")
    except Exception:
        logger.warning("Could not pin leaderboard message %s", message.id, exc_info=True)

    return message.id
