"""
creatorlink.services.welcome_service — New Member Greeting
===========================================================

Posts the configured welcome template in the verify channel when a member
joins.  A missed welcome is acceptable: every failure is logged and
reported as a :class:`WelcomeOutcome`, nothing is raised or retried.
"""

from __future__ import annotations

import enum
import logging

import discord
from discord.abc import Messageable

from creatorlink.constants import WELCOME_PLACEHOLDER

logger = logging.getLogger(__name__)


class WelcomeOutcome(enum.StrEnum):
    SENT = "sent"
    SKIPPED_BOT = "skipped_bot"
    CHANNEL_MISSING = "channel_missing"
    MISSING_PERMISSIONS = "missing_permissions"
    SEND_FAILED = "send_failed"


def render_welcome(template: str, member_id: int | str) -> str:
    """Substitute the joining member's id into *template*."""
    return template.replace(WELCOME_PLACEHOLDER, str(member_id))


async def resolve_welcome_channel(guild: discord.Guild, channel_id: int):
    """Cached lookup first, then a fresh fetch.  None if unreachable."""
    channel = guild.get_channel(channel_id)
    if channel is not None:
        return channel
    try:
        return await guild.fetch_channel(channel_id)
    except discord.DiscordException as exc:
        logger.debug("fetch_channel(%s) failed: %s", channel_id, exc)
        return None


def can_post(channel, me: discord.Member | None) -> bool:
    """True if *me* can both see and send messages in *channel*."""
    if me is None:
        return False
    perms = channel.permissions_for(me)
    return bool(perms.view_channel and perms.send_messages)


async def send_welcome(
    member: discord.Member,
    *,
    channel_id: int,
    template: str,
) -> WelcomeOutcome:
    """Greet *member* in the welcome channel."""
    if member.bot:
        return WelcomeOutcome.SKIPPED_BOT

    try:
        channel = await resolve_welcome_channel(member.guild, channel_id)
        if channel is None or not isinstance(channel, Messageable):
            logger.warning("Welcome channel %s not found or not accessible", channel_id)
            return WelcomeOutcome.CHANNEL_MISSING

        if not can_post(channel, member.guild.me):
            logger.warning(
                "Missing View Channel / Send Messages permission in welcome channel %s",
                channel_id,
            )
            return WelcomeOutcome.MISSING_PERMISSIONS

        await channel.send(
            content=render_welcome(template, member.id),
            allowed_mentions=discord.AllowedMentions(users=True, roles=False, everyone=False),
        )
    except Exception:
        logger.exception(
            "Failed to send welcome for %s", member.id,
            extra={"event_type": "member_join", "user_id": member.id},
        )
        return WelcomeOutcome.SEND_FAILED

    logger.info("Welcomed %s (ID: %d)", member.display_name, member.id)
    return WelcomeOutcome.SENT
