"""
creatorlink.bot.cogs.membership — Member Join Welcome
======================================================

Greets each new member in the verify channel.  Requires the
GUILD_MEMBERS privileged intent.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from creatorlink.services.welcome_service import WelcomeOutcome, send_welcome

if TYPE_CHECKING:
    from creatorlink.bot.core import CreatorLinkBot

logger = logging.getLogger(__name__)


class Membership(commands.Cog, name="Membership"):
    """Welcomes members as they join."""

    def __init__(self, bot: CreatorLinkBot) -> None:
        self.bot = bot

    @commands.Cog.listener()
    async def on_member_join(self, member: discord.Member) -> WelcomeOutcome:
        outcome = await send_welcome(
            member,
            channel_id=self.bot.cfg.welcome_channel_id,
            template=self.bot.cfg.welcome_message,
        )
        if outcome is not WelcomeOutcome.SENT:
            logger.debug("Welcome for %s not sent: %s", member.id, outcome)
        return outcome


async def setup(bot: CreatorLinkBot) -> None:
    await bot.add_cog(Membership(bot))
