"""
creatorlink.bot.core — Bot Instance & Cog Loader
=================================================

Defines :class:`CreatorLinkBot`, a ``commands.Bot`` subclass that:

1. Stores the shared config (``bot.cfg``) and DB engine (``bot.engine``)
   so every Cog can reach them via ``self.bot.cfg`` / ``self.bot.engine``.
2. Loads every Cog listed in :data:`EXTENSIONS`.
3. Syncs the slash-command tree on startup (guild-scoped when
   ``DEV_GUILD_ID`` is set, global otherwise).

The same instance is handed to the HTTP API so leaderboard publishing can
reach the gateway.
"""

from __future__ import annotations

import logging
import os

import discord
from discord.ext import commands
from sqlalchemy import Engine

from creatorlink.config import CreatorLinkConfig

logger = logging.getLogger(__name__)

EXTENSIONS: list[str] = [
    "creatorlink.bot.cogs.membership",
    "creatorlink.bot.cogs.meta",
]


class CreatorLinkBot(commands.Bot):
    """Bot subclass that carries project-wide state.

    Parameters
    ----------
    cfg:
        The loaded :class:`CreatorLinkConfig`.
    engine:
        SQLAlchemy :class:`Engine` for the ledger database.
    """

    def __init__(self, cfg: CreatorLinkConfig, engine: Engine) -> None:
        # GUILD_MEMBERS is privileged (enable it in the Developer Portal);
        # it is required for on_member_join.
        intents = discord.Intents.default()
        intents.members = True
        intents.presences = False

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            description="Creator verification, welcomes and order leaderboard",
        )

        self.cfg = cfg
        self.engine = engine

    # -----------------------------------------------------------------------
    # Lifecycle hooks
    # -----------------------------------------------------------------------
    async def setup_hook(self) -> None:
        """Load Cog extensions.  One broken Cog doesn't take down the bot."""
        for ext in EXTENSIONS:
            try:
                await self.load_extension(ext)
                logger.info("Loaded extension: %s", ext)
            except Exception as exc:
                logger.error("Failed to load extension %s: %s", ext, exc)

    async def on_ready(self) -> None:
        """Fired when the bot has connected and the cache is populated."""
        assert self.user is not None  # guaranteed after on_ready
        logger.info("Bot online as %s (ID: %s)", self.user, self.user.id)

        try:
            dev_guild_id = os.getenv("DEV_GUILD_ID")
            if dev_guild_id:
                guild = discord.Object(id=int(dev_guild_id))
                self.tree.copy_global_to(guild=guild)
                synced = await self.tree.sync(guild=guild)
                logger.info("Synced %d commands to dev guild %s", len(synced), dev_guild_id)
            else:
                synced = await self.tree.sync()
                logger.info("Synced %d commands globally", len(synced))
        except discord.DiscordException:
            logger.exception("Slash-command sync failed")

    async def resolve_channel(self, channel_id: int):
        """Cached channel lookup, falling back to an API fetch."""
        channel = self.get_channel(channel_id)
        if channel is None:
            channel = await self.fetch_channel(channel_id)
        return channel
