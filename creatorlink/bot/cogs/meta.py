"""
creatorlink.bot.cogs.meta — Read-only Leaderboard Command
==========================================================

- /leaderboard — Top creators by XP, shown only to the caller.

This never touches the pinned leaderboard message; publishing goes through
``POST /api/leaderboard/publish``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from discord import app_commands
from discord.ext import commands

from creatorlink.services.leaderboard_service import build_leaderboard_text

if TYPE_CHECKING:
    from creatorlink.bot.core import CreatorLinkBot


class Meta(commands.Cog, name="Meta"):
    """Leaderboard lookups."""

    def __init__(self, bot: CreatorLinkBot) -> None:
        self.bot = bot

    @commands.hybrid_command(  # type: ignore[arg-type]
        name="leaderboard",
        description="View the top creators by XP.",
    )
    @app_commands.describe(limit="How many entries to show (1-25)")
    async def leaderboard(self, ctx: commands.Context, limit: int | None = None) -> None:
        size = self.bot.cfg.leaderboard_size if limit is None else max(1, min(25, limit))
        text = await build_leaderboard_text(self.bot.engine, ctx.guild, size)
        await ctx.send(text, ephemeral=True)


async def setup(bot: CreatorLinkBot) -> None:
    await bot.add_cog(Meta(bot))
