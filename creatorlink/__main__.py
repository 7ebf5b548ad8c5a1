"""
creatorlink.__main__ — Entry point for ``python -m creatorlink``
=================================================================

Wiring:
1. Load .env (secrets) and config.yaml (soft settings).
2. Create the SQLAlchemy engine and ensure tables exist.
3. Build the CreatorLinkBot and attach it to the FastAPI app.
4. Run the Discord client and the uvicorn server on one event loop.

Missing mandatory settings stop the process before anything connects.
"""

from __future__ import annotations

import asyncio
import logging
import sys

import uvicorn
from dotenv import load_dotenv

from creatorlink.api import deps
from creatorlink.api.main import app
from creatorlink.bot.core import CreatorLinkBot
from creatorlink.config import CreatorLinkConfig
from creatorlink.database.engine import init_db

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("creatorlink")


async def serve(cfg: CreatorLinkConfig) -> None:
    """Run the gateway client and the HTTP API until either stops."""
    engine = deps.get_engine()
    bot = CreatorLinkBot(cfg=cfg, engine=engine)
    app.state.bot = bot

    server = uvicorn.Server(
        uvicorn.Config(app, host=cfg.api_host, port=cfg.api_port, log_config=None)
    )

    async def run_bot() -> None:
        try:
            await bot.start(cfg.discord_token)
        finally:
            server.should_exit = True

    async def run_api() -> None:
        try:
            await server.serve()
        finally:
            await bot.close()

    async with bot:
        await asyncio.gather(run_bot(), run_api())


def main() -> None:
    """Bootstrap and run CreatorLink."""
    load_dotenv()

    try:
        cfg = deps.get_config()
        engine = deps.get_engine()
    except RuntimeError as exc:  # ConfigError, missing DATABASE_URL
        logger.critical("%s", exc)
        sys.exit(1)

    init_db(engine)
    logger.info(
        "Config loaded — welcome channel %s, leaderboard channel %s, %d XP per order",
        cfg.welcome_channel_id, cfg.leaderboard_channel_id, cfg.xp_per_order,
    )

    try:
        asyncio.run(serve(cfg))
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
