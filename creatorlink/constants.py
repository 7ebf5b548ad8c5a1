"""
creatorlink.constants — Shared Constants
=========================================

Single source of truth for defaults and presentation constants.
Import from here instead of duplicating in cogs, services, and routes.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Rewards
# ---------------------------------------------------------------------------
DEFAULT_XP_PER_ORDER = 10

# ---------------------------------------------------------------------------
# Leaderboard
# ---------------------------------------------------------------------------
DEFAULT_LEADERBOARD_SIZE = 10
MIN_LEADERBOARD_LIMIT = 1
MAX_LEADERBOARD_LIMIT = 100

LEADERBOARD_TITLE = "\U0001f3c6 **Creator Leaderboard**"  # 🏆
LEADERBOARD_EMPTY = "_No orders recorded yet._"
RANK_BADGES: list[str] = ["\U0001f947", "\U0001f948", "\U0001f949"]  # 🥇🥈🥉

# ---------------------------------------------------------------------------
# Welcome
# ---------------------------------------------------------------------------
WELCOME_PLACEHOLDER = "{USER_ID}"
DEFAULT_WELCOME_MESSAGE = (
    "\U0001f44b Welcome, <@{USER_ID}>! "  # 👋
    "Hit the **Verify as Creator** button to unlock access."
)

# ---------------------------------------------------------------------------
# Webhooks
# ---------------------------------------------------------------------------
WEBHOOK_SIGNATURE_HEADER = "X-Shopify-Hmac-Sha256"
