"""
creatorlink.config — YAML + Environment Configuration Loader
=============================================================

Soft settings (channel ids, welcome template, XP award) may live in an
optional ``config.yaml``.  Secrets always come from the environment
(``.env`` is loaded by the entry points).  Environment variables win over
YAML so a container can be configured without a file.

Usage::

    from creatorlink.config import load_config

    cfg = load_config()            # reads ./config.yaml if present
    print(cfg.xp_per_order)        # 10
    print(cfg.welcome_channel_id)  # 1468816181854081229
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from creatorlink.constants import (
    DEFAULT_LEADERBOARD_SIZE,
    DEFAULT_WELCOME_MESSAGE,
    DEFAULT_XP_PER_ORDER,
)


class ConfigError(RuntimeError):
    """A mandatory setting is missing or malformed.  The process must not start."""


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class CreatorLinkConfig:
    """Immutable configuration for both the bot and the API."""

    # Secrets
    discord_token: str
    webhook_secret: str
    internal_api_secret: str

    # Discord
    welcome_channel_id: int
    welcome_message: str = DEFAULT_WELCOME_MESSAGE
    leaderboard_channel_id: int | None = None  # Publishing disabled when unset

    # Rewards
    xp_per_order: int = DEFAULT_XP_PER_ORDER
    leaderboard_size: int = DEFAULT_LEADERBOARD_SIZE

    # HTTP
    api_host: str = "0.0.0.0"
    api_port: int = 8000


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _lookup(raw: dict, key: str, env: str) -> str | None:
    value = os.getenv(env)
    if value is None or not value.strip():
        value = raw.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _require(raw: dict, key: str | None, env: str) -> str:
    if key is None:
        value = os.getenv(env, "").strip() or None
    else:
        value = _lookup(raw, key, env)
    if value is None:
        raise ConfigError(f"{env} is not set.  Copy .env.example → .env and fill it in.")
    return value


def _as_int(value: str | None, name: str, default: int | None = None) -> int | None:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> CreatorLinkConfig:
    """Build a :class:`CreatorLinkConfig` from *path* and the environment.

    The YAML file is optional.  Secrets (``DISCORD_TOKEN``,
    ``WEBHOOK_SECRET``, ``INTERNAL_API_SECRET``) are read from the
    environment only.

    Raises
    ------
    ConfigError
        If a required value is missing, an integer setting is malformed,
        or the YAML file is not a mapping.
    """
    config_path = Path(path)
    raw: dict = {}
    if config_path.exists():
        with open(config_path, encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
        if not isinstance(raw, dict):
            raise ConfigError(f"{config_path} must contain a YAML mapping")

    xp_per_order = _as_int(
        _lookup(raw, "xp_per_order", "XP_PER_ORDER"), "XP_PER_ORDER", DEFAULT_XP_PER_ORDER
    )
    if xp_per_order < 0:
        raise ConfigError(f"XP_PER_ORDER must be non-negative, got {xp_per_order}")

    leaderboard_size = _as_int(
        _lookup(raw, "leaderboard_size", "LEADERBOARD_SIZE"),
        "LEADERBOARD_SIZE",
        DEFAULT_LEADERBOARD_SIZE,
    )

    return CreatorLinkConfig(
        discord_token=_require(raw, None, "DISCORD_TOKEN"),
        webhook_secret=_require(raw, None, "WEBHOOK_SECRET"),
        internal_api_secret=_require(raw, None, "INTERNAL_API_SECRET"),
        welcome_channel_id=_as_int(
            _require(raw, "welcome_channel_id", "VERIFY_CHANNEL_ID"), "VERIFY_CHANNEL_ID"
        ),
        welcome_message=(
            _lookup(raw, "welcome_message", "WELCOME_MESSAGE") or DEFAULT_WELCOME_MESSAGE
        ),
        leaderboard_channel_id=_as_int(
            _lookup(raw, "leaderboard_channel_id", "LEADERBOARD_CHANNEL_ID"),
            "LEADERBOARD_CHANNEL_ID",
        ),
        xp_per_order=xp_per_order,
        leaderboard_size=leaderboard_size,
        api_host=_lookup(raw, "api_host", "API_HOST") or "0.0.0.0",
        api_port=_as_int(_lookup(raw, "api_port", "API_PORT"), "API_PORT", 8000),
    )
