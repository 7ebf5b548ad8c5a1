"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Make sure nothing under test ever picks up a developer's real .env values.
# ---------------------------------------------------------------------------
WEBHOOK_SECRET = "test-webhook-secret"
INTERNAL_SECRET = "test-internal-secret-" + "x" * 24

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DISCORD_TOKEN", "test-token")
os.environ.setdefault("WEBHOOK_SECRET", WEBHOOK_SECRET)
os.environ.setdefault("INTERNAL_API_SECRET", INTERNAL_SECRET)
os.environ.setdefault("VERIFY_CHANNEL_ID", "1000")

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from creatorlink.config import CreatorLinkConfig  # noqa: E402
from creatorlink.database.models import Base  # noqa: E402


@pytest.fixture
def db_engine() -> Engine:
    """In-memory SQLite engine with all CreatorLink tables.

    Uses StaticPool so every thread (``run_db`` uses ``asyncio.to_thread``)
    shares the same in-memory database.
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine: Engine):
    with Session(db_engine) as session:
        yield session
        session.rollback()


@pytest.fixture
def app_config() -> CreatorLinkConfig:
    return CreatorLinkConfig(
        discord_token="test-token",
        webhook_secret=WEBHOOK_SECRET,
        internal_api_secret=INTERNAL_SECRET,
        welcome_channel_id=1000,
        leaderboard_channel_id=2000,
        xp_per_order=10,
        leaderboard_size=10,
    )
