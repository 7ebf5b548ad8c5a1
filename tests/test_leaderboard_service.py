"""
tests/test_leaderboard_service.py — Leaderboard Render & Publish-or-Edit
=========================================================================

Gateway objects are lightweight mocks; the ledger is the shared in-memory
SQLite engine.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import discord

from creatorlink.constants import LEADERBOARD_EMPTY, LEADERBOARD_TITLE, RANK_BADGES
from creatorlink.database.engine import create_db_engine, init_db
from creatorlink.services.leaderboard_service import (
    LeaderboardState,
    publish_leaderboard,
    render_leaderboard,
    resolve_display_name,
)
from creatorlink.services.ledger_service import LeaderboardRow, award_order


# Helper to run async tests without pytest-asyncio
def run_async(coro):
    """Run an async coroutine in a new event loop."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _not_found(text: str = "Unknown Message") -> discord.NotFound:
    return discord.NotFound(MagicMock(status=404, reason="Not Found"), text)


def _make_message(message_id: int) -> MagicMock:
    message = MagicMock()
    message.id = message_id
    message.edit = AsyncMock()
    message.pin = AsyncMock()
    return message


def _make_channel(*, sent_ids: list[int] | None = None, guild=None) -> MagicMock:
    """Mock channel whose send() returns messages with the given ids in order."""
    channel = MagicMock()
    channel.guild = guild
    sent = [_make_message(mid) for mid in (sent_ids or [555])]
    channel.send = AsyncMock(side_effect=sent)
    channel.fetch_message = AsyncMock(side_effect=lambda mid: _find(sent, mid))
    channel.sent_messages = sent
    return channel


def _find(messages: list[MagicMock], message_id: int) -> MagicMock:
    for message in messages:
        if message.id == message_id:
            return message
    raise _not_found()


def _make_guild(members: dict[int, str] | None = None, fetchable: dict[int, str] | None = None):
    members = members or {}
    fetchable = fetchable or {}
    guild = MagicMock()

    def _get_member(member_id):
        if member_id in members:
            return MagicMock(display_name=members[member_id])
        return None

    async def _fetch_member(member_id):
        if member_id in fetchable:
            return MagicMock(display_name=fetchable[member_id])
        raise _not_found("Unknown Member")

    guild.get_member = _get_member
    guild.fetch_member = AsyncMock(side_effect=_fetch_member)
    return guild


# ===========================================================================
# render_leaderboard
# ===========================================================================
class TestRenderLeaderboard:
    def test_empty(self):
        text = render_leaderboard([], [])
        assert text.startswith(LEADERBOARD_TITLE)
        assert LEADERBOARD_EMPTY in text

    def test_badges_then_numbers(self):
        rows = [LeaderboardRow(rank=i, member_id=f"u{i}", xp=100 - i, order_count=i) for i in range(1, 5)]
        text = render_leaderboard(rows, ["A", "B", "C", "D"])
        lines = text.splitlines()
        assert lines[2].startswith(RANK_BADGES[0])
        assert lines[3].startswith(RANK_BADGES[1])
        assert lines[4].startswith(RANK_BADGES[2])
        assert lines[5].startswith("`#4`")

    def test_row_format(self):
        rows = [LeaderboardRow(rank=1, member_id="u1", xp=1200, order_count=1)]
        text = render_leaderboard(rows, ["Alice"])
        assert "**Alice** · 1,200 XP · 1 order" in text

    def test_plural_orders(self):
        rows = [LeaderboardRow(rank=1, member_id="u1", xp=20, order_count=2)]
        assert "2 orders" in render_leaderboard(rows, ["Alice"])


# ===========================================================================
# resolve_display_name
# ===========================================================================
class TestResolveDisplayName:
    def test_cached_member(self):
        guild = _make_guild(members={42: "Cached"})
        assert run_async(resolve_display_name(guild, "42")) == "Cached"
        guild.fetch_member.assert_not_awaited()

    def test_fetched_member(self):
        guild = _make_guild(fetchable={42: "Fetched"})
        assert run_async(resolve_display_name(guild, "42")) == "Fetched"

    def test_fetch_failure_falls_back_to_id(self):
        guild = _make_guild()
        assert run_async(resolve_display_name(guild, "42")) == "42"

    def test_fetch_timeout_falls_back_to_id(self):
        guild = _make_guild()
        guild.fetch_member = AsyncMock(side_effect=asyncio.TimeoutError())
        assert run_async(resolve_display_name(guild, "42")) == "42"

    def test_non_numeric_id_falls_back(self):
        guild = _make_guild()
        assert run_async(resolve_display_name(guild, "u1")) == "u1"
        guild.fetch_member.assert_not_awaited()

    def test_no_guild(self):
        assert run_async(resolve_display_name(None, "42")) == "42"


# ===========================================================================
# publish_leaderboard
# ===========================================================================
class TestPublishLeaderboard:
    def test_first_publish_creates_and_pins(self, db_engine):
        award_order(db_engine, "u1", 10)
        channel = _make_channel(sent_ids=[555])
        state = LeaderboardState()

        message_id = run_async(publish_leaderboard(channel, db_engine, state, limit=10))

        assert message_id == 555
        assert state.message_id == 555
        channel.send.assert_awaited_once()
        channel.sent_messages[0].pin.assert_awaited_once()
        assert "u1" in channel.send.await_args.kwargs["content"]

    def test_second_publish_edits_in_place(self, db_engine):
        award_order(db_engine, "u1", 10)
        channel = _make_channel(sent_ids=[555])
        state = LeaderboardState()

        run_async(publish_leaderboard(channel, db_engine, state, limit=10))
        award_order(db_engine, "u1", 10)
        message_id = run_async(publish_leaderboard(channel, db_engine, state, limit=10))

        assert message_id == 555
        assert channel.send.await_count == 1
        message = channel.sent_messages[0]
        message.edit.assert_awaited_once()
        assert "20 XP" in message.edit.await_args.kwargs["content"]

    def test_deleted_message_is_recreated(self, db_engine):
        channel = _make_channel(sent_ids=[777])
        state = LeaderboardState(message_id=555)  # stale id from an earlier publish

        message_id = run_async(publish_leaderboard(channel, db_engine, state, limit=10))

        assert message_id == 777
        assert state.message_id == 777
        channel.send.assert_awaited_once()

    def test_failed_edit_is_recreated(self, db_engine):
        channel = _make_channel(sent_ids=[555, 556])
        state = LeaderboardState()
        run_async(publish_leaderboard(channel, db_engine, state, limit=10))
        channel.sent_messages[0].edit.side_effect = discord.Forbidden(
            MagicMock(status=403, reason="Forbidden"), "Missing Access"
        )

        message_id = run_async(publish_leaderboard(channel, db_engine, state, limit=10))

        assert message_id == 556
        assert state.message_id == 556
        assert channel.send.await_count == 2

    def test_pin_failure_is_not_fatal(self, db_engine):
        channel = _make_channel(sent_ids=[555])
        channel.sent_messages[0].pin.side_effect = _not_found()
        state = LeaderboardState()

        message_id = run_async(publish_leaderboard(channel, db_engine, state, limit=10))

        assert message_id == 555
        assert state.message_id == 555

    def test_names_resolved_per_row(self, db_engine):
        award_order(db_engine, "42", 30)
        award_order(db_engine, "43", 20)
        guild = _make_guild(members={42: "Alice"})  # 43 can't be resolved
        channel = _make_channel(sent_ids=[555], guild=guild)

        run_async(publish_leaderboard(channel, db_engine, LeaderboardState(), limit=10))

        content = channel.send.await_args.kwargs["content"]
        assert "**Alice**" in content
        assert "**43**" in content

    def test_limit_applies(self, db_engine):
        for i in range(5):
            award_order(db_engine, f"u{i}", 10 * (i + 1))
        channel = _make_channel(sent_ids=[555])

        run_async(publish_leaderboard(channel, db_engine, LeaderboardState(), limit=2))

        content = channel.send.await_args.kwargs["content"]
        assert "u4" in content and "u3" in content
        assert "u0" not in content

    def test_fresh_states_are_independent(self, db_engine):
        first, second = LeaderboardState(), LeaderboardState()
        run_async(publish_leaderboard(_make_channel(sent_ids=[1]), db_engine, first, limit=10))
        assert first.message_id == 1
        assert second.message_id is None

    def test_unresolvable_names_do_not_abort_publish(self, db_engine):
        award_order(db_engine, "42", 30)
        guild = _make_guild()
        guild.fetch_member = AsyncMock(side_effect=asyncio.TimeoutError())
        channel = _make_channel(sent_ids=[5], guild=guild)

        message_id = run_async(publish_leaderboard(channel, db_engine, LeaderboardState(), limit=10))

        assert message_id == 5
        assert "**42**" in channel.send.await_args.kwargs["content"]

    def test_edit_timeout_is_recreated(self, db_engine):
        channel = _make_channel(sent_ids=[555, 556])
        state = LeaderboardState()
        run_async(publish_leaderboard(channel, db_engine, state, limit=10))
        channel.sent_messages[0].edit.side_effect = asyncio.TimeoutError()

        message_id = run_async(publish_leaderboard(channel, db_engine, state, limit=10))

        assert message_id == 556
        assert state.message_id == 556

    def test_pin_network_error_is_not_fatal(self, db_engine):
        channel = _make_channel(sent_ids=[555])
        channel.sent_messages[0].pin.side_effect = OSError("connection reset")

        assert run_async(publish_leaderboard(channel, db_engine, LeaderboardState(), limit=10)) == 555

    def test_overlapping_publishes_send_one_message(self, tmp_path):
        engine = create_db_engine(f"sqlite:///{tmp_path / 'board.db'}")
        init_db(engine)
        award_order(engine, "u1", 10)
        channel = _make_channel(sent_ids=[1, 2])
        pending = list(channel.sent_messages)

        async def _slow_send(**kwargs):
            await asyncio.sleep(0.05)
            return pending.pop(0)

        channel.send = AsyncMock(side_effect=_slow_send)
        state = LeaderboardState()

        async def _publish_twice():
            return await asyncio.gather(
                publish_leaderboard(channel, engine, state, limit=10),
                publish_leaderboard(channel, engine, state, limit=10),
            )

        ids = run_async(_publish_twice())

        assert ids == [1, 1]
        assert channel.send.await_count == 1
        channel.sent_messages[0].edit.assert_awaited_once()
        engine.dispose()
