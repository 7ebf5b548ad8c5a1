"""
creatorlink.database.engine — Database Connection & Async Helper
=================================================================

The Discord client and the HTTP API share one ``asyncio`` event loop.
SQLAlchemy is **synchronous**, so every DB call is shipped to a worker
thread through :func:`run_db` and the loop stays free:

    1. A webhook or gateway event arrives (async world).
    2. The handler calls ``await run_db(some_function, engine, arg)``.
    3. ``run_db`` runs the function via ``asyncio.to_thread()``.
    4. The result is awaited back in the handler.

Write serialization is left to the database.  On SQLite the engine runs
in WAL mode with a busy timeout and opens every transaction with
``BEGIN IMMEDIATE`` so concurrent upserts queue on the single writer lock
instead of failing.  On PostgreSQL the ``ON CONFLICT`` upserts are atomic
per row.

Usage::

    from creatorlink.database.engine import create_db_engine, init_db, run_db

    engine = create_db_engine()          # reads DATABASE_URL from .env
    init_db(engine)                      # CREATE TABLE IF NOT EXISTS …

    # Inside an async handler:
    row = await run_db(lookup_member, engine, "a@example.com")
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from contextlib import contextmanager
from typing import ParamSpec, TypeVar

from sqlalchemy import Engine, create_engine, event, make_url
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from creatorlink.database.models import Base

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

SQLITE_BUSY_TIMEOUT_SECONDS = 30


# ---------------------------------------------------------------------------
# Engine creation
# ---------------------------------------------------------------------------
def create_db_engine(url: str | None = None) -> Engine:
    """Build a SQLAlchemy :class:`Engine` from *url* or ``DATABASE_URL``.

    PostgreSQL gets a small pool sized for a single-process bot.  SQLite
    file databases are switched to WAL mode (see module docstring); an
    in-memory SQLite database shares one connection across threads.

    Raises
    ------
    RuntimeError
        If no URL is given and ``DATABASE_URL`` is not set.
    """
    url = url or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not set.  "
            "Copy .env.example → .env and set a SQLite or PostgreSQL URL."
        )

    if url.startswith("sqlite"):
        extra = {}
        if _is_sqlite_memory(url):
            # One shared connection, or every worker thread sees an empty DB.
            extra["poolclass"] = StaticPool
        engine = create_engine(
            url,
            echo=False,
            connect_args={
                "check_same_thread": False,  # run_db hops threads
                "timeout": SQLITE_BUSY_TIMEOUT_SECONDS,
            },
            **extra,
        )
        _configure_sqlite(engine)
    else:
        engine = create_engine(
            url,
            echo=False,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            pool_timeout=10,
            pool_recycle=3600,
        )
    logger.info("Database engine created → %s", engine.url.render_as_string(hide_password=True))
    return engine


def _is_sqlite_memory(url: str) -> bool:
    parsed = make_url(url)
    database = parsed.database or ""
    return database in ("", ":memory:") or parsed.query.get("mode") == "memory"


def _configure_sqlite(engine: Engine) -> None:
    """Enable WAL and single-writer transactions on a SQLite engine."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself (see _on_begin).
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_SECONDS * 1000}")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


# ---------------------------------------------------------------------------
# Schema initialization
# ---------------------------------------------------------------------------
def init_db(engine: Engine) -> None:
    """Create all tables defined in :mod:`creatorlink.database.models`.

    Safe on every startup (``CREATE TABLE IF NOT EXISTS``).

    .. note::

        In production the schema is managed by Alembic (``alembic upgrade
        head``).  ``create_all`` is retained for dev/test environments.
    """
    Base.metadata.create_all(engine)
    logger.info("Database tables verified / created.")


# ---------------------------------------------------------------------------
# Session helper
# ---------------------------------------------------------------------------
@contextmanager
def get_session(engine: Engine):
    """Yield a :class:`Session` that commits on success and rolls back
    on exception.

    Usage::

        with get_session(engine) as session:
            session.execute(stmt)
            # commit happens automatically on block exit
    """
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Async bridge
# ---------------------------------------------------------------------------
async def run_db(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Run a **synchronous** database function on a background thread.

    Every DB call made from a coroutine goes through this wrapper::

        result = await run_db(my_sync_db_function, engine, member_id)
    """
    return await asyncio.to_thread(func, *args, **kwargs)
