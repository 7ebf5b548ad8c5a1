"""
creatorlink.database.models — SQLAlchemy 2.0 Data Models
=========================================================

Tables:
- creator_mappings — Verified purchaser email → Discord member id
- ledger_entries   — Per-member XP and order counters

Both tables are written only through single-statement upserts
(see :mod:`creatorlink.services.identity_service` and
:mod:`creatorlink.services.ledger_service`).
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------
class Base(DeclarativeBase):
    """Shared base for all CreatorLink ORM models."""


# ---------------------------------------------------------------------------
# CreatorMapping — one row per verified purchaser email
# ---------------------------------------------------------------------------
class CreatorMapping(Base):
    """Binds a lowercase purchaser email to a Discord member.

    Re-mapping an email overwrites ``member_id`` and ``display_name``;
    ``created_at`` keeps the first verification time.
    """
    __tablename__ = "creator_mappings"

    email: Mapped[str] = mapped_column(String(320), primary_key=True)
    member_id: Mapped[str] = mapped_column(String(64), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(100), default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_creator_mappings_member_id", "member_id"),
    )

    def __repr__(self) -> str:
        return f"<CreatorMapping email={self.email!r} member={self.member_id}>"


# ---------------------------------------------------------------------------
# LedgerEntry — accrued XP per member
# ---------------------------------------------------------------------------
class LedgerEntry(Base):
    __tablename__ = "ledger_entries"

    member_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    order_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("xp >= 0", name="ck_ledger_entries_xp_nonneg"),
        CheckConstraint("order_count >= 0", name="ck_ledger_entries_orders_nonneg"),
        Index("ix_ledger_entries_xp_desc", "xp"),
    )

    def __repr__(self) -> str:
        return f"<LedgerEntry member={self.member_id} xp={self.xp} orders={self.order_count}>"
