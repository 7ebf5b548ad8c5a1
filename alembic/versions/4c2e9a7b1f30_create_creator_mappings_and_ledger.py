"""Create creator_mappings and ledger_entries tables

Revision ID: 4c2e9a7b1f30
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4c2e9a7b1f30"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the identity map and the XP ledger."""
    op.create_table(
        "creator_mappings",
        sa.Column("email", sa.String(320), primary_key=True),
        sa.Column("member_id", sa.String(64), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_creator_mappings_member_id", "creator_mappings", ["member_id"])

    op.create_table(
        "ledger_entries",
        sa.Column("member_id", sa.String(64), primary_key=True),
        sa.Column("xp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("order_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("xp >= 0", name="ck_ledger_entries_xp_nonneg"),
        sa.CheckConstraint("order_count >= 0", name="ck_ledger_entries_orders_nonneg"),
    )
    op.create_index("ix_ledger_entries_xp_desc", "ledger_entries", ["xp"])


def downgrade() -> None:
    """Drop the ledger and the identity map."""
    op.drop_index("ix_ledger_entries_xp_desc", table_name="ledger_entries")
    op.drop_table("ledger_entries")

    op.drop_index("ix_creator_mappings_member_id", table_name="creator_mappings")
    op.drop_table("creator_mappings")
