"""create_user_textures

Revision ID: 20261018090000
Revises:
Create Date: 2026-10-18 09:00:00.000000

Creates the user_textures table holding the current skin and cape for
each identity, keyed by the canonical (hyphen-less, lowercase) UUID.
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "20261018090000"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create user_textures table and its identity index."""
    op.create_table(
        "user_textures",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_uuid", sa.String(length=32), nullable=False),
        sa.Column("skin_location", sa.String(length=500), nullable=True),
        sa.Column("skin_hash", sa.String(length=64), nullable=True),
        sa.Column(
            "is_slim", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("cape_location", sa.String(length=500), nullable=True),
        sa.Column("cape_hash", sa.String(length=64), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_user_textures_user_uuid", "user_textures", ["user_uuid"], unique=True
    )


def downgrade() -> None:
    """Drop user_textures table."""
    op.drop_index("ix_user_textures_user_uuid", table_name="user_textures")
    op.drop_table("user_textures")
