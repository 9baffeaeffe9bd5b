"""Add TLD and catalog tables

Revision ID: f1a2b3c4d5e6
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "f1a2b3c4d5e6"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create the tld table and the catalogs TLDs reference."""
    op.create_table(
        "tld",
        sa.Column("tld_name", sa.String(length=255), nullable=False),
        sa.Column("revision_id", sa.Integer(), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("tld_name", name=op.f("pk_tld")),
    )

    op.create_table(
        "premium_list",
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("name", name=op.f("pk_premium_list")),
    )

    op.create_table(
        "reserved_list",
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("name", name=op.f("pk_reserved_list")),
    )

    op.create_table(
        "allocation_token",
        sa.Column("token", sa.String(length=255), nullable=False),
        sa.Column("token_type", sa.String(length=32), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("token", name=op.f("pk_allocation_token")),
    )
    op.create_index(
        "idx_allocation_token_type", "allocation_token", ["token_type"], unique=False
    )


def downgrade() -> None:
    """Drop the TLD and catalog tables."""
    op.drop_index("idx_allocation_token_type", table_name="allocation_token")
    op.drop_table("allocation_token")
    op.drop_table("reserved_list")
    op.drop_table("premium_list")
    op.drop_table("tld")
