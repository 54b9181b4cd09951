"""Create giveaways and giveaway_entries

Revision ID: 0001
Revises:
Create Date: 2025-09-24 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "giveaways",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("guild_id", sa.String(), nullable=True),
        sa.Column("channel_id", sa.String(), nullable=False),
        sa.Column("message_id", sa.String(), nullable=True),
        sa.Column("prize", sa.String(100), nullable=False),
        sa.Column("title", sa.String(100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("winners", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("host_id", sa.String(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="running"),
        sa.CheckConstraint("winners >= 1", name="ck_giveaways_winners_positive"),
    )
    op.create_index("idx_giveaways_status_ends_at", "giveaways", ["status", "ends_at"])

    op.create_table(
        "giveaway_entries",
        sa.Column(
            "giveaway_id",
            sa.BigInteger(),
            sa.ForeignKey("giveaways.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("user_id", sa.String(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("idx_giveaway_entries_user_id", "giveaway_entries", ["user_id"])


def downgrade() -> None:
    op.drop_index("idx_giveaway_entries_user_id", table_name="giveaway_entries")
    op.drop_table("giveaway_entries")
    op.drop_index("idx_giveaways_status_ends_at", table_name="giveaways")
    op.drop_table("giveaways")
