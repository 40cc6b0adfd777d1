"""auction schema

Revision ID: 0001_auction_schema
Revises:
Create Date: 2024-11-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_auction_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "participants",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("facility_name", sa.String(length=255), nullable=True),
        sa.Column("initial_tickets", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('working','inactive','at_party')",
            name=op.f("ck_participants_status_enum"),
        ),
        sa.CheckConstraint(
            "initial_tickets >= 0",
            name=op.f("ck_participants_initial_tickets_non_negative"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_participants")),
    )
    op.create_table(
        "prize_tiers",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("color", sa.String(length=32), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_prize_tiers")),
    )
    op.create_table(
        "auction_settings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column(
            "is_auction_open", sa.Boolean(), server_default=sa.text("true"), nullable=False
        ),
        sa.Column("conflict_id", sa.String(length=64), nullable=True),
        sa.Column("conflict_participant_id", sa.String(length=64), nullable=True),
        sa.Column("conflict_existing_prize_id", sa.String(length=64), nullable=True),
        sa.Column("conflict_new_prize_id", sa.String(length=64), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_auction_settings")),
    )
    op.create_table(
        "prizes",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("image_url", sa.String(length=1024), nullable=False),
        sa.Column("tier_id", sa.String(length=64), nullable=True),
        sa.Column("number_of_winners", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "number_of_winners >= 1",
            name=op.f("ck_prizes_number_of_winners_positive"),
        ),
        sa.ForeignKeyConstraint(
            ["tier_id"],
            ["prize_tiers.id"],
            name=op.f("fk_prizes_tier_id_prize_tiers"),
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_prizes")),
    )
    op.create_index(op.f("ix_prizes_tier_id"), "prizes", ["tier_id"], unique=False)
    op.create_table(
        "prize_entries",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("prize_id", sa.String(length=64), nullable=False),
        sa.Column("participant_id", sa.String(length=64), nullable=False),
        sa.Column("ticket_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "ticket_count > 0", name=op.f("ck_prize_entries_ticket_count_positive")
        ),
        sa.ForeignKeyConstraint(
            ["participant_id"],
            ["participants.id"],
            name=op.f("fk_prize_entries_participant_id_participants"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["prize_id"],
            ["prizes.id"],
            name=op.f("fk_prize_entries_prize_id_prizes"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_prize_entries")),
        sa.UniqueConstraint(
            "prize_id", "participant_id", name="uq_prize_entry_participant"
        ),
    )
    op.create_index(
        op.f("ix_prize_entries_participant_id"),
        "prize_entries",
        ["participant_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_prize_entries_prize_id"), "prize_entries", ["prize_id"], unique=False
    )
    op.create_table(
        "prize_winners",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("prize_id", sa.String(length=64), nullable=False),
        sa.Column("participant_id", sa.String(length=64), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("drawn_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["participant_id"],
            ["participants.id"],
            name=op.f("fk_prize_winners_participant_id_participants"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["prize_id"],
            ["prizes.id"],
            name=op.f("fk_prize_winners_prize_id_prizes"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_prize_winners")),
        sa.UniqueConstraint(
            "prize_id", "participant_id", name="uq_prize_winner_participant"
        ),
    )
    op.create_index(
        "ix_prize_winners_participant", "prize_winners", ["participant_id"], unique=False
    )
    op.create_index(
        op.f("ix_prize_winners_prize_id"), "prize_winners", ["prize_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_prize_winners_prize_id"), table_name="prize_winners")
    op.drop_index("ix_prize_winners_participant", table_name="prize_winners")
    op.drop_table("prize_winners")
    op.drop_index(op.f("ix_prize_entries_prize_id"), table_name="prize_entries")
    op.drop_index(op.f("ix_prize_entries_participant_id"), table_name="prize_entries")
    op.drop_table("prize_entries")
    op.drop_index(op.f("ix_prizes_tier_id"), table_name="prizes")
    op.drop_table("prizes")
    op.drop_table("auction_settings")
    op.drop_table("prize_tiers")
    op.drop_table("participants")
