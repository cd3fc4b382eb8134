"""tournament day tables

Revision ID: 8b2e4f61c0d3
Revises: 3f9c1d2a7b10
Create Date: 2026-10-19 14:02:11.530917
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "8b2e4f61c0d3"
down_revision = "3f9c1d2a7b10"
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _timestamp_indexes(table: str) -> None:
    with op.batch_alter_table(table) as batch_op:
        batch_op.create_index(batch_op.f(f"ix_{table}_created_at"), ["created_at"], unique=False)
        batch_op.create_index(batch_op.f(f"ix_{table}_updated_at"), ["updated_at"], unique=False)


def upgrade():
    # --- tournaments ---
    op.create_table(
        "tournaments",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("event_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("court_count", sa.Integer(), nullable=False),
        sa.Column("game_length_minutes", sa.Integer(), nullable=False),
        sa.Column("max_players_per_team", sa.Integer(), nullable=False),
        sa.Column("min_players_per_team", sa.Integer(), nullable=False),
        sa.Column("first_game_at", sa.Time(), nullable=False),
        *_timestamps(),
    )
    _timestamp_indexes("tournaments")
    with op.batch_alter_table("tournaments") as batch_op:
        batch_op.create_index(batch_op.f("ix_tournaments_status"), ["status"], unique=False)

    # --- tournament_teams ---
    op.create_table(
        "tournament_teams",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "tournament_id", sa.Integer(), sa.ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    _timestamp_indexes("tournament_teams")
    with op.batch_alter_table("tournament_teams") as batch_op:
        batch_op.create_index(batch_op.f("ix_tournament_teams_tournament_id"), ["tournament_id"], unique=False)
        batch_op.create_index("ix_tournament_teams_position", ["tournament_id", "position"], unique=False)

    # --- tournament_entrants ---
    op.create_table(
        "tournament_entrants",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "tournament_id", sa.Integer(), sa.ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "team_id", sa.Integer(), sa.ForeignKey("tournament_teams.id", ondelete="SET NULL"), nullable=True
        ),
        sa.Column("player_id", sa.Integer(), sa.ForeignKey("players.id", ondelete="SET NULL"), nullable=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("age_category", sa.String(length=32), nullable=True),
        sa.Column("grade_level", sa.String(length=32), nullable=True),
        sa.Column("registered_team", sa.String(length=120), nullable=True),
        sa.Column("walk_in", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("tournament_id", "player_id", name="uq_tournament_entrants_player"),
    )
    _timestamp_indexes("tournament_entrants")
    with op.batch_alter_table("tournament_entrants") as batch_op:
        batch_op.create_index(batch_op.f("ix_tournament_entrants_tournament_id"), ["tournament_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_tournament_entrants_team_id"), ["team_id"], unique=False)

    # --- tournament_games ---
    op.create_table(
        "tournament_games",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column(
            "tournament_id", sa.Integer(), sa.ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("round", sa.Integer(), nullable=False),
        sa.Column("court", sa.Integer(), nullable=False),
        sa.Column("starts_at", sa.Time(), nullable=False),
        sa.Column(
            "team_a_id", sa.Integer(), sa.ForeignKey("tournament_teams.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "team_b_id", sa.Integer(), sa.ForeignKey("tournament_teams.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("score_a", sa.Integer(), nullable=True),
        sa.Column("score_b", sa.Integer(), nullable=True),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("tournament_id", "number", name="uq_tournament_games_number"),
    )
    _timestamp_indexes("tournament_games")
    with op.batch_alter_table("tournament_games") as batch_op:
        batch_op.create_index(batch_op.f("ix_tournament_games_tournament_id"), ["tournament_id"], unique=False)


def downgrade():
    for table in ("tournament_games", "tournament_entrants", "tournament_teams", "tournaments"):
        op.drop_table(table)
