"""initial schema

Revision ID: 3f9c1d2a7b10
Revises:
Create Date: 2026-10-19 09:12:40.118204
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "3f9c1d2a7b10"
down_revision = None
branch_labels = None
depends_on = None


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
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
    # --- teams ---
    op.create_table(
        "teams",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=120), nullable=True),
        sa.Column("registration_type", sa.String(length=16), nullable=False),
        sa.Column("donation_amount_cents", sa.Integer(), nullable=False),
        sa.Column("transaction_id", sa.String(length=120), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("approved", sa.Boolean(), nullable=False),
        sa.Column("medical_consent", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("donation_amount_cents >= 0", name="ck_teams_amount_nonneg"),
    )
    _timestamp_indexes("teams")
    with op.batch_alter_table("teams") as batch_op:
        batch_op.create_index(batch_op.f("ix_teams_name"), ["name"], unique=False)
        batch_op.create_index(batch_op.f("ix_teams_registration_type"), ["registration_type"], unique=False)
        batch_op.create_index(batch_op.f("ix_teams_transaction_id"), ["transaction_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_teams_status"), ["status"], unique=False)
        batch_op.create_index("ix_teams_status_created", ["status", "created_at"], unique=False)

    # --- players ---
    op.create_table(
        "players",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("player_name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("age", sa.Integer(), nullable=False),
        sa.Column("age_category", sa.String(length=32), nullable=False),
        sa.Column("emergency_contact_name", sa.String(length=120), nullable=False),
        sa.Column("emergency_contact_phone", sa.String(length=32), nullable=False),
        sa.Column("parent_consent", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    _timestamp_indexes("players")
    with op.batch_alter_table("players") as batch_op:
        batch_op.create_index(batch_op.f("ix_players_team_id"), ["team_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_players_email"), ["email"], unique=False)

    # --- sponsors ---
    op.create_table(
        "sponsors",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("website", sa.String(length=255), nullable=True),
        sa.Column("logo_url", sa.String(length=512), nullable=True),
        sa.Column("contact_name", sa.String(length=120), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("donation_amount_cents", sa.Integer(), nullable=False),
        sa.Column("approved", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("donation_amount_cents >= 0", name="ck_sponsors_amount_nonneg"),
    )
    _timestamp_indexes("sponsors")
    with op.batch_alter_table("sponsors") as batch_op:
        batch_op.create_index(batch_op.f("ix_sponsors_name"), ["name"], unique=False)
        batch_op.create_index(batch_op.f("ix_sponsors_approved"), ["approved"], unique=False)
        batch_op.create_index("ix_sponsors_approved_amount", ["approved", "donation_amount_cents"], unique=False)

    # --- volunteers ---
    op.create_table(
        "volunteers",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=False),
        sa.Column("age_or_rank", sa.String(length=64), nullable=False),
        sa.Column("availability", sa.Text(), nullable=False),
        sa.Column("skills", sa.Text(), nullable=False),
        sa.Column("role_preference", sa.String(length=64), nullable=True),
        sa.Column("guardian_supervision", sa.Boolean(), nullable=False),
        sa.Column("approved", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    _timestamp_indexes("volunteers")
    with op.batch_alter_table("volunteers") as batch_op:
        batch_op.create_index(batch_op.f("ix_volunteers_name"), ["name"], unique=False)
        batch_op.create_index(batch_op.f("ix_volunteers_approved"), ["approved"], unique=False)

    # --- payments ---
    op.create_table(
        "payments",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("registration_id", sa.Integer(), sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("payment_method", sa.String(length=32), nullable=False),
        sa.Column("amount_cents", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("transaction_id", sa.String(length=120), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("amount_cents >= 0", name="ck_payments_amount_nonneg"),
        sa.UniqueConstraint("transaction_id", name="uq_payments_transaction_id"),
    )
    _timestamp_indexes("payments")
    with op.batch_alter_table("payments") as batch_op:
        batch_op.create_index(batch_op.f("ix_payments_registration_id"), ["registration_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_payments_status"), ["status"], unique=False)
        batch_op.create_index("ix_payments_status_created", ["status", "created_at"], unique=False)

    # --- status_changes ---
    op.create_table(
        "status_changes",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("registration_id", sa.Integer(), sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("from_state", sa.String(length=32), nullable=False),
        sa.Column("to_state", sa.String(length=32), nullable=False),
        sa.Column("event", sa.String(length=32), nullable=False),
        sa.Column("actor", sa.String(length=16), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    with op.batch_alter_table("status_changes") as batch_op:
        batch_op.create_index("ix_status_changes_reg_at", ["registration_id", "created_at"], unique=False)

    # --- webhook_events ---
    op.create_table(
        "webhook_events",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("event_id", sa.String(length=120), nullable=False),
        sa.Column("event_type", sa.String(length=120), nullable=False),
        sa.Column("transaction_id", sa.String(length=120), nullable=True),
        sa.Column("registration_id", sa.Integer(), nullable=True),
        sa.Column("outcome", sa.String(length=64), nullable=True),
        sa.Column("processed_at", sa.DateTime(), nullable=True),
        sa.Column("payload", sa.Text(), nullable=True),
        *_timestamps(),
    )
    _timestamp_indexes("webhook_events")
    with op.batch_alter_table("webhook_events") as batch_op:
        batch_op.create_index(batch_op.f("ix_webhook_events_event_id"), ["event_id"], unique=True)
        batch_op.create_index(batch_op.f("ix_webhook_events_event_type"), ["event_type"], unique=False)
        batch_op.create_index(batch_op.f("ix_webhook_events_transaction_id"), ["transaction_id"], unique=False)
        batch_op.create_index(batch_op.f("ix_webhook_events_registration_id"), ["registration_id"], unique=False)
        batch_op.create_index("ix_webhook_events_type_created", ["event_type", "created_at"], unique=False)


def downgrade():
    for table in ("webhook_events", "status_changes", "payments", "volunteers", "sponsors", "players", "teams"):
        op.drop_table(table)
