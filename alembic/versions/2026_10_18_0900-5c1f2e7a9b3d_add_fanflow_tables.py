"""add events, identities, suppression, scheduled actions and variant tables

Revision ID: 5c1f2e7a9b3d
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "5c1f2e7a9b3d"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema: event log, identity, suppression and automation tables."""
    op.create_table(
        "events",
        sa.Column("sequence", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("type", sa.String(length=64), nullable=False),
        sa.Column("subject_id", sa.String(length=255), nullable=False),
        sa.Column("anonymous_id", sa.String(length=255), nullable=False),
        sa.Column("identified_id", sa.String(length=320), nullable=True),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("attributes", postgresql.JSONB(), nullable=False),
        sa.UniqueConstraint("id", name="uq_events_id"),
    )
    op.create_index("ix_events_type", "events", ["type"])
    op.create_index("ix_events_subject_occurred", "events", ["subject_id", "occurred_at"])
    op.create_index(
        "ix_events_anonymous_occurred", "events", ["anonymous_id", "occurred_at"]
    )

    op.create_table(
        "visitor_identities",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("anonymous_id", sa.String(length=255), nullable=False),
        sa.Column("identified_id", sa.String(length=320), nullable=True),
        sa.Column("identifier_kind", sa.String(length=16), nullable=True),
        sa.Column("identified_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("preferred_listen_platform", sa.String(length=32), nullable=True),
        sa.Column("preferred_platform_set_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_visitor_identities_anonymous_id",
        "visitor_identities",
        ["anonymous_id"],
        unique=True,
    )
    op.create_index(
        "ix_visitor_identities_identified_id", "visitor_identities", ["identified_id"]
    )

    op.create_table(
        "suppression_entries",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("recipient_id", sa.String(length=320), nullable=False),
        sa.Column("scope", sa.String(length=16), nullable=False),
        sa.Column("reason", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.String(length=255), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_by", sa.String(length=255), nullable=True),
        sa.Column("source_event_id", sa.String(length=255), nullable=True),
        sa.Column("details", postgresql.JSONB(), nullable=True),
    )
    op.create_index(
        "ix_suppression_entries_recipient_revoked",
        "suppression_entries",
        ["recipient_id", "revoked_at"],
    )

    op.create_table(
        "scheduled_actions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("trigger_event_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("action_type", sa.String(length=64), nullable=False),
        sa.Column("recipient_id", sa.String(length=320), nullable=False),
        sa.Column("anonymous_id", sa.String(length=255), nullable=False),
        sa.Column("subject_id", sa.String(length=255), nullable=False),
        sa.Column("payload", postgresql.JSONB(), nullable=False),
        sa.Column("not_before", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("attempt_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_error", sa.Text(), nullable=True),
        sa.Column("claimed_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "trigger_event_id",
            "action_type",
            name="uq_scheduled_actions_trigger_action",
        ),
    )
    op.create_index(
        "ix_scheduled_actions_status_not_before",
        "scheduled_actions",
        ["status", "not_before"],
    )
    op.create_index(
        "ix_scheduled_actions_recipient_id", "scheduled_actions", ["recipient_id"]
    )

    op.create_table(
        "variant_assignments",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("experiment_key", sa.String(length=255), nullable=False),
        sa.Column("anonymous_id", sa.String(length=255), nullable=False),
        sa.Column("variant_id", sa.String(length=128), nullable=False),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "experiment_key",
            "anonymous_id",
            name="uq_variant_assignments_experiment_anonymous",
        ),
    )


def downgrade() -> None:
    """Downgrade schema: drop all tables."""
    op.drop_table("variant_assignments")
    op.drop_index("ix_scheduled_actions_recipient_id", table_name="scheduled_actions")
    op.drop_index("ix_scheduled_actions_status_not_before", table_name="scheduled_actions")
    op.drop_table("scheduled_actions")
    op.drop_index(
        "ix_suppression_entries_recipient_revoked", table_name="suppression_entries"
    )
    op.drop_table("suppression_entries")
    op.drop_index("ix_visitor_identities_identified_id", table_name="visitor_identities")
    op.drop_index("ix_visitor_identities_anonymous_id", table_name="visitor_identities")
    op.drop_table("visitor_identities")
    op.drop_index("ix_events_anonymous_occurred", table_name="events")
    op.drop_index("ix_events_subject_occurred", table_name="events")
    op.drop_index("ix_events_type", table_name="events")
    op.drop_table("events")
