"""Initial schema: appointments, provider schedules, slots and patient contacts.

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create scheduling and contact tables."""

    op.create_table(
        "appointments",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("patient_id", sa.String(100), nullable=False),
        sa.Column("provider_id", sa.String(100), nullable=False),
        sa.Column("scheduled_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="scheduled"),
        sa.Column("notification_sent", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_appointments"),
    )
    op.create_index("ix_appointments_patient_id", "appointments", ["patient_id"])
    op.create_index("ix_appointments_provider_id", "appointments", ["provider_id"])
    op.create_index("ix_appointments_scheduled_time", "appointments", ["scheduled_time"])
    op.create_index("ix_appointments_status", "appointments", ["status"])

    op.create_table(
        "provider_schedules",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("provider_id", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_provider_schedules"),
    )
    op.create_index(
        "ix_provider_schedules_provider_id",
        "provider_schedules",
        ["provider_id"],
        unique=True,
    )

    op.create_table(
        "schedule_slots",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("schedule_id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("slot_time", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_schedule_slots"),
        sa.ForeignKeyConstraint(
            ["schedule_id"],
            ["provider_schedules.id"],
            name="fk_schedule_slots_schedule_id_provider_schedules",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("schedule_id", "slot_time", name="uq_schedule_slots_schedule_time"),
    )
    op.create_index("ix_schedule_slots_schedule_id", "schedule_slots", ["schedule_id"])

    op.create_table(
        "patient_contacts",
        sa.Column("id", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("patient_id", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone_number", sa.String(20), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_patient_contacts"),
    )
    op.create_index(
        "ix_patient_contacts_patient_id",
        "patient_contacts",
        ["patient_id"],
        unique=True,
    )


def downgrade() -> None:
    """Drop scheduling and contact tables."""
    op.drop_table("patient_contacts")
    op.drop_table("schedule_slots")
    op.drop_table("provider_schedules")
    op.drop_table("appointments")
