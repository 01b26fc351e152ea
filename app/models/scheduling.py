"""Scheduling models for provider schedules and appointments."""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, TimestampMixin


class AppointmentStatus(str, Enum):
    """Status of an appointment.

    Reconciliation moves SCHEDULED to MISSED and rebooking moves MISSED back
    to SCHEDULED. COMPLETED is recorded externally.
    """

    SCHEDULED = "scheduled"
    MISSED = "missed"
    COMPLETED = "completed"


class Appointment(Base, TimestampMixin):
    """Appointment between a patient and a provider."""

    __tablename__ = "appointments"

    patient_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )
    provider_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )
    scheduled_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    status: Mapped[AppointmentStatus] = mapped_column(
        String(20),
        default=AppointmentStatus.SCHEDULED,
        nullable=False,
        index=True,
    )
    # Set once a missed-appointment notice reached the patient on any channel
    notification_sent: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Appointment {self.id[:8]}... {self.scheduled_time} status={self.status}>"


class ProviderSchedule(Base, TimestampMixin):
    """Set of slots a provider currently offers for booking."""

    __tablename__ = "provider_schedules"

    provider_id: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
    )

    slots: Mapped[list["ScheduleSlot"]] = relationship(
        "ScheduleSlot",
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="ScheduleSlot.slot_time",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<ProviderSchedule {self.provider_id}>"


class ScheduleSlot(Base):
    """A single offered time slot.

    Booking a slot deletes its row, so the row's existence is the
    reservation check.
    """

    __tablename__ = "schedule_slots"
    __table_args__ = (
        UniqueConstraint("schedule_id", "slot_time", name="uq_schedule_slots_schedule_time"),
    )

    schedule_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("provider_schedules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    slot_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    schedule: Mapped["ProviderSchedule"] = relationship(
        "ProviderSchedule",
        back_populates="slots",
    )

    def __repr__(self) -> str:
        return f"<ScheduleSlot {self.slot_time}>"
