"""Database models for the rebooking service."""

from app.models.patient import PatientContact
from app.models.scheduling import (
    Appointment,
    AppointmentStatus,
    ProviderSchedule,
    ScheduleSlot,
)

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "PatientContact",
    "ProviderSchedule",
    "ScheduleSlot",
]
