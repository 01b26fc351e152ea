"""Pydantic schemas for slot lookup, missed appointments and rebooking.

The public API uses camelCase keys; snake_case is accepted on input too.
"""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.models.scheduling import AppointmentStatus
from app.utils.time import ensure_utc

# Timestamps are normalised to aware UTC on the way in and out
UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


class CamelModel(BaseModel):
    """Base schema serialising field names as camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class AppointmentRead(CamelModel):
    """Schema for reading an appointment."""

    id: str
    patient_id: str
    provider_id: str
    scheduled_time: UtcDatetime
    status: AppointmentStatus
    notification_sent: bool


class AvailableSlotsResponse(CamelModel):
    """Slots currently offered by a provider."""

    available_slots: list[UtcDatetime]


class MissedAppointmentsResponse(CamelModel):
    """Missed appointments listing."""

    missed_appointments: list[AppointmentRead]


class RebookRequest(CamelModel):
    """Request to move a missed appointment onto an offered slot."""

    appointment_id: str
    new_slot: UtcDatetime


class RebookResponse(CamelModel):
    """Response for a successful rebooking."""

    message: str
    appointment: AppointmentRead
