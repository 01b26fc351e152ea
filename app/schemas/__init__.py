"""Pydantic schemas for request/response validation."""

from app.schemas.notification import (
    NotificationResultRead,
    TestNotificationRequest,
    TestNotificationResponse,
)
from app.schemas.scheduling import (
    AppointmentRead,
    AvailableSlotsResponse,
    MissedAppointmentsResponse,
    RebookRequest,
    RebookResponse,
)

__all__ = [
    "AppointmentRead",
    "AvailableSlotsResponse",
    "MissedAppointmentsResponse",
    "RebookRequest",
    "RebookResponse",
    "NotificationResultRead",
    "TestNotificationRequest",
    "TestNotificationResponse",
]
