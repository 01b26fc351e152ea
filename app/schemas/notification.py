"""Pydantic schemas for the notification diagnostic endpoint."""

from pydantic import Field

from app.schemas.scheduling import CamelModel
from app.services.messaging import NotificationStatus


class NotificationResultRead(CamelModel):
    """Outcome of one send attempt."""

    status: NotificationStatus
    message: str


class TestNotificationRequest(CamelModel):
    """Request to send a test message on both channels."""

    email: str | None = None
    phone_number: str | None = None
    message: str = Field(..., min_length=1, max_length=1600)


class TestNotificationResponse(CamelModel):
    """Per-channel results of a test notification."""

    email_response: NotificationResultRead
    sms_response: NotificationResultRead
    message: str
