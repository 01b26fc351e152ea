"""Diagnostic endpoint for the notification channels."""

from fastapi import APIRouter

from app.api.deps import Gateway
from app.schemas.notification import (
    NotificationResultRead,
    TestNotificationRequest,
    TestNotificationResponse,
)

router = APIRouter()


@router.post(
    "/test-notification",
    response_model=TestNotificationResponse,
)
async def send_test_notification(
    request: TestNotificationRequest,
    gateway: Gateway,
) -> TestNotificationResponse:
    """Send a test message by email and SMS and report each channel's result."""
    email_result = await gateway.send_email(request.email, "Test Subject", request.message)
    sms_result = await gateway.send_sms(request.phone_number, request.message)

    return TestNotificationResponse(
        email_response=NotificationResultRead.model_validate(email_result),
        sms_response=NotificationResultRead.model_validate(sms_result),
        message="Test notifications sent",
    )
