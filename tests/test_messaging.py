"""Tests for the notification gateway and providers.

Covers:
- Channel isolation (one failing channel never blocks the other)
- Provider faults converted to failure results
- Twilio and Mailgun request shapes
"""

import logging
from urllib.parse import parse_qs

import httpx
import pytest
import respx

from app.core.config import Settings
from app.services.messaging import (
    ConsoleProvider,
    MailgunEmailProvider,
    MessageProviderError,
    NotificationChannel,
    NotificationGateway,
    NotificationStatus,
    TwilioSMSProvider,
)
from tests.fakes import RecordingProvider


class TestNotificationGateway:
    """Tests for the uniform send operation."""

    async def test_send_email_success(self, gateway, email_provider) -> None:
        result = await gateway.send_email("a@example.com", "Subject", "Hello")

        assert result.status == NotificationStatus.SUCCESS
        assert result.message == "Email sent successfully"
        assert email_provider.sent == [
            {"recipient": "a@example.com", "body": "Hello", "subject": "Subject"}
        ]

    async def test_send_sms_success(self, gateway, sms_provider) -> None:
        result = await gateway.send_sms("+15550100001", "Hello")

        assert result.ok
        assert result.message == "SMS sent successfully"
        assert sms_provider.sent[0]["recipient"] == "+15550100001"

    async def test_provider_error_becomes_failure_result(self) -> None:
        """Provider exceptions never reach the caller."""
        gateway = NotificationGateway(
            email_provider=RecordingProvider(fail=True),
            sms_provider=RecordingProvider(fail=True),
        )

        email_result = await gateway.send_email("a@example.com", "Subject", "Hello")
        sms_result = await gateway.send_sms("+15550100001", "Hello")

        assert email_result.status == NotificationStatus.FAILURE
        assert email_result.message == "Failed to send email"
        assert sms_result.status == NotificationStatus.FAILURE
        assert sms_result.message == "Failed to send SMS"

    async def test_provider_failure_logs_provider_name(self, caplog) -> None:
        provider = RecordingProvider(fail=True)
        gateway = NotificationGateway(sms_provider=provider)

        with caplog.at_level(logging.ERROR, logger="app.services.messaging"):
            await gateway.send_sms("+15550100001", "Hello")

        assert "via recording" in caplog.text

    def test_each_channel_maps_to_its_provider(self, gateway, email_provider, sms_provider) -> None:
        assert gateway._get_provider(NotificationChannel.EMAIL) is email_provider
        assert gateway._get_provider(NotificationChannel.SMS) is sms_provider

    async def test_missing_recipient_skips_provider(self, gateway, email_provider) -> None:
        result = await gateway.send(NotificationChannel.EMAIL, None, "Hello")

        assert result.status == NotificationStatus.FAILURE
        assert result.message == "No email address on file"
        assert email_provider.sent == []

    async def test_notify_email_failure_does_not_block_sms(self) -> None:
        sms = RecordingProvider()
        gateway = NotificationGateway(
            email_provider=RecordingProvider(fail=True),
            sms_provider=sms,
        )

        email_result, sms_result = await gateway.notify(
            email="a@example.com",
            phone_number="+15550100001",
            body="Hello",
            subject="Subject",
        )

        assert not email_result.ok
        assert sms_result.ok
        assert len(sms.sent) == 1

    async def test_result_to_dict(self, gateway) -> None:
        result = await gateway.send_sms("+15550100001", "Hello")

        assert result.to_dict() == {"status": "success", "message": "SMS sent successfully"}

    def test_from_settings_console_mode(self) -> None:
        gateway = NotificationGateway.from_settings(Settings(notification_mode="console"))

        assert isinstance(gateway.email_provider, ConsoleProvider)
        assert isinstance(gateway.sms_provider, ConsoleProvider)

    def test_from_settings_live_mode(self) -> None:
        gateway = NotificationGateway.from_settings(
            Settings(
                notification_mode="live",
                twilio_account_sid="AC123",
                twilio_auth_token="token",
                twilio_from_number="+15550000000",
                mailgun_api_key="key",
                mailgun_domain="mg.example.com",
                mailgun_from_email="clinic@example.com",
            )
        )

        assert isinstance(gateway.email_provider, MailgunEmailProvider)
        assert isinstance(gateway.sms_provider, TwilioSMSProvider)
        assert gateway.sms_provider.account_sid == "AC123"
        assert gateway.email_provider.domain == "mg.example.com"


class TestConsoleProvider:
    async def test_console_provider_returns_message_id(self) -> None:
        provider = ConsoleProvider(NotificationChannel.SMS)

        message_id = await provider.send("+15550100001", "Hello")

        assert message_id.startswith("sms_")


class TestTwilioSMSProvider:
    """Tests for Twilio REST calls."""

    MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/AC123/Messages.json"

    def _provider(self) -> TwilioSMSProvider:
        return TwilioSMSProvider(
            account_sid="AC123",
            auth_token="token",
            from_number="+15550000000",
        )

    async def test_send_posts_form_to_messages_api(self) -> None:
        with respx.mock(assert_all_called=True) as m:
            route = m.post(self.MESSAGES_URL).respond(201, json={"sid": "SM1"})

            message_id = await self._provider().send("+15550100001", "Your appointment was missed.")

        assert message_id == "SM1"
        form = parse_qs(route.calls.last.request.content.decode())
        assert form["To"] == ["+15550100001"]
        assert form["From"] == ["+15550000000"]
        assert form["Body"] == ["Your appointment was missed."]
        assert route.calls.last.request.headers["Authorization"].startswith("Basic ")

    async def test_error_status_raises_provider_error(self) -> None:
        with respx.mock() as m:
            m.post(self.MESSAGES_URL).respond(400, json={"message": "invalid number"})

            with pytest.raises(MessageProviderError):
                await self._provider().send("bad", "Hello")

    async def test_network_error_raises_provider_error(self) -> None:
        with respx.mock() as m:
            m.post(self.MESSAGES_URL).mock(side_effect=httpx.ConnectError("down"))

            with pytest.raises(MessageProviderError):
                await self._provider().send("+15550100001", "Hello")


class TestMailgunEmailProvider:
    """Tests for Mailgun API calls."""

    MESSAGES_URL = "https://api.mailgun.net/v3/mg.example.com/messages"

    def _provider(self) -> MailgunEmailProvider:
        return MailgunEmailProvider(
            api_key="key",
            domain="mg.example.com",
            from_email="clinic@example.com",
        )

    async def test_send_posts_message(self) -> None:
        with respx.mock(assert_all_called=True) as m:
            route = m.post(self.MESSAGES_URL).respond(200, json={"id": "<1@mg.example.com>"})

            message_id = await self._provider().send(
                "a@example.com", "Body text", subject="Missed Appointment"
            )

        assert message_id == "<1@mg.example.com>"
        form = parse_qs(route.calls.last.request.content.decode())
        assert form["to"] == ["a@example.com"]
        assert form["from"] == ["clinic@example.com"]
        assert form["subject"] == ["Missed Appointment"]
        assert form["text"] == ["Body text"]

    async def test_gateway_reports_mailgun_failure(self) -> None:
        gateway = NotificationGateway(email_provider=self._provider())

        with respx.mock() as m:
            m.post(self.MESSAGES_URL).respond(401)

            result = await gateway.send_email("a@example.com", "Subject", "Hello")

        assert result.status == NotificationStatus.FAILURE
        assert result.message == "Failed to send email"
