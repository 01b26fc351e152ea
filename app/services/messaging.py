"""Notification gateway for patient communications.

Wraps the email and SMS providers behind a single send operation. Every
attempt yields a NotificationResult; provider faults are converted to
failure results and never propagate to the caller.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from enum import Enum
from uuid import uuid4

import httpx

from app.core.config import Settings

logger = logging.getLogger(__name__)


class NotificationChannel(str, Enum):
    """Outbound notification channels."""

    EMAIL = "email"
    SMS = "sms"


class NotificationStatus(str, Enum):
    """Outcome of a single send attempt."""

    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class NotificationResult:
    """Result of one send attempt on one channel."""

    status: NotificationStatus
    message: str

    @property
    def ok(self) -> bool:
        return self.status == NotificationStatus.SUCCESS

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data


class MessageProviderError(Exception):
    """Base exception for messaging provider errors."""

    pass


class MessageProvider(ABC):
    """Abstract base class for messaging providers."""

    provider_name: str = "unknown"

    @abstractmethod
    async def send(
        self,
        recipient: str,
        body: str,
        subject: str | None = None,
    ) -> str:
        """Send a message and return the provider's message id.

        Raises MessageProviderError on failure.
        """
        pass


class ConsoleProvider(MessageProvider):
    """Provider that logs messages instead of delivering them.

    Used in development and tests, where no provider credentials exist.
    """

    def __init__(self, channel: NotificationChannel):
        self.channel = channel
        self.provider_name = f"console-{channel.value}"

    async def send(
        self,
        recipient: str,
        body: str,
        subject: str | None = None,
    ) -> str:
        logger.info(f"[{self.channel.value}] to={recipient} subject={subject!r} body={body[:80]!r}")
        return f"{self.channel.value}_{uuid4().hex[:16]}"


class TwilioSMSProvider(MessageProvider):
    """SMS delivery through the Twilio Messages REST API."""

    provider_name = "twilio"
    base_url = "https://api.twilio.com/2010-04-01"

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        timeout: float = 15.0,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.timeout = timeout

    async def send(
        self,
        recipient: str,
        body: str,
        subject: str | None = None,
    ) -> str:
        """Send SMS message. Twilio has no subject line, so it is ignored."""
        url = f"{self.base_url}/Accounts/{self.account_sid}/Messages.json"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    url,
                    data={"To": recipient, "From": self.from_number, "Body": body},
                    auth=(self.account_sid, self.auth_token),
                )
                resp.raise_for_status()
                payload = resp.json()
        except httpx.HTTPError as e:
            raise MessageProviderError(f"Twilio request failed: {e}") from e

        logger.info(f"SMS sent to: {recipient}")
        return payload.get("sid", "")


class MailgunEmailProvider(MessageProvider):
    """Email delivery through the Mailgun messages API."""

    provider_name = "mailgun"

    def __init__(
        self,
        api_key: str,
        domain: str,
        from_email: str,
        base_url: str = "https://api.mailgun.net/v3",
        timeout: float = 15.0,
    ):
        self.api_key = api_key
        self.domain = domain
        self.from_email = from_email
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def send(
        self,
        recipient: str,
        body: str,
        subject: str | None = None,
    ) -> str:
        """Send email message."""
        url = f"{self.base_url}/{self.domain}/messages"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    url,
                    data={
                        "from": self.from_email,
                        "to": recipient,
                        "subject": subject or "",
                        "text": body,
                    },
                    auth=("api", self.api_key),
                )
                resp.raise_for_status()
                payload = resp.json()
        except httpx.HTTPError as e:
            raise MessageProviderError(f"Mailgun request failed: {e}") from e

        logger.info(f"Email sent to: {recipient}")
        return payload.get("id", "")


_SUCCESS_MESSAGES = {
    NotificationChannel.EMAIL: "Email sent successfully",
    NotificationChannel.SMS: "SMS sent successfully",
}

_FAILURE_MESSAGES = {
    NotificationChannel.EMAIL: "Failed to send email",
    NotificationChannel.SMS: "Failed to send SMS",
}

_MISSING_RECIPIENT_MESSAGES = {
    NotificationChannel.EMAIL: "No email address on file",
    NotificationChannel.SMS: "No phone number on file",
}


class NotificationGateway:
    """Uniform send operation over the email and SMS providers."""

    def __init__(
        self,
        email_provider: MessageProvider | None = None,
        sms_provider: MessageProvider | None = None,
    ):
        self.email_provider = email_provider or ConsoleProvider(NotificationChannel.EMAIL)
        self.sms_provider = sms_provider or ConsoleProvider(NotificationChannel.SMS)

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotificationGateway":
        """Build the gateway for the configured notification mode."""
        if settings.notification_mode != "live":
            return cls()

        return cls(
            email_provider=MailgunEmailProvider(
                api_key=settings.mailgun_api_key,
                domain=settings.mailgun_domain,
                from_email=settings.mailgun_from_email,
                base_url=settings.mailgun_base_url,
                timeout=settings.notification_timeout_seconds,
            ),
            sms_provider=TwilioSMSProvider(
                account_sid=settings.twilio_account_sid,
                auth_token=settings.twilio_auth_token,
                from_number=settings.twilio_from_number,
                timeout=settings.notification_timeout_seconds,
            ),
        )

    def _get_provider(self, channel: NotificationChannel) -> MessageProvider:
        """Get the appropriate provider for a channel."""
        providers = {
            NotificationChannel.EMAIL: self.email_provider,
            NotificationChannel.SMS: self.sms_provider,
        }
        return providers[channel]

    async def send(
        self,
        channel: NotificationChannel,
        recipient: str | None,
        body: str,
        subject: str | None = None,
    ) -> NotificationResult:
        """Attempt one send on one channel. Never raises."""
        if not recipient:
            logger.warning(f"Skipping {channel.value} notification: no recipient")
            return NotificationResult(
                status=NotificationStatus.FAILURE,
                message=_MISSING_RECIPIENT_MESSAGES[channel],
            )

        provider = self._get_provider(channel)
        try:
            await provider.send(recipient=recipient, body=body, subject=subject)
        except Exception as e:
            logger.error(
                f"Error sending {channel.value} via {provider.provider_name} to {recipient}: {e}"
            )
            return NotificationResult(
                status=NotificationStatus.FAILURE,
                message=_FAILURE_MESSAGES[channel],
            )

        return NotificationResult(
            status=NotificationStatus.SUCCESS,
            message=_SUCCESS_MESSAGES[channel],
        )

    async def send_email(
        self, email: str | None, subject: str, body: str
    ) -> NotificationResult:
        return await self.send(NotificationChannel.EMAIL, email, body, subject=subject)

    async def send_sms(self, phone_number: str | None, body: str) -> NotificationResult:
        return await self.send(NotificationChannel.SMS, phone_number, body)

    async def notify(
        self,
        email: str | None,
        phone_number: str | None,
        body: str,
        subject: str,
    ) -> tuple[NotificationResult, NotificationResult]:
        """Send the same message by email and SMS.

        The channels are independent; a failure on one does not stop the other.

        Returns:
            (email_result, sms_result)
        """
        email_result = await self.send_email(email, subject, body)
        sms_result = await self.send_sms(phone_number, body)
        return email_result, sms_result
