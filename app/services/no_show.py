"""No-show detection service.

Finds appointments still marked scheduled after the grace period, marks them
missed and offers the patient the provider's open slots by email and SMS.

The status change is committed before any notification is attempted, and
notification problems are logged and absorbed: a failed send never reverts
a missed appointment or stops the rest of the batch. Failed notifications
are not queued for retry.
"""

import logging
from datetime import datetime, timedelta
from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import audit_logger
from app.models.scheduling import Appointment, AppointmentStatus
from app.services.messaging import NotificationGateway, NotificationResult
from app.services.scheduling import SchedulingService
from app.utils.time import format_datetime, utc_now

logger = logging.getLogger(__name__)

# How long after its start a still-scheduled appointment counts as missed
GRACE_PERIOD = timedelta(minutes=15)

MISSED_APPOINTMENT_SUBJECT = "Missed Appointment"


def compose_missed_message(slots: Sequence[datetime]) -> str:
    """Build the notification body listing the offered slots."""
    formatted = ", ".join(format_datetime(slot) for slot in slots)
    return f"Your appointment was missed. Available slots: {formatted}"


class NoShowService:
    """Service for detecting missed appointments and notifying patients."""

    def __init__(
        self,
        session: AsyncSession,
        gateway: NotificationGateway | None = None,
    ):
        self.session = session
        self.gateway = gateway or NotificationGateway()
        self.scheduling = SchedulingService(session)

    async def get_overdue_appointments(
        self,
        now: datetime | None = None,
    ) -> Sequence[Appointment]:
        """Get scheduled appointments whose start is older than the grace period."""
        cutoff = (now or utc_now()) - GRACE_PERIOD

        result = await self.session.execute(
            select(Appointment)
            .where(
                Appointment.status == AppointmentStatus.SCHEDULED,
                Appointment.scheduled_time < cutoff,
            )
            .order_by(Appointment.scheduled_time)
        )
        return result.scalars().all()

    async def mark_missed(self, appointment: Appointment) -> bool:
        """Transition an appointment to missed and persist it.

        The write only applies while the appointment is still scheduled. The
        appointment's slot is not returned to the provider's offered pool.

        Returns:
            False if the appointment changed status concurrently
        """
        result = await self.session.execute(
            update(Appointment)
            .where(
                Appointment.id == appointment.id,
                Appointment.status == AppointmentStatus.SCHEDULED,
            )
            .values(status=AppointmentStatus.MISSED)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        await self.session.refresh(appointment)

        if result.rowcount != 1:
            return False

        audit_logger.log(
            action="appointment.missed",
            actor="no_show_reconciliation",
            entity_type="appointment",
            entity_id=appointment.id,
            metadata={"provider_id": appointment.provider_id},
        )
        return True

    async def notify_patient(
        self,
        appointment: Appointment,
    ) -> tuple[NotificationResult, NotificationResult] | None:
        """Offer rebooking options for a missed appointment.

        Returns:
            (email_result, sms_result), or None when the provider has no
            schedule or no offered slots and nothing was sent
        """
        schedule = await self.scheduling.get_schedule(appointment.provider_id)
        if not schedule:
            logger.info(
                f"No schedule for provider {appointment.provider_id}; "
                f"skipping notification for {appointment.id[:8]}"
            )
            return None

        slots = await self.scheduling.get_offered_slots(schedule.id)
        if not slots:
            logger.info(
                f"Provider {appointment.provider_id} has no open slots; "
                f"skipping notification for {appointment.id[:8]}"
            )
            return None

        contact = await self.scheduling.get_patient_contact(appointment.patient_id)
        if not contact:
            logger.warning(f"No contact details on file for patient {appointment.patient_id}")

        results = await self.gateway.notify(
            email=contact.email if contact else None,
            phone_number=contact.phone_number if contact else None,
            body=compose_missed_message(slots),
            subject=MISSED_APPOINTMENT_SUBJECT,
        )

        if any(r.ok for r in results):
            appointment.notification_sent = True
            await self.session.commit()

        return results

    async def run_reconciliation(self, now: datetime | None = None) -> dict:
        """Run one reconciliation tick.

        Returns:
            Summary of appointments marked missed and notifications sent
        """
        results = {
            "appointments_marked_missed": 0,
            "notifications_sent": 0,
            "notifications_failed": 0,
            "notifications_skipped": 0,
        }

        overdue = [a.id for a in await self.get_overdue_appointments(now)]
        if overdue:
            logger.info(f"Found {len(overdue)} overdue appointments")

        for appointment_id in overdue:
            # Re-load: a rollback after a failed notification expires instances
            appointment = await self.session.get(Appointment, appointment_id)
            if not appointment or appointment.status != AppointmentStatus.SCHEDULED:
                continue

            if not await self.mark_missed(appointment):
                continue
            results["appointments_marked_missed"] += 1

            try:
                outcome = await self.notify_patient(appointment)
            except Exception as e:
                logger.error(
                    f"Failed to notify patient for appointment {appointment.id[:8]}: {e}"
                )
                await self.session.rollback()
                results["notifications_failed"] += 1
                continue

            if outcome is None:
                results["notifications_skipped"] += 1
            elif any(r.ok for r in outcome):
                results["notifications_sent"] += 1
            else:
                results["notifications_failed"] += 1

        if overdue:
            logger.info(f"No-show reconciliation complete: {results}")
        return results
