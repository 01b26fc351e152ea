"""Scheduling service for provider slots and missed-appointment rebooking.

Rebooking moves a missed appointment onto one of its provider's offered
slots. Both writes (slot removal and appointment update) happen in one
transaction, and each is conditional on the state that was validated, so a
concurrent request for the same slot or appointment loses cleanly instead
of double-booking.
"""

import logging
from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import audit_logger
from app.models.patient import PatientContact
from app.models.scheduling import (
    Appointment,
    AppointmentStatus,
    ProviderSchedule,
    ScheduleSlot,
)
from app.utils.time import ensure_utc

logger = logging.getLogger(__name__)


class AppointmentNotFoundError(Exception):
    """Raised when the appointment does not exist."""

    pass


class InvalidAppointmentStateError(Exception):
    """Raised when the appointment is not in the status the operation needs."""

    pass


class ScheduleNotFoundError(Exception):
    """Raised when a provider has no schedule."""

    pass


class SlotUnavailableError(Exception):
    """Raised when the requested slot is not currently offered."""

    pass


def _is_uuid(value: str) -> bool:
    try:
        UUID(value)
    except (ValueError, AttributeError, TypeError):
        return False
    return True


class SchedulingService:
    """Service for provider schedules and appointment rebooking."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_schedule(self, provider_id: str) -> ProviderSchedule | None:
        """Get a provider's schedule."""
        result = await self.session.execute(
            select(ProviderSchedule).where(ProviderSchedule.provider_id == provider_id)
        )
        return result.scalar_one_or_none()

    async def get_offered_slots(self, schedule_id: str) -> list[datetime]:
        """Get the offered slot times of a schedule, ascending."""
        result = await self.session.execute(
            select(ScheduleSlot.slot_time)
            .where(ScheduleSlot.schedule_id == schedule_id)
            .order_by(ScheduleSlot.slot_time)
        )
        return [ensure_utc(slot_time) for slot_time in result.scalars().all()]

    async def get_available_slots(self, provider_id: str) -> list[datetime]:
        """Get the slots a provider currently offers.

        Raises:
            ScheduleNotFoundError: If the provider has no schedule
        """
        schedule = await self.get_schedule(provider_id)
        if not schedule:
            raise ScheduleNotFoundError(f"No schedule found for provider {provider_id}")

        return await self.get_offered_slots(schedule.id)

    async def get_appointment(self, appointment_id: str) -> Appointment | None:
        """Get appointment by ID. Malformed IDs are treated as unknown."""
        if not _is_uuid(appointment_id):
            return None

        result = await self.session.execute(
            select(Appointment).where(Appointment.id == appointment_id)
        )
        return result.scalar_one_or_none()

    async def get_missed_appointments(self, patient_id: str) -> Sequence[Appointment]:
        """Get a patient's missed appointments."""
        result = await self.session.execute(
            select(Appointment)
            .where(
                Appointment.patient_id == patient_id,
                Appointment.status == AppointmentStatus.MISSED,
            )
            .order_by(Appointment.scheduled_time)
        )
        return result.scalars().all()

    async def list_missed_appointments(self) -> Sequence[Appointment]:
        """Get every missed appointment."""
        result = await self.session.execute(
            select(Appointment)
            .where(Appointment.status == AppointmentStatus.MISSED)
            .order_by(Appointment.scheduled_time)
        )
        return result.scalars().all()

    async def get_patient_contact(self, patient_id: str) -> PatientContact | None:
        """Get the contact details on file for a patient."""
        result = await self.session.execute(
            select(PatientContact).where(PatientContact.patient_id == patient_id)
        )
        return result.scalar_one_or_none()

    async def rebook_appointment(
        self,
        appointment_id: str,
        new_slot: datetime,
    ) -> Appointment:
        """Move a missed appointment onto an offered slot.

        Args:
            appointment_id: Appointment to rebook
            new_slot: Requested slot time (naive values are taken as UTC)

        Returns:
            The rebooked appointment

        Raises:
            AppointmentNotFoundError: Appointment does not exist
            InvalidAppointmentStateError: Appointment is not missed
            ScheduleNotFoundError: Provider has no schedule
            SlotUnavailableError: Slot is not offered, or was taken concurrently
        """
        appointment = await self.get_appointment(appointment_id)
        if not appointment:
            raise AppointmentNotFoundError(f"Appointment {appointment_id} not found")

        if appointment.status != AppointmentStatus.MISSED:
            raise InvalidAppointmentStateError(
                f"Appointment {appointment_id} is {appointment.status}, not missed"
            )

        schedule = await self.get_schedule(appointment.provider_id)
        if not schedule:
            raise ScheduleNotFoundError(
                f"No schedule found for provider {appointment.provider_id}"
            )

        slot_time = ensure_utc(new_slot)
        if slot_time not in await self.get_offered_slots(schedule.id):
            raise SlotUnavailableError(f"Slot {slot_time.isoformat()} is not offered")

        try:
            # Conditional delete: losing a race leaves zero rows affected
            removed = await self.session.execute(
                delete(ScheduleSlot)
                .where(
                    ScheduleSlot.schedule_id == schedule.id,
                    ScheduleSlot.slot_time == slot_time,
                )
                .execution_options(synchronize_session=False)
            )
            if removed.rowcount != 1:
                raise SlotUnavailableError(
                    f"Slot {slot_time.isoformat()} was booked by another request"
                )

            moved = await self.session.execute(
                update(Appointment)
                .where(
                    Appointment.id == appointment.id,
                    Appointment.status == AppointmentStatus.MISSED,
                )
                .values(
                    scheduled_time=slot_time,
                    status=AppointmentStatus.SCHEDULED,
                    notification_sent=False,
                )
                .execution_options(synchronize_session=False)
            )
            if moved.rowcount != 1:
                raise InvalidAppointmentStateError(
                    f"Appointment {appointment_id} changed while rebooking"
                )

            await self.session.commit()
        except (SlotUnavailableError, InvalidAppointmentStateError):
            await self.session.rollback()
            raise

        await self.session.refresh(appointment)

        audit_logger.log(
            action="appointment.rebooked",
            actor="api",
            entity_type="appointment",
            entity_id=appointment.id,
            metadata={
                "provider_id": appointment.provider_id,
                "slot": slot_time.isoformat(),
            },
        )

        return appointment
