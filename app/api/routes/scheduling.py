"""Slot lookup, missed-appointment and rebooking endpoints."""

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from app.api.deps import DbSession, RequestId
from app.schemas.scheduling import (
    AppointmentRead,
    AvailableSlotsResponse,
    MissedAppointmentsResponse,
    RebookRequest,
    RebookResponse,
)
from app.services.scheduling import (
    AppointmentNotFoundError,
    InvalidAppointmentStateError,
    ScheduleNotFoundError,
    SchedulingService,
    SlotUnavailableError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/slots/{provider_id}",
    response_model=AvailableSlotsResponse,
)
async def get_available_slots(
    provider_id: str,
    session: DbSession,
) -> AvailableSlotsResponse:
    """Get the slots a provider currently offers."""
    service = SchedulingService(session)

    try:
        slots = await service.get_available_slots(provider_id)
    except ScheduleNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No schedule found for this doctor",
        )

    return AvailableSlotsResponse(available_slots=slots)


@router.post(
    "/rebook",
    response_model=RebookResponse,
)
async def rebook_appointment(
    request: RebookRequest,
    session: DbSession,
    request_id: RequestId,
) -> RebookResponse:
    """Move a missed appointment onto one of its provider's offered slots.

    Every validation failure is reported before anything is written.
    """
    service = SchedulingService(session)

    try:
        appointment = await service.rebook_appointment(
            appointment_id=request.appointment_id,
            new_slot=request.new_slot,
        )
    except (AppointmentNotFoundError, InvalidAppointmentStateError) as e:
        logger.info(f"Rebook rejected (request_id={request_id}): {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or non-missed appointment",
        )
    except SlotUnavailableError as e:
        logger.info(f"Rebook rejected (request_id={request_id}): {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Slot not available",
        )
    except ScheduleNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No schedule found for this doctor",
        )

    return RebookResponse(
        message="Appointment rescheduled successfully",
        appointment=AppointmentRead.model_validate(appointment),
    )


@router.get(
    "/missedAppointments",
    response_model=MissedAppointmentsResponse,
)
async def list_missed_appointments(
    session: DbSession,
) -> MissedAppointmentsResponse:
    """List every missed appointment."""
    service = SchedulingService(session)

    try:
        appointments = await service.list_missed_appointments()
    except SQLAlchemyError:
        logger.exception("Error fetching missed appointments")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error",
        )

    return MissedAppointmentsResponse(
        missed_appointments=[AppointmentRead.model_validate(a) for a in appointments]
    )


@router.get(
    "/missedAppointments/{patient_id}",
    response_model=MissedAppointmentsResponse,
)
async def get_missed_appointments(
    patient_id: str,
    session: DbSession,
) -> MissedAppointmentsResponse:
    """Get a patient's missed appointments."""
    service = SchedulingService(session)

    try:
        appointments = await service.get_missed_appointments(patient_id)
    except SQLAlchemyError:
        logger.exception("Error fetching missed appointments")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error",
        )

    if not appointments:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No missed appointments found for this patient",
        )

    return MissedAppointmentsResponse(
        missed_appointments=[AppointmentRead.model_validate(a) for a in appointments]
    )
