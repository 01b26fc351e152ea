"""Create test scheduling data (provider schedules, patient contacts, appointments).

One appointment per patient is placed 20 minutes in the past so the next
reconciliation tick marks it missed.
"""

import asyncio
from datetime import timedelta

from sqlalchemy import select

from app.db.base import utc_now
from app.db.session import AsyncSessionLocal
from app.models.patient import PatientContact
from app.models.scheduling import Appointment, AppointmentStatus, ProviderSchedule, ScheduleSlot

PROVIDERS = ["doc1", "doc2"]

TEST_PATIENTS = [
    {"patient_id": "patient1", "email": "patient1@example.com", "phone_number": "+15550100001", "provider_id": "doc1"},
    {"patient_id": "patient2", "email": "patient2@example.com", "phone_number": "+15550100002", "provider_id": "doc1"},
    {"patient_id": "patient3", "email": "patient3@example.com", "phone_number": None, "provider_id": "doc2"},
]


async def create_scheduling_data():
    """Create provider schedules, contacts and overdue appointments."""
    async with AsyncSessionLocal() as session:
        today = utc_now().replace(hour=0, minute=0, second=0, microsecond=0)

        for provider_id in PROVIDERS:
            result = await session.execute(
                select(ProviderSchedule).where(ProviderSchedule.provider_id == provider_id)
            )
            if result.scalar_one_or_none():
                print(f"Schedule for {provider_id} already exists, skipping...")
                continue

            slots = []
            for day_offset in range(1, 6):
                slot_date = today + timedelta(days=day_offset)
                # Morning 9-11, afternoon 14-16
                for hour in [9, 10, 11, 14, 15, 16]:
                    slots.append(ScheduleSlot(slot_time=slot_date + timedelta(hours=hour)))

            session.add(ProviderSchedule(provider_id=provider_id, slots=slots))
            print(f"Created schedule for {provider_id} with {len(slots)} slots")

        for patient in TEST_PATIENTS:
            result = await session.execute(
                select(PatientContact).where(PatientContact.patient_id == patient["patient_id"])
            )
            if result.scalar_one_or_none():
                print(f"Contact for {patient['patient_id']} already exists, skipping...")
                continue

            session.add(
                PatientContact(
                    patient_id=patient["patient_id"],
                    email=patient["email"],
                    phone_number=patient["phone_number"],
                )
            )
            session.add(
                Appointment(
                    patient_id=patient["patient_id"],
                    provider_id=patient["provider_id"],
                    scheduled_time=utc_now() - timedelta(minutes=20),
                    status=AppointmentStatus.SCHEDULED,
                )
            )
            print(f"Created contact and overdue appointment for {patient['patient_id']}")

        await session.commit()

        print("Scheduling data setup complete!")


if __name__ == "__main__":
    asyncio.run(create_scheduling_data())
