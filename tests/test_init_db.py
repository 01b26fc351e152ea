"""Tests for the development database seed."""

from app.db.init_db import DEMO_PROVIDERS, create_demo_schedules
from app.services.scheduling import SchedulingService


async def test_demo_schedules_created_once(async_session) -> None:
    await create_demo_schedules(async_session)
    await create_demo_schedules(async_session)

    service = SchedulingService(async_session)
    for provider_id in DEMO_PROVIDERS:
        slots = await service.get_available_slots(provider_id)
        assert len(slots) == 3
        assert [s.hour for s in slots] == [9, 10, 11]
