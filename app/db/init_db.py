"""Database initialization utilities."""

import logging
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import Base, utc_now
from app.db.session import engine
from app.models.scheduling import ProviderSchedule, ScheduleSlot
from app.services.scheduling import SchedulingService

logger = logging.getLogger(__name__)

# Providers the bundled web UI lists
DEMO_PROVIDERS = ["doc1", "doc2"]


async def create_tables() -> None:
    """Create all database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


async def create_demo_schedules(session: AsyncSession) -> None:
    """Give each demo provider three hourly slots tomorrow morning."""
    service = SchedulingService(session)
    tomorrow = (utc_now() + timedelta(days=1)).replace(
        hour=9, minute=0, second=0, microsecond=0
    )

    for provider_id in DEMO_PROVIDERS:
        if await service.get_schedule(provider_id):
            continue

        schedule = ProviderSchedule(
            provider_id=provider_id,
            slots=[ScheduleSlot(slot_time=tomorrow + timedelta(hours=h)) for h in range(3)],
        )
        session.add(schedule)
        logger.info(f"Created demo schedule for {provider_id}")

    await session.commit()


async def init_db(session: AsyncSession) -> None:
    """Initialize database with tables and demo schedules."""
    await create_tables()
    await create_demo_schedules(session)
