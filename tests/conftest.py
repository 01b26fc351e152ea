"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("RECONCILIATION_ENABLED", "false")
os.environ.setdefault("NOTIFICATION_MODE", "console")

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import StaticPool
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.api.deps import get_notification_gateway
from app.db.base import Base, utc_now
from app.db.session import get_db
from app.main import app
from app.models.patient import PatientContact
from app.models.scheduling import (
    Appointment,
    AppointmentStatus,
    ProviderSchedule,
    ScheduleSlot,
)
from app.services.messaging import NotificationGateway
from tests.fakes import RecordingProvider


# Use SQLite for testing (simpler than spinning up postgres)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def async_engine():
    """Create async test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def async_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create async database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def email_provider() -> RecordingProvider:
    return RecordingProvider()


@pytest.fixture
def sms_provider() -> RecordingProvider:
    return RecordingProvider()


@pytest.fixture
def gateway(email_provider, sms_provider) -> NotificationGateway:
    return NotificationGateway(email_provider=email_provider, sms_provider=sms_provider)


@pytest.fixture
async def client(
    async_session: AsyncSession,
    gateway: NotificationGateway,
) -> AsyncGenerator[AsyncClient, None]:
    """Create API test client with overridden dependencies."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield async_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_gateway] = lambda: gateway

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def slot_times() -> list[datetime]:
    """Three consecutive hourly slots tomorrow (T1, T2, T3)."""
    start = (utc_now() + timedelta(days=1)).replace(minute=0, second=0, microsecond=0)
    return [start + timedelta(hours=h) for h in range(3)]


@pytest.fixture
def make_schedule(async_session: AsyncSession):
    """Factory for provider schedules with offered slots."""

    async def _make(provider_id: str, slots: list[datetime]) -> ProviderSchedule:
        schedule = ProviderSchedule(
            provider_id=provider_id,
            slots=[ScheduleSlot(slot_time=s) for s in slots],
        )
        async_session.add(schedule)
        await async_session.commit()
        return schedule

    return _make


@pytest.fixture
def make_appointment(async_session: AsyncSession):
    """Factory for appointments."""

    async def _make(
        scheduled_time: datetime,
        status: AppointmentStatus = AppointmentStatus.SCHEDULED,
        patient_id: str = "patient1",
        provider_id: str = "doc1",
    ) -> Appointment:
        appointment = Appointment(
            patient_id=patient_id,
            provider_id=provider_id,
            scheduled_time=scheduled_time,
            status=status,
        )
        async_session.add(appointment)
        await async_session.commit()
        await async_session.refresh(appointment)
        return appointment

    return _make


@pytest.fixture
async def test_contact(async_session: AsyncSession) -> PatientContact:
    """Contact details for patient1."""
    contact = PatientContact(
        patient_id="patient1",
        email="patient1@example.com",
        phone_number="+15550100001",
    )
    async_session.add(contact)
    await async_session.commit()
    await async_session.refresh(contact)
    return contact
