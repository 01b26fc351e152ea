"""Scheduled task for missed-appointment reconciliation.

The API process owns a ReconciliationLoop through its lifespan: it is started
on startup, ticks every ``RECONCILIATION_INTERVAL_SECONDS`` and is stopped
on shutdown. A single tick can also be run from the command line.

Usage:
    # Run one tick directly
    python -m app.tasks.no_show

    # Or via cron, with RECONCILIATION_ENABLED=false on the API
    * * * * * cd /path/to/project && python -m app.tasks.no_show

    # Environment variables:
    DATABASE_URL - PostgreSQL connection string
    NOTIFICATION_MODE - "console" (default) or "live"
"""

import asyncio
import logging
import os
import sys
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings
from app.services.messaging import NotificationGateway
from app.services.no_show import NoShowService

logger = logging.getLogger(__name__)


class ReconciliationLoop:
    """Periodic no-show reconciliation bound to an explicit start/stop lifecycle."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        gateway: NotificationGateway,
        interval_seconds: float,
    ):
        self.session_factory = session_factory
        self.gateway = gateway
        self.interval_seconds = interval_seconds
        self.ticks = 0
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> dict:
        """Run one reconciliation tick in a fresh session."""
        async with self.session_factory() as session:
            service = NoShowService(session, self.gateway)
            return await service.run_reconciliation()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.run_once()
            except Exception:
                logger.exception("No-show reconciliation tick failed")
            self.ticks += 1

    def start(self) -> None:
        """Start ticking in the background. No-op if already running."""
        if self.running:
            return

        logger.info(
            f"Starting no-show reconciliation (interval={self.interval_seconds}s)"
        )
        self._task = asyncio.create_task(self._run(), name="no-show-reconciliation")

    async def stop(self) -> None:
        """Cancel the background task and wait for it to finish."""
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        finally:
            self._task = None

        logger.info("Stopped no-show reconciliation")


async def run_no_show_task(database_url: str | None = None) -> dict:
    """Run a single reconciliation tick against the given database.

    Args:
        database_url: Database connection string. If not provided, uses settings.

    Returns:
        Tick results summary
    """
    db_url = database_url or settings.database_url

    # Convert sync URL to async if needed
    if db_url.startswith("postgresql://"):
        db_url = db_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    logger.info(f"Starting no-show reconciliation task at {datetime.now().isoformat()}")

    engine = create_async_engine(db_url, echo=False)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    try:
        loop = ReconciliationLoop(
            session_factory=session_factory,
            gateway=NotificationGateway.from_settings(settings),
            interval_seconds=settings.reconciliation_interval_seconds,
        )
        return await loop.run_once()
    finally:
        await engine.dispose()


def main():
    """CLI entry point."""
    import argparse

    from app.core.logging import setup_logging

    setup_logging()

    parser = argparse.ArgumentParser(description="Run one missed-appointment reconciliation tick")
    parser.add_argument(
        "--database-url",
        default=os.getenv("DATABASE_URL"),
        help="Database URL (overrides DATABASE_URL env var)",
    )
    args = parser.parse_args()

    try:
        results = asyncio.run(run_no_show_task(database_url=args.database_url))
        print(f"Job completed successfully: {results}")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Job failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
