"""APScheduler setup for periodic tasks."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from route_eta.core.trip_store import InMemoryTripStore, TripStore

logger = logging.getLogger(__name__)


def create_scheduler(store: TripStore) -> AsyncIOScheduler:
    """Create and configure the scheduler with all jobs."""
    from route_eta.config import settings

    scheduler = AsyncIOScheduler()

    # Redis expires keys on its own; only the in-process store needs sweeping
    if isinstance(store, InMemoryTripStore) and store.ttl_seconds > 0:
        async def purge_trips() -> None:
            # Must run on the event loop thread
            store.purge_expired()

        scheduler.add_job(
            purge_trips,
            "interval",
            seconds=settings.trip_purge_interval_seconds,
            id="purge_trips",
            name="Purge expired trips",
            max_instances=1,
        )
    else:
        logger.debug("No purge job for %s", type(store).__name__)

    return scheduler
