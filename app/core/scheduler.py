"""Background job scheduler for check-in deadline monitoring."""
import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.checkins.manager import CheckInManager
from app.core.config import settings

logger = logging.getLogger(__name__)


async def monitor_job(manager: CheckInManager):
    """Background monitoring sweep."""
    try:
        await manager.sweep()
    except Exception as e:
        logger.error(f"Check-in monitor sweep failed: {e}")


def start_scheduler(manager: CheckInManager) -> AsyncIOScheduler:
    """Start the background scheduler on the running event loop.

    Must be called from a coroutine (the application lifespan) so the
    scheduler shares the manager's event loop.
    """
    scheduler = AsyncIOScheduler(event_loop=asyncio.get_running_loop())
    scheduler.add_job(
        monitor_job,
        trigger=IntervalTrigger(seconds=settings.monitor_interval_seconds),
        args=[manager],
        id="checkin_monitor",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started, sweeping check-ins every {settings.monitor_interval_seconds} seconds"
    )
    return scheduler


def shutdown_scheduler(scheduler: AsyncIOScheduler):
    """Graceful shutdown."""
    scheduler.shutdown(wait=False)
    logger.info("Scheduler shut down")
