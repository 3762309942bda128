"""
Scheduler Service - Background scheduler lifecycle management
Handles starting, stopping, and configuring the APScheduler instance
"""
import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from plan91.core.config import settings
from plan91.utils.timezone import get_local_tz
from .jobs import check_missed_days

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler = None


def get_scheduler():
    return scheduler


def start_scheduler():
    """
    Start the background scheduler
    Runs the miss check daily at MISS_CHECK_HOUR:MISS_CHECK_MINUTE local time
    """
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already running")
        return

    tz = get_local_tz()
    scheduler = BackgroundScheduler(timezone=tz)

    scheduler.add_job(
        func=check_missed_days,
        trigger=CronTrigger(hour=settings.MISS_CHECK_HOUR, minute=settings.MISS_CHECK_MINUTE, timezone=tz),
        id='miss_check',
        name='Record misses for the previous day',
        replace_existing=True
    )

    scheduler.start()
    logger.info(
        f"Scheduler started - miss check daily at "
        f"{settings.MISS_CHECK_HOUR:02d}:{settings.MISS_CHECK_MINUTE:02d} ({settings.APP_TIMEZONE})"
    )


def stop_scheduler():
    """Stop the background scheduler"""
    global scheduler

    if scheduler is not None:
        scheduler.shutdown()
        scheduler = None
        logger.info("Scheduler stopped")
