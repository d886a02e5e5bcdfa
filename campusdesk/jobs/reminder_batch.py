"""
Reminder and SLA Batch Jobs

Scheduled jobs for stale-complaint reminders and SLA gauge refresh.
Uses APScheduler for job scheduling with async support.
"""

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.executors.asyncio import AsyncIOExecutor

from campusdesk.core.clock import utcnow
from campusdesk.core.config import settings
from campusdesk.core.database import AsyncSessionLocal
from campusdesk.services.reminder_service import ReminderService
from campusdesk.services.sla_service import SlaService

logger = logging.getLogger(__name__)

# APScheduler instance (initialized in setup_scheduler)
scheduler: Optional[AsyncIOScheduler] = None


async def run_reminder_job() -> dict:
    """
    Send reminders for complaints with no update in the stale window.

    Returns:
        dict: Summary with stale and notification counts
    """
    start_time = utcnow()
    logger.info("Starting stale complaint reminder job")

    try:
        async with AsyncSessionLocal() as db:
            summary = await ReminderService(db).send_reminders(now=start_time)
    except Exception as e:
        logger.error(f"Reminder job failed: {str(e)}", exc_info=True)
        raise

    logger.info(
        f"Reminder job completed: stale={summary['stale_count']}, "
        f"notifications={summary['notifications_sent']}"
    )
    return summary


async def run_sla_gauge_job() -> dict:
    """
    Recompute SLA statistics and refresh the Prometheus gauges.

    Logs every complaint that is past its due date and notifies its
    handlers the first time the breach is seen.

    Returns:
        dict: The dashboard statistics plus breach counts
    """
    now = utcnow()

    try:
        async with AsyncSessionLocal() as db:
            sla_service = SlaService(db)
            stats, _ = await sla_service.get_statistics(now=now)
            overdue = await sla_service.get_overdue_complaints(now=now)

            for complaint in overdue:
                logger.warning(
                    f"SLA breach: complaint={complaint.id}, category={complaint.category.value}, "
                    f"due_date={complaint.due_date.isoformat()}"
                )

            notified = await sla_service.notify_breaches(overdue)
    except Exception as e:
        logger.error(f"SLA gauge job failed: {str(e)}", exc_info=True)
        raise

    return {**stats.to_dict(), "breaches": len(overdue), "notificationsSent": notified}


def setup_scheduler() -> AsyncIOScheduler:
    """
    Configure the job scheduler.

    Jobs:
    - Stale reminders: daily at REMINDER_CRON_HOUR UTC
    - SLA gauges: every SLA_GAUGE_INTERVAL_SECONDS

    Returns:
        The configured (not yet started) scheduler
    """
    global scheduler

    jobstores = {
        'default': MemoryJobStore()
    }
    executors = {
        'default': AsyncIOExecutor()
    }
    job_defaults = {
        'coalesce': True,  # Combine multiple missed runs into one
        'max_instances': 1,  # Only one instance of each job at a time
        'misfire_grace_time': 3600
    }

    scheduler = AsyncIOScheduler(
        jobstores=jobstores,
        executors=executors,
        job_defaults=job_defaults,
        timezone='UTC'
    )

    scheduler.add_job(
        run_reminder_job,
        trigger=CronTrigger(hour=settings.REMINDER_CRON_HOUR, minute=0),
        id='stale_reminders',
        name='Stale Complaint Reminders',
        replace_existing=True
    )
    logger.info(f"Scheduled stale reminder job for {settings.REMINDER_CRON_HOUR:02d}:00 UTC")

    scheduler.add_job(
        run_sla_gauge_job,
        trigger=IntervalTrigger(seconds=settings.SLA_GAUGE_INTERVAL_SECONDS),
        id='sla_gauges',
        name='SLA Gauge Refresh',
        replace_existing=True
    )
    logger.info(f"Scheduled SLA gauge job every {settings.SLA_GAUGE_INTERVAL_SECONDS}s")

    return scheduler


def shutdown_scheduler():
    """Stop the scheduler if it is running."""
    global scheduler

    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Job scheduler stopped")
    scheduler = None


def get_scheduler_status() -> dict:
    """Get the current status of the scheduler and its jobs."""
    if scheduler is None:
        return {
            "status": "not_initialized",
            "jobs": []
        }

    jobs = []
    for job in scheduler.get_jobs():
        next_run = getattr(job, "next_run_time", None)
        jobs.append({
            "id": job.id,
            "name": job.name,
            "next_run": next_run.isoformat() if next_run else None,
            "trigger": str(job.trigger)
        })

    return {
        "status": "running" if scheduler.running else "stopped",
        "jobs": jobs
    }
