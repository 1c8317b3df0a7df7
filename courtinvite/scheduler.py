# courtinvite/scheduler.py
"""
In-process scheduler for housekeeping jobs.

The only job today deletes sessions whose end time is more than the grace
period in the past. It runs on a fixed interval from API startup.
"""

import logging
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MISSED
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from courtinvite.background_tasks.cleanup_tasks import expire_ended_sessions
from courtinvite.core.config import settings

logger = logging.getLogger(__name__)

CLEANUP_JOB_ID = "expire_ended_sessions"

scheduler = None


def _log_job_event(event):
    if event.code == EVENT_JOB_MISSED:
        logger.warning(
            "Job %s missed its run at %s", event.job_id, event.scheduled_run_time
        )
        return

    logger.error(
        "Job %s raised %r",
        event.job_id,
        event.exception,
        exc_info=(type(event.exception), event.exception, event.exception.__traceback__)
        if event.exception
        else None,
    )
    if event.traceback:
        logger.error("Job %s traceback:\n%s", event.job_id, event.traceback)


def _describe(job) -> dict:
    next_run = job.next_run_time
    return {
        "id": job.id,
        "name": job.name,
        "next_run_time": next_run.isoformat() if next_run else None,
        "trigger": str(job.trigger),
    }


def init_scheduler():
    """Start the scheduler once; later calls return the running instance."""
    global scheduler

    if scheduler is not None:
        logger.warning("init_scheduler called twice, reusing running scheduler")
        return scheduler

    scheduler = BackgroundScheduler(
        timezone="UTC",
        # Overlapping or piled-up cleanup runs collapse into one
        job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": 60},
    )

    minutes = settings.CLEANUP_INTERVAL_MINUTES
    scheduler.add_job(
        func=expire_ended_sessions,
        trigger=IntervalTrigger(minutes=minutes),
        id=CLEANUP_JOB_ID,
        name="Delete sessions past the grace period",
        replace_existing=True,
    )
    scheduler.add_listener(_log_job_event, EVENT_JOB_ERROR | EVENT_JOB_MISSED)
    scheduler.start()

    logger.info(f"Scheduler started, {CLEANUP_JOB_ID} every {minutes} minutes")
    return scheduler


def shutdown_scheduler():
    global scheduler

    if scheduler is None:
        return
    scheduler.shutdown(wait=True)
    scheduler = None
    logger.info("Scheduler stopped")


def get_scheduler_status():
    if scheduler is None:
        return {"status": "not_initialized", "jobs": []}

    return {
        "status": "running" if scheduler.running else "stopped",
        "jobs": [_describe(job) for job in scheduler.get_jobs()],
    }
