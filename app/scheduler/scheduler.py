"""Scheduler implementation for the link shortener application.

This module provides a scheduler service that runs the click flush job
on a fixed interval using APScheduler.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import settings
from app.core.redis import redis_manager
from app.db.session import SessionManager
from app.repositories.link_repository import LinkRepository
from app.services.click_accumulator import ClickAccumulator
from app.services.click_flush import ClickFlushService

logger = logging.getLogger(__name__)

FLUSH_JOB_ID = "flush_clicks"


async def flush_clicks_job() -> Dict[str, Any]:
    """
    Job to move accumulated clicks into the link store.

    This is a standalone function that gets scheduled. It opens its own
    database session and never raises: a failed run is logged and the next
    tick tries again with whatever is still pending in Redis.
    """
    logger.debug("Starting scheduled click flush")
    try:
        async with SessionManager.transaction_context() as session:
            flush_service = ClickFlushService(
                LinkRepository(),
                ClickAccumulator(redis_manager.get_client()),
            )
            return await flush_service.flush(session)
    except Exception as e:
        logger.error(f"Error in scheduled click flush job: {e}", exc_info=True)
        return {
            "status": "error",
            "error": str(e),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


class SchedulerService:
    """
    Scheduler service for managing background tasks.

    This service wraps APScheduler's AsyncIOScheduler; it must be started
    from within a running event loop.
    """

    def __init__(self, interval_seconds: Optional[int] = None):
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.is_running = False
        self.interval_seconds = interval_seconds or settings.CLICK_FLUSH_INTERVAL_SECONDS
        self.jobs: List[Dict[str, Any]] = []

    def initialize(self) -> None:
        """
        Initialize the scheduler.

        Jobs are kept in memory unless SCHEDULER_JOBSTORE_URL names a database.
        """
        if self.scheduler:
            logger.warning("Scheduler already initialized")
            return

        if settings.SCHEDULER_JOBSTORE_URL:
            jobstore = SQLAlchemyJobStore(url=settings.SCHEDULER_JOBSTORE_URL)
        else:
            jobstore = MemoryJobStore()

        self.scheduler = AsyncIOScheduler(
            jobstores={"default": jobstore},
            job_defaults={
                "coalesce": settings.SCHEDULER_JOB_COALESCE,
                "max_instances": settings.SCHEDULER_JOB_MAX_INSTANCES,
                "misfire_grace_time": settings.SCHEDULER_MISFIRE_GRACE_TIME,
            },
            timezone=timezone.utc,
        )
        logger.info("Scheduler initialized")

    def start(self) -> None:
        """Start the scheduler with the click flush job registered."""
        if not self.scheduler:
            self.initialize()

        if self.is_running:
            logger.warning("Scheduler already running")
            return

        try:
            self.scheduler.add_job(
                flush_clicks_job,
                trigger=IntervalTrigger(seconds=self.interval_seconds, timezone=timezone.utc),
                id=FLUSH_JOB_ID,
                name="Flush accumulated clicks",
                replace_existing=True,
            )
            self.jobs = [{
                "id": FLUSH_JOB_ID,
                "name": "Flush accumulated clicks",
                "interval": f"{self.interval_seconds} seconds",
                "function": "flush_clicks_job",
            }]

            self.scheduler.start()
            self.is_running = True
            logger.info(f"Scheduler started with {len(self.jobs)} jobs")
        except Exception as e:
            logger.error(f"Error starting scheduler: {e}", exc_info=True)
            self.is_running = False
            raise

    def shutdown(self) -> None:
        """Stop the scheduler, waiting for a running flush to finish."""
        if not self.scheduler or not self.is_running:
            logger.warning("Scheduler not running, nothing to shut down")
            return

        self.scheduler.shutdown(wait=True)
        self.is_running = False
        self.scheduler = None
        logger.info("Scheduler shut down")

    def get_status(self) -> Dict[str, Any]:
        job_details = []
        if self.scheduler and self.is_running:
            for job in self.scheduler.get_jobs():
                job_details.append({
                    "job_id": job.id,
                    "name": job.name,
                    "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
                })

        return {
            "running": self.is_running,
            "jobs": self.jobs,
            "scheduler_jobs_status": job_details,
        }


scheduler_service = SchedulerService()
