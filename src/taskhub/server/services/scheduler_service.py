"""
Background scheduler for the todo reminder sweep and notification cleanup.
"""

import logging
from contextlib import AbstractContextManager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session as DBSession

from ..repository.notification_repository import NotificationRepository
from ..repository.todo_repository import TodoRepository
from .notification_service import DEFAULT_RETENTION_DAYS, NotificationService

log = logging.getLogger(__name__)

NOTIFICATION_JOB_ID = "todo_notifications"
CLEANUP_JOB_ID = "notification_cleanup"


class SchedulerService:
    """
    Runs the periodic notification jobs on an APScheduler event loop scheduler.

    Each job opens its own short-lived database session. A failing tick is
    logged and the next tick runs normally.
    """

    def __init__(
        self,
        session_factory: Callable[[], AbstractContextManager],
        config: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            session_factory: Returns a context manager yielding a database session
            config: Optional mapping with interval and retention settings
        """
        config = config or {}
        self.session_factory = session_factory
        self.notification_interval_seconds = config.get("notification_interval_seconds", 60)
        self.cleanup_interval_seconds = config.get("cleanup_interval_seconds", 3600)
        self.retention_days = config.get("notification_retention_days", DEFAULT_RETENTION_DAYS)
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.log_identifier = "[SchedulerService]"

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def _notification_service(self, db: DBSession) -> NotificationService:
        return NotificationService(
            notification_repository=NotificationRepository(db),
            todo_repository=TodoRepository(db),
            retention_days=self.retention_days,
        )

    def run_notification_sweep(self) -> int:
        with self.session_factory() as db:
            return self._notification_service(db).generate_todo_notifications()

    def run_cleanup(self) -> int:
        with self.session_factory() as db:
            return self._notification_service(db).cleanup_expired_notifications()

    async def _notification_job(self):
        try:
            self.run_notification_sweep()
        except Exception as e:
            log.error("%s Notification sweep failed: %s", self.log_identifier, e, exc_info=True)

    async def _cleanup_job(self):
        try:
            self.run_cleanup()
        except Exception as e:
            log.error("%s Notification cleanup failed: %s", self.log_identifier, e, exc_info=True)

    def start_all(self):
        """Register both jobs and start the scheduler. Does nothing if already running."""
        if self.scheduler.running:
            log.debug("%s Scheduler already running", self.log_identifier)
            return

        self.scheduler.add_job(
            self._notification_job,
            trigger=IntervalTrigger(seconds=self.notification_interval_seconds),
            id=NOTIFICATION_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            next_run_time=datetime.now(timezone.utc),
        )
        self.scheduler.add_job(
            self._cleanup_job,
            trigger=IntervalTrigger(seconds=self.cleanup_interval_seconds),
            id=CLEANUP_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        log.info(
            "%s Started (notifications every %ds, cleanup every %ds)",
            self.log_identifier,
            self.notification_interval_seconds,
            self.cleanup_interval_seconds,
        )

    def stop_all(self):
        if not self.scheduler.running:
            return
        self.scheduler.shutdown(wait=False)
        log.info("%s Stopped", self.log_identifier)

    def get_status(self) -> Dict[str, Any]:
        """
        Get current status of the scheduler.

        Returns:
            ``{running, jobs: [{id, next_run_time}]}``
        """
        jobs = []
        if self.scheduler.running:
            for job in self.scheduler.get_jobs():
                next_run = getattr(job, "next_run_time", None)
                jobs.append(
                    {
                        "id": job.id,
                        "next_run_time": next_run.isoformat() if next_run else None,
                    }
                )
        return {"running": self.scheduler.running, "jobs": jobs}
