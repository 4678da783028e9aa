"""
Unit tests for SchedulerService job registration and lifecycle.
"""

from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import pytest

from taskhub.server.services.scheduler_service import (
    CLEANUP_JOB_ID,
    NOTIFICATION_JOB_ID,
    SchedulerService,
)


@contextmanager
def fake_session():
    yield MagicMock()


class TestSchedulerLifecycle:
    @pytest.mark.asyncio
    async def test_start_registers_both_jobs(self):
        service = SchedulerService(fake_session, {"notification_interval_seconds": 60})
        try:
            service.start_all()

            status = service.get_status()
            assert status["running"] is True
            assert {job["id"] for job in status["jobs"]} == {NOTIFICATION_JOB_ID, CLEANUP_JOB_ID}
        finally:
            service.stop_all()

        assert service.running is False
        assert service.get_status() == {"running": False, "jobs": []}

    @pytest.mark.asyncio
    async def test_start_and_stop_are_idempotent(self):
        service = SchedulerService(fake_session)
        service.start_all()
        service.start_all()
        assert len(service.scheduler.get_jobs()) == 2

        service.stop_all()
        service.stop_all()
        assert service.running is False

    def test_defaults(self):
        service = SchedulerService(fake_session)
        assert service.notification_interval_seconds == 60
        assert service.cleanup_interval_seconds == 3600
        assert service.retention_days == 7


class TestSchedulerJobs:
    def test_sweep_runs_notification_service_in_a_session(self):
        service = SchedulerService(fake_session)
        with patch(
            "taskhub.server.services.scheduler_service.NotificationService"
        ) as notification_service_cls:
            notification_service_cls.return_value.generate_todo_notifications.return_value = 2
            assert service.run_notification_sweep() == 2

    def test_cleanup_runs_with_configured_retention(self):
        service = SchedulerService(fake_session, {"notification_retention_days": 14})
        with patch(
            "taskhub.server.services.scheduler_service.NotificationService"
        ) as notification_service_cls:
            notification_service_cls.return_value.cleanup_expired_notifications.return_value = 5
            assert service.run_cleanup() == 5
            assert notification_service_cls.call_args.kwargs["retention_days"] == 14

    @pytest.mark.asyncio
    async def test_failing_job_is_logged_not_raised(self, caplog):
        failing_factory = MagicMock(side_effect=RuntimeError("db down"))
        service = SchedulerService(failing_factory)

        await service._notification_job()
        await service._cleanup_job()

        assert "Notification sweep failed" in caplog.text
        assert "Notification cleanup failed" in caplog.text
