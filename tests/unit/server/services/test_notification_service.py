"""
Unit tests for NotificationService reminder generation and cleanup.
"""

from unittest.mock import MagicMock

import pytest

from taskhub.server.repository.entities.todo import Todo
from taskhub.server.services.notification_service import NotificationService
from taskhub.shared.exceptions import EntityNotFoundError
from taskhub.shared.utils import MS_PER_DAY, MS_PER_HOUR, MS_PER_MINUTE, MS_PER_SECOND

NOW = 1_760_000_000_000


def _todo(due_in_ms, todo_id="todo-1"):
    return Todo(
        id=todo_id,
        user_id="user-1",
        title="Write report",
        due_date=NOW + due_in_ms,
        created_at=NOW - MS_PER_DAY,
        updated_at=NOW - MS_PER_DAY,
    )


class TestGenerateTodoNotifications:
    def setup_method(self):
        self.notification_repository = MagicMock()
        self.notification_repository.exists_for_todo.return_value = False
        self.todo_repository = MagicMock()
        self.service = NotificationService(self.notification_repository, self.todo_repository)

    def _created_types(self):
        return [
            c.kwargs["notification_type"] for c in self.notification_repository.create.call_args_list
        ]

    @pytest.mark.parametrize(
        "due_in_ms,expected_type",
        [
            (MS_PER_DAY, "one_day"),
            (MS_PER_DAY - 30 * MS_PER_SECOND, "one_day"),
            (3 * MS_PER_HOUR, "three_hours"),
            (5 * MS_PER_MINUTE - 1, "five_minutes"),
            (0, "immediate"),
            (-59 * MS_PER_SECOND, "immediate"),
        ],
    )
    def test_reminder_fires_inside_its_window(self, due_in_ms, expected_type):
        self.todo_repository.find_pending_with_due_date.return_value = [_todo(due_in_ms)]

        created = self.service.generate_todo_notifications(now=NOW)

        assert created == 1
        assert self._created_types() == [expected_type]

    @pytest.mark.parametrize(
        "due_in_ms",
        [MS_PER_DAY + 1, MS_PER_DAY - MS_PER_MINUTE, 2 * MS_PER_HOUR, -MS_PER_MINUTE],
    )
    def test_nothing_fires_outside_windows(self, due_in_ms):
        self.todo_repository.find_pending_with_due_date.return_value = [_todo(due_in_ms)]

        assert self.service.generate_todo_notifications(now=NOW) == 0
        self.notification_repository.create.assert_not_called()

    def test_existing_reminder_is_not_duplicated(self):
        self.todo_repository.find_pending_with_due_date.return_value = [_todo(MS_PER_DAY)]
        self.notification_repository.exists_for_todo.return_value = True

        assert self.service.generate_todo_notifications(now=NOW) == 0
        self.notification_repository.exists_for_todo.assert_called_once_with("todo-1", "one_day")

    def test_reminder_text(self):
        self.todo_repository.find_pending_with_due_date.return_value = [_todo(3 * MS_PER_HOUR)]

        self.service.generate_todo_notifications(now=NOW)

        kwargs = self.notification_repository.create.call_args.kwargs
        assert kwargs["user_id"] == "user-1"
        assert kwargs["todo_id"] == "todo-1"
        assert kwargs["title"] == "Todo reminder - 3 hours"
        assert kwargs["message"] == 'Your todo "Write report" is due in 3 hours'


class TestCleanupAndReads:
    def setup_method(self):
        self.notification_repository = MagicMock()
        self.todo_repository = MagicMock()

    def test_cleanup_uses_retention_cutoff(self):
        service = NotificationService(self.notification_repository, self.todo_repository, retention_days=7)
        self.notification_repository.delete_read_before.return_value = 3

        assert service.cleanup_expired_notifications(now=NOW) == 3
        self.notification_repository.delete_read_before.assert_called_once_with(
            NOW - 7 * MS_PER_DAY, user_id=None
        )

    def test_retention_below_minimum_is_raised(self):
        service = NotificationService(self.notification_repository, self.todo_repository, retention_days=0)
        assert service.retention_days == 1

    def test_mark_as_read_unknown_notification(self):
        service = NotificationService(self.notification_repository, self.todo_repository)
        self.notification_repository.mark_read.return_value = False

        with pytest.raises(EntityNotFoundError):
            service.mark_as_read("missing", "user-1")

    def test_create_notification_checks_todo_ownership(self):
        service = NotificationService(self.notification_repository, self.todo_repository)
        self.todo_repository.find_by_id.return_value = None

        with pytest.raises(EntityNotFoundError):
            service.create_notification("user-1", "system", "Title", "Body", todo_id="todo-x")
        self.notification_repository.create.assert_not_called()
