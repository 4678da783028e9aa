"""
Service for notifications: todo reminder generation, listing and cleanup.
"""

import logging
from typing import Dict, Optional, Tuple

from ...shared.exceptions import EntityNotFoundError
from ...shared.utils import MS_PER_DAY, MS_PER_HOUR, MS_PER_MINUTE, MS_PER_SECOND, now_epoch_ms
from ..repository.entities.notification import Notification
from ..repository.interfaces import INotificationRepository, ITodoRepository

log = logging.getLogger(__name__)

# (type, threshold before due date in ms, human label)
REMINDER_THRESHOLDS: Tuple[Tuple[str, int, str], ...] = (
    ("one_day", MS_PER_DAY, "1 day"),
    ("three_hours", 3 * MS_PER_HOUR, "3 hours"),
    ("five_minutes", 5 * MS_PER_MINUTE, "5 minutes"),
    ("immediate", 0, "now"),
)

# Width of the firing window; matches the sweep interval.
SWEEP_WINDOW_MS = 60 * MS_PER_SECOND

DEFAULT_RETENTION_DAYS = 7


def reminder_text(notification_type: str, label: str, todo_title: str) -> Tuple[str, str]:
    """Title and message for a todo reminder."""
    title = f"Todo reminder - {label}"
    if notification_type == "immediate":
        return title, f'Your todo "{todo_title}" is due now'
    return title, f'Your todo "{todo_title}" is due in {label}'


class NotificationService:
    """
    Creates todo reminders and manages user notifications.

    Reminders are generated by a periodic sweep: a reminder of a given type
    fires when the time left until the due date falls inside the minute just
    before its threshold, and at most once per todo and type.
    """

    MIN_RETENTION_DAYS = 1

    def __init__(
        self,
        notification_repository: INotificationRepository,
        todo_repository: ITodoRepository,
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ):
        self.notification_repository = notification_repository
        self.todo_repository = todo_repository
        self.log_identifier = "[NotificationService]"
        if retention_days < self.MIN_RETENTION_DAYS:
            log.warning(
                "%s retention_days (%d) is below minimum (%d days). Using minimum.",
                self.log_identifier,
                retention_days,
                self.MIN_RETENTION_DAYS,
            )
            retention_days = self.MIN_RETENTION_DAYS
        self.retention_days = retention_days

    def generate_todo_notifications(self, now: Optional[int] = None) -> int:
        """
        Create due-date reminders for incomplete todos.

        Args:
            now: Current time in epoch ms (defaults to the wall clock)

        Returns:
            Number of notifications created
        """
        now = now if now is not None else now_epoch_ms()
        created = 0

        for todo in self.todo_repository.find_pending_with_due_date():
            diff = todo.due_date - now
            for notification_type, threshold, label in REMINDER_THRESHOLDS:
                if not (threshold - SWEEP_WINDOW_MS < diff <= threshold):
                    continue
                if self.notification_repository.exists_for_todo(todo.id, notification_type):
                    continue
                title, message = reminder_text(notification_type, label, todo.title)
                self.notification_repository.create(
                    user_id=todo.user_id,
                    notification_type=notification_type,
                    title=title,
                    message=message,
                    todo_id=todo.id,
                )
                created += 1

        if created:
            log.info("%s Created %d todo reminders", self.log_identifier, created)
        return created

    def cleanup_expired_notifications(self, now: Optional[int] = None, user_id: Optional[str] = None) -> int:
        """Delete read notifications not updated within the retention period."""
        now = now if now is not None else now_epoch_ms()
        cutoff = now - self.retention_days * MS_PER_DAY
        deleted = self.notification_repository.delete_read_before(cutoff, user_id=user_id)
        if deleted:
            log.info(
                "%s Deleted %d read notifications older than %d days",
                self.log_identifier,
                deleted,
                self.retention_days,
            )
        return deleted

    def delete_todo_notifications(self, todo_id: str) -> int:
        return self.notification_repository.delete_by_todo(todo_id)

    def list_notifications(
        self, user_id: str, is_read: Optional[bool] = None, limit: int = 20, offset: int = 0
    ) -> Dict[str, object]:
        notifications, total = self.notification_repository.find_by_user(
            user_id, is_read=is_read, limit=limit, offset=offset
        )
        return {
            "notifications": notifications,
            "unread_count": self.notification_repository.count_unread(user_id),
            "total": total,
        }

    def unread_count(self, user_id: str) -> int:
        return self.notification_repository.count_unread(user_id)

    def mark_as_read(self, notification_id: str, user_id: str) -> None:
        if not self.notification_repository.mark_read(notification_id, user_id):
            raise EntityNotFoundError("Notification", notification_id)

    def mark_all_as_read(self, user_id: str) -> int:
        return self.notification_repository.mark_all_read(user_id)

    def create_notification(
        self,
        user_id: str,
        notification_type: str,
        title: str,
        message: str,
        todo_id: Optional[str] = None,
    ) -> Notification:
        if todo_id and not self.todo_repository.find_by_id(todo_id, user_id):
            raise EntityNotFoundError("Todo", todo_id)
        return self.notification_repository.create(
            user_id=user_id,
            notification_type=notification_type,
            title=title,
            message=message,
            todo_id=todo_id,
        )
