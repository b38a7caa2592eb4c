"""Notification business logic."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from workout_tracker.domain.notifications import WORKOUT_COMPLETED, Notification
from workout_tracker.domain.sessions import format_duration


class NotificationRepository(Protocol):
    """Persistence interface for notifications."""

    def create_notification(  # noqa: PLR0913
        self,
        recipient_id: UUID,
        type: str,  # noqa: A002
        title: str,
        body: str,
        payload: dict[str, object],
    ) -> Notification:
        """Create an unread notification and return it."""

    def list_for_recipient(self, recipient_id: UUID, limit: int) -> list[Notification]:
        """Return the newest notifications for a recipient."""

    def mark_read(self, notification_id: UUID) -> None:
        """Flag a notification as read."""

    def mark_all_read(self, recipient_id: UUID) -> None:
        """Flag every unread notification of a recipient as read."""

    def delete(self, notification_id: UUID) -> None:
        """Delete a notification."""


@dataclass
class NotificationService:
    """Application service for notifications."""

    repository: NotificationRepository

    def notify_workout_completed(  # noqa: PLR0913
        self,
        trainer_id: UUID,
        student_id: UUID,
        student_name: str,
        session_id: UUID,
        workout_day_id: UUID,
        duration_seconds: int,
        paused_seconds: int,
    ) -> Notification:
        """Tell the trainer that a student finished a workout."""
        return self.repository.create_notification(
            recipient_id=trainer_id,
            type=WORKOUT_COMPLETED,
            title="Workout completed",
            body=(
                f"{student_name} finished the workout in "
                f"{format_duration(duration_seconds)}"
            ),
            payload={
                "session_id": str(session_id),
                "workout_day_id": str(workout_day_id),
                "student_id": str(student_id),
                "student_name": student_name,
                "duration_total": duration_seconds,
                "duration_paused": paused_seconds,
            },
        )

    def list_for_recipient(
        self, recipient_id: UUID, limit: int = 50
    ) -> list[Notification]:
        """Return the newest notifications for a recipient."""
        return self.repository.list_for_recipient(recipient_id, limit)

    def unread_count(self, recipient_id: UUID, limit: int = 50) -> int:
        """Count unread notifications among the newest ones."""
        return sum(
            1 for item in self.list_for_recipient(recipient_id, limit) if not item.read
        )

    def mark_read(self, notification_id: UUID) -> None:
        self.repository.mark_read(notification_id)

    def mark_all_read(self, recipient_id: UUID) -> None:
        self.repository.mark_all_read(recipient_id)

    def delete(self, notification_id: UUID) -> None:
        self.repository.delete(notification_id)
