"""Tests for the trainer dashboard and notification services."""

from uuid import uuid4

from tests.conftest import (
    InMemoryNotificationRepository,
    InMemoryProfileRepository,
    InMemoryWorkoutSessionRepository,
)
from workout_tracker.domain.sessions import SessionStatus
from workout_tracker.services.dashboard import DashboardService
from workout_tracker.services.notifications import NotificationService


def test_active_workouts_are_limited_and_named() -> None:
    sessions = InMemoryWorkoutSessionRepository()
    profiles = InMemoryProfileRepository()
    trainer_id = uuid4()
    named_student = uuid4()
    profiles.names[named_student] = "Carla"
    sessions.add(named_student, uuid4(), trainer_id=trainer_id)
    sessions.add(
        uuid4(), uuid4(), status=SessionStatus.COMPLETED, trainer_id=trainer_id
    )
    sessions.add(uuid4(), uuid4(), trainer_id=uuid4())

    workouts = DashboardService(sessions, profiles).active_workouts(trainer_id)

    assert [item.student_name for item in workouts] == ["Carla"]
    assert workouts[0].status == SessionStatus.RUNNING


def test_active_workouts_empty_without_sessions() -> None:
    service = DashboardService(
        InMemoryWorkoutSessionRepository(), InMemoryProfileRepository()
    )

    assert service.active_workouts(uuid4()) == []


def test_unread_count_tracks_mark_read() -> None:
    service = NotificationService(InMemoryNotificationRepository())
    recipient_id = uuid4()
    created = [
        service.notify_workout_completed(
            trainer_id=recipient_id,
            student_id=uuid4(),
            student_name="Dani",
            session_id=uuid4(),
            workout_day_id=uuid4(),
            duration_seconds=seconds,
            paused_seconds=5,
        )
        for seconds in (30, 90)
    ]

    assert service.unread_count(recipient_id) == 2
    service.mark_read(created[0].id)
    assert service.unread_count(recipient_id) == 1
    assert created[1].payload["duration_paused"] == 5
    assert created[1].title == "Workout completed"
