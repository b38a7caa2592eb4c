"""Trainer dashboard queries."""

from dataclasses import dataclass
from uuid import UUID

from workout_tracker.domain.dashboard import ActiveWorkout
from workout_tracker.services.sessions import (
    ProfileRepository,
    WorkoutSessionRepository,
)

_FALLBACK_NAME = "Student"


@dataclass
class DashboardService:
    """Read models for the trainer's home screen."""

    session_repository: WorkoutSessionRepository
    profile_repository: ProfileRepository

    def active_workouts(self, trainer_id: UUID, limit: int = 10) -> list[ActiveWorkout]:
        """Return students currently training, newest first."""
        sessions = self.session_repository.list_active_for_trainer(trainer_id, limit)
        names = self.profile_repository.get_display_names(
            list({session.student_id for session in sessions})
        )
        return [
            ActiveWorkout(
                session_id=session.id,
                student_id=session.student_id,
                student_name=names.get(session.student_id) or _FALLBACK_NAME,
                status=session.status,
                started_at=session.started_at,
            )
            for session in sessions
        ]
