"""Domain models for the trainer dashboard."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from workout_tracker.domain.sessions import SessionStatus


@dataclass(frozen=True)
class ActiveWorkout:
    """A student's in-progress workout as seen by the trainer."""

    session_id: UUID
    student_id: UUID
    student_name: str
    status: SessionStatus
    started_at: datetime | None
