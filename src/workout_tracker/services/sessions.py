"""Persistence interfaces for workout sessions and related rows."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from workout_tracker.domain.sessions import (
    RestKind,
    RestPeriod,
    SessionStatus,
    WorkoutSession,
)


class WorkoutSessionRepository(Protocol):
    """Persistence interface for workout sessions.

    Updates only apply to sessions that are still running or paused; a
    completed or cancelled row is never modified again.
    """

    def create_session(
        self,
        student_id: UUID,
        trainer_id: UUID,
        workout_day_id: UUID,
        started_at: datetime,
    ) -> WorkoutSession:
        """Create a running session with zero duration and return it."""

    def get_active_session(
        self, student_id: UUID, workout_day_id: UUID
    ) -> WorkoutSession | None:
        """Return the newest non-terminal session for a workout day."""

    def list_active_sessions(self, student_id: UUID) -> list[WorkoutSession]:
        """Return every non-terminal session of a student."""

    def list_active_session_ids(self, session_ids: list[UUID]) -> set[UUID]:
        """Return the subset of ids whose sessions are non-terminal."""

    def list_active_for_trainer(
        self, trainer_id: UUID, limit: int
    ) -> list[WorkoutSession]:
        """Return non-terminal sessions of a trainer's students, newest first."""

    def update_duration(
        self,
        session_id: UUID,
        duration_seconds: int,
        rest_seconds: int | None = None,
    ) -> None:
        """Store the accumulated duration (and rest total) of a session."""

    def update_session(  # noqa: PLR0913
        self,
        session_id: UUID,
        status: SessionStatus,
        duration_seconds: int,
        paused_seconds: int,
        paused_at: datetime | None,
        ended_at: datetime | None,
        rest_seconds: int | None = None,
    ) -> None:
        """Store a lifecycle transition together with the current duration."""


class RestPeriodRepository(Protocol):
    """Persistence interface for rests taken during a session."""

    def create_rest(
        self, session_id: UUID, kind: RestKind, started_at: datetime
    ) -> RestPeriod:
        """Open a rest and return it."""

    def end_rest(
        self, rest_id: UUID, ended_at: datetime, duration_seconds: int
    ) -> None:
        """Close a rest with its measured duration."""

    def list_rests(self, session_id: UUID) -> list[RestPeriod]:
        """Return the rests of a session, oldest first."""


class WorkoutDayRepository(Protocol):
    """Persistence interface for scheduled workout days."""

    def get_day_indices(self, workout_day_ids: list[UUID]) -> dict[UUID, int]:
        """Return the weekday index for each known workout day."""

    def mark_completed(self, workout_day_id: UUID) -> None:
        """Flag a workout day as completed."""


class ProfileRepository(Protocol):
    """Read access to profile display names."""

    def get_display_names(self, profile_ids: list[UUID]) -> dict[UUID, str]:
        """Return display names for the given profiles."""
