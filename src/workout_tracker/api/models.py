"""Pydantic models for workout API payloads."""

from uuid import UUID

from pydantic import BaseModel, Field

from workout_tracker.domain.sessions import RestKind


class StartWorkoutRequest(BaseModel):
    """Payload for starting a workout session."""

    student_id: UUID | None = None
    trainer_id: UUID | None = None
    workout_day_id: UUID | None = None
    day_index: int | None = Field(default=None, ge=0, le=6)


class ActivateRequest(BaseModel):
    """Payload sent when the workout view becomes active."""

    student_id: UUID
    workout_day_id: UUID | None = None
    day_index: int | None = Field(default=None, ge=0, le=6)


class StartRestRequest(BaseModel):
    """Payload for opening a rest during a workout."""

    kind: RestKind = RestKind.BETWEEN_SETS
