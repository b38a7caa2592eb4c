"""Domain models for workout sessions."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class SessionStatus(str, Enum):
    """Lifecycle status stored in the ``treino_sessoes.status`` column."""

    RUNNING = "em_andamento"
    PAUSED = "pausado"
    COMPLETED = "concluido"
    CANCELLED = "cancelado"


ACTIVE_STATUSES = frozenset({SessionStatus.RUNNING, SessionStatus.PAUSED})


class RestKind(str, Enum):
    """Kind of rest stored in ``treino_descansos.tipo``."""

    BETWEEN_SETS = "serie"
    BETWEEN_EXERCISES = "exercicio"


@dataclass(frozen=True)
class WorkoutSession:
    """Represents one attempt at a workout day."""

    id: UUID
    student_id: UUID
    trainer_id: UUID
    workout_day_id: UUID
    status: SessionStatus
    duration_seconds: int
    started_at: datetime
    ended_at: datetime | None = None
    paused_at: datetime | None = None
    paused_seconds: int = 0
    rest_seconds: int = 0


@dataclass(frozen=True)
class RestPeriod:
    """A rest taken inside a workout session."""

    id: UUID
    session_id: UUID
    kind: RestKind
    started_at: datetime
    ended_at: datetime | None = None
    duration_seconds: int | None = None


@dataclass(frozen=True)
class LocalSnapshot:
    """Device-local record of a started session."""

    session_id: UUID
    day_index: int
    started: bool
    written_at: datetime


@dataclass(frozen=True)
class WorkoutCompletion:
    """Summary of a finished workout."""

    session_id: UUID
    total_seconds: int
    formatted_time: str
    paused_seconds: int
    started_at: datetime | None
    ended_at: datetime
    message: str
    rest_seconds: int = 0
    rest_count: int = 0


def format_duration(seconds: int) -> str:
    """Format seconds as ``HH:MM:SS``."""
    hours, remainder = divmod(max(0, int(seconds)), 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
