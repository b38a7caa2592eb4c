"""Domain models for notifications."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

WORKOUT_COMPLETED = "treino_concluido"


@dataclass(frozen=True)
class Notification:
    """Represents a notification addressed to a profile."""

    id: UUID
    recipient_id: UUID
    type: str
    title: str
    body: str
    payload: dict[str, object]
    read: bool
    created_at: datetime | None
