"""Supabase-backed workout session repository."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from workout_tracker.domain.sessions import (
    ACTIVE_STATUSES,
    SessionStatus,
    WorkoutSession,
)
from workout_tracker.services.sessions import WorkoutSessionRepository

_TABLE = "treino_sessoes"
_COLUMNS = (
    "id, profile_id, personal_id, treino_semanal_id, status, duracao_segundos, "
    "tempo_pausado_total, tempo_descanso_total, pausado_em, inicio, fim"
)
_ACTIVE = [status.value for status in ACTIVE_STATUSES]


@dataclass
class SupabaseWorkoutSessionRepository(WorkoutSessionRepository):
    """Supabase implementation for workout sessions."""

    client: Client

    def create_session(
        self,
        student_id: UUID,
        trainer_id: UUID,
        workout_day_id: UUID,
        started_at: datetime,
    ) -> WorkoutSession:
        """Create a running session row and return it."""
        response = (
            self.client.table(_TABLE)
            .insert(
                {
                    "profile_id": str(student_id),
                    "personal_id": str(trainer_id),
                    "treino_semanal_id": str(workout_day_id),
                    "inicio": started_at.isoformat(),
                    "status": SessionStatus.RUNNING.value,
                    "duracao_segundos": 0,
                    "tempo_pausado_total": 0,
                    "tempo_descanso_total": 0,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create workout session")
        return _to_session(response.data[0])

    def get_active_session(
        self, student_id: UUID, workout_day_id: UUID
    ) -> WorkoutSession | None:
        """Return the most recent non-terminal session for a workout day."""
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("treino_semanal_id", str(workout_day_id))
            .eq("profile_id", str(student_id))
            .in_("status", _ACTIVE)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_session(response.data[0])

    def list_active_sessions(self, student_id: UUID) -> list[WorkoutSession]:
        """Return every non-terminal session of a student."""
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("profile_id", str(student_id))
            .in_("status", _ACTIVE)
            .execute()
        )
        return [_to_session(row) for row in response.data or []]

    def list_active_session_ids(self, session_ids: list[UUID]) -> set[UUID]:
        """Return the ids that still belong to non-terminal sessions."""
        if not session_ids:
            return set()
        response = (
            self.client.table(_TABLE)
            .select("id")
            .in_("id", [str(session_id) for session_id in session_ids])
            .in_("status", _ACTIVE)
            .execute()
        )
        return {UUID(row["id"]) for row in response.data or []}

    def list_active_for_trainer(
        self, trainer_id: UUID, limit: int
    ) -> list[WorkoutSession]:
        """Return non-terminal sessions of a trainer's students."""
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("personal_id", str(trainer_id))
            .in_("status", _ACTIVE)
            .order("inicio", desc=True)
            .limit(limit)
            .execute()
        )
        return [_to_session(row) for row in response.data or []]

    def update_duration(
        self,
        session_id: UUID,
        duration_seconds: int,
        rest_seconds: int | None = None,
    ) -> None:
        """Store the accumulated duration of a session that is still active."""
        payload: dict[str, object] = {
            "duracao_segundos": duration_seconds,
            "updated_at": datetime.now(tz=UTC).isoformat(),
        }
        if rest_seconds is not None:
            payload["tempo_descanso_total"] = rest_seconds
        self._update_active(session_id, payload)

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
        """Store a status transition on a session that is still active."""
        payload: dict[str, object] = {
            "status": status.value,
            "duracao_segundos": duration_seconds,
            "tempo_pausado_total": paused_seconds,
            "pausado_em": paused_at.isoformat() if paused_at else None,
            "updated_at": datetime.now(tz=UTC).isoformat(),
        }
        if ended_at is not None:
            payload["fim"] = ended_at.isoformat()
        if rest_seconds is not None:
            payload["tempo_descanso_total"] = rest_seconds
        self._update_active(session_id, payload)

    def _update_active(self, session_id: UUID, payload: dict[str, object]) -> None:
        (
            self.client.table(_TABLE)
            .update(payload)
            .eq("id", str(session_id))
            .in_("status", _ACTIVE)
            .execute()
        )


def _parse_datetime(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None


def _to_session(row: dict[str, object]) -> WorkoutSession:
    return WorkoutSession(
        id=UUID(str(row["id"])),
        student_id=UUID(str(row["profile_id"])),
        trainer_id=UUID(str(row["personal_id"])),
        workout_day_id=UUID(str(row["treino_semanal_id"])),
        status=SessionStatus(row["status"]),
        duration_seconds=int(row.get("duracao_segundos") or 0),
        started_at=_parse_datetime(row.get("inicio")) or datetime.now(tz=UTC),
        ended_at=_parse_datetime(row.get("fim")),
        paused_at=_parse_datetime(row.get("pausado_em")),
        paused_seconds=int(row.get("tempo_pausado_total") or 0),
        rest_seconds=int(row.get("tempo_descanso_total") or 0),
    )
