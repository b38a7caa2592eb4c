"""Supabase repository for rests taken during a workout."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from workout_tracker.domain.sessions import RestKind, RestPeriod
from workout_tracker.services.sessions import RestPeriodRepository

_TABLE = "treino_descansos"
_COLUMNS = "id, sessao_id, tipo, inicio, fim, duracao_segundos"


@dataclass
class SupabaseRestPeriodRepository(RestPeriodRepository):
    """Supabase-backed rest period repository."""

    client: Client

    def create_rest(
        self, session_id: UUID, kind: RestKind, started_at: datetime
    ) -> RestPeriod:
        """Insert an open rest row."""
        response = (
            self.client.table(_TABLE)
            .insert(
                {
                    "sessao_id": str(session_id),
                    "tipo": kind.value,
                    "inicio": started_at.isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create rest period")
        return _to_rest(response.data[0])

    def end_rest(
        self, rest_id: UUID, ended_at: datetime, duration_seconds: int
    ) -> None:
        """Close a rest row."""
        self.client.table(_TABLE).update(
            {"fim": ended_at.isoformat(), "duracao_segundos": duration_seconds}
        ).eq("id", str(rest_id)).execute()

    def list_rests(self, session_id: UUID) -> list[RestPeriod]:
        """Return the rests of a session, oldest first."""
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("sessao_id", str(session_id))
            .order("inicio")
            .execute()
        )
        return [_to_rest(row) for row in response.data or []]


def _to_rest(row: dict[str, object]) -> RestPeriod:
    ended = row.get("fim")
    duration = row.get("duracao_segundos")
    return RestPeriod(
        id=UUID(str(row["id"])),
        session_id=UUID(str(row["sessao_id"])),
        kind=RestKind(row["tipo"]),
        started_at=datetime.fromisoformat(str(row["inicio"])),
        ended_at=datetime.fromisoformat(ended) if isinstance(ended, str) else None,
        duration_seconds=int(duration) if duration is not None else None,
    )
