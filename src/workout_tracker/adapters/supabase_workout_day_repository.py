"""Supabase repository for weekly workout days."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from workout_tracker.services.sessions import WorkoutDayRepository


@dataclass
class SupabaseWorkoutDayRepository(WorkoutDayRepository):
    """Supabase-backed access to ``treinos_semanais``."""

    client: Client

    def get_day_indices(self, workout_day_ids: list[UUID]) -> dict[UUID, int]:
        """Return the weekday index of each workout day."""
        if not workout_day_ids:
            return {}
        response = (
            self.client.table("treinos_semanais")
            .select("id, dia_semana")
            .in_("id", [str(day_id) for day_id in workout_day_ids])
            .execute()
        )
        return {
            UUID(row["id"]): int(row["dia_semana"])
            for row in response.data or []
            if row.get("dia_semana") is not None
        }

    def mark_completed(self, workout_day_id: UUID) -> None:
        """Flag a workout day as completed."""
        self.client.table("treinos_semanais").update(
            {"concluido": True, "updated_at": datetime.now(tz=UTC).isoformat()}
        ).eq("id", str(workout_day_id)).execute()
