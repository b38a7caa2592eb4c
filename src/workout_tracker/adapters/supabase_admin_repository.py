"""Supabase admin data access."""

from dataclasses import dataclass

from supabase import Client

from workout_tracker.services.admin import AdminRepository


@dataclass
class SupabaseAdminRepository(AdminRepository):
    """Supabase implementation for admin queries."""

    client: Client

    def list_sessions(self, limit: int) -> list[dict[str, object]]:
        """Return recent workout sessions."""
        response = (
            self.client.table("treino_sessoes")
            .select(
                "id, profile_id, personal_id, treino_semanal_id, status, "
                "duracao_segundos, inicio, fim, updated_at"
            )
            .order("updated_at", desc=True)
            .limit(limit)
            .execute()
        )
        return response.data or []
