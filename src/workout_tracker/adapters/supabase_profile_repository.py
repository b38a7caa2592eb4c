"""Supabase repository for profile names."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from workout_tracker.services.sessions import ProfileRepository


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Reads display names from the ``profiles`` table."""

    client: Client

    def get_display_names(self, profile_ids: list[UUID]) -> dict[UUID, str]:
        """Return names keyed by profile id."""
        if not profile_ids:
            return {}
        response = (
            self.client.table("profiles")
            .select("id, nome")
            .in_("id", [str(profile_id) for profile_id in profile_ids])
            .execute()
        )
        return {
            UUID(row["id"]): row["nome"]
            for row in response.data or []
            if row.get("nome")
        }
