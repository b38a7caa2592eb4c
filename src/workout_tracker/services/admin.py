"""Admin service for reporting."""

from dataclasses import dataclass
from typing import Protocol

from workout_tracker.domain.sessions import format_duration


class AdminRepository(Protocol):
    """Persistence interface for admin data."""

    def list_sessions(self, limit: int) -> list[dict[str, object]]:
        """Return recent workout sessions."""


@dataclass
class AdminService:
    """Service for admin dashboards."""

    admin_repository: AdminRepository

    def list_sessions(self, limit: int) -> list[dict[str, object]]:
        """Return recent sessions with a formatted duration."""
        sessions = []
        for row in self.admin_repository.list_sessions(limit):
            duration = row.get("duracao_segundos")
            sessions.append(
                {
                    **row,
                    "duration_formatted": format_duration(
                        int(duration) if isinstance(duration, int | float) else 0
                    ),
                }
            )
        return sessions
