"""Supabase repository for notifications."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from workout_tracker.domain.notifications import Notification
from workout_tracker.services.notifications import NotificationRepository

_COLUMNS = "id, destinatario_id, tipo, titulo, mensagem, dados, lida, created_at"


@dataclass
class SupabaseNotificationRepository(NotificationRepository):
    """Supabase-backed notification repository."""

    client: Client

    def create_notification(  # noqa: PLR0913
        self,
        recipient_id: UUID,
        type: str,  # noqa: A002
        title: str,
        body: str,
        payload: dict[str, object],
    ) -> Notification:
        """Create an unread notification row."""
        response = (
            self.client.table("notificacoes")
            .insert(
                {
                    "destinatario_id": str(recipient_id),
                    "tipo": type,
                    "titulo": title,
                    "mensagem": body,
                    "dados": payload,
                    "lida": False,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create notification")
        return _to_notification(response.data[0])

    def list_for_recipient(self, recipient_id: UUID, limit: int) -> list[Notification]:
        """Return the newest notifications for a recipient."""
        response = (
            self.client.table("notificacoes")
            .select(_COLUMNS)
            .eq("destinatario_id", str(recipient_id))
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_to_notification(row) for row in response.data or []]

    def mark_read(self, notification_id: UUID) -> None:
        """Flag a notification as read."""
        self.client.table("notificacoes").update({"lida": True}).eq(
            "id", str(notification_id)
        ).execute()

    def mark_all_read(self, recipient_id: UUID) -> None:
        """Flag every unread notification of a recipient as read."""
        self.client.table("notificacoes").update({"lida": True}).eq(
            "destinatario_id", str(recipient_id)
        ).eq("lida", False).execute()

    def delete(self, notification_id: UUID) -> None:
        """Delete a notification row."""
        self.client.table("notificacoes").delete().eq(
            "id", str(notification_id)
        ).execute()


def _to_notification(row: dict[str, object]) -> Notification:
    created_at = row.get("created_at")
    payload = row.get("dados")
    return Notification(
        id=UUID(str(row["id"])),
        recipient_id=UUID(str(row["destinatario_id"])),
        type=str(row["tipo"]),
        title=str(row.get("titulo") or ""),
        body=str(row.get("mensagem") or ""),
        payload=payload if isinstance(payload, dict) else {},
        read=bool(row.get("lida", False)),
        created_at=datetime.fromisoformat(created_at)
        if isinstance(created_at, str) and created_at
        else None,
    )
