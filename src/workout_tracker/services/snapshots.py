"""Device-local durable state for started workout sessions."""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import UUID

from workout_tracker.domain.sessions import LocalSnapshot

_logger = logging.getLogger(__name__)

SNAPSHOTS_KEY = "workout_snapshots"
JOURNAL_KEY = "pending_duration_flush"


class KeyValueStorage(Protocol):
    """Durable string-keyed storage of JSON values."""

    def get(self, key: str) -> object | None:
        """Return the stored value, if present."""

    def set(self, key: str, value: object) -> None:
        """Store a JSON-serializable value."""

    def remove(self, key: str) -> None:
        """Remove a stored value."""


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class LocalSnapshotStore:
    """Single-writer cache of which sessions this device has started.

    The write timestamp is only used for expiry. The remote store stays
    authoritative and the reconciler rewrites this cache to match it.
    """

    storage: KeyValueStorage
    clock: Callable[[], datetime] = field(default=utc_now)

    def persist(self, session_id: UUID, day_index: int, started: bool) -> None:
        """Upsert the entry for a session, or drop it when not started."""
        states = self._load()
        if started:
            states[str(session_id)] = LocalSnapshot(
                session_id=session_id,
                day_index=day_index,
                started=True,
                written_at=self.clock(),
            )
        else:
            states.pop(str(session_id), None)
        self._save(states)

    def remove(self, session_id: UUID) -> None:
        """Drop the entry for a session."""
        states = self._load()
        if states.pop(str(session_id), None) is not None:
            self._save(states)

    def entries(self) -> list[LocalSnapshot]:
        """Return all cached entries."""
        return list(self._load().values())

    def started_day_indices(self) -> set[int]:
        """Return day indices of entries flagged as started."""
        return {entry.day_index for entry in self._load().values() if entry.started}

    def replace_all(self, entries: Iterable[LocalSnapshot]) -> None:
        """Rewrite the cache so it holds exactly the given entries."""
        self._save({str(entry.session_id): entry for entry in entries})

    def purge_older_than(self, max_age_seconds: int) -> int:
        """Remove entries written more than ``max_age_seconds`` ago."""
        states = self._load()
        cutoff = self.clock() - timedelta(seconds=max_age_seconds)
        expired = [key for key, entry in states.items() if entry.written_at < cutoff]
        for key in expired:
            del states[key]
        if expired:
            self._save(states)
        return len(expired)

    def _load(self) -> dict[str, LocalSnapshot]:
        raw = self.storage.get(SNAPSHOTS_KEY)
        if not isinstance(raw, dict):
            return {}
        states: dict[str, LocalSnapshot] = {}
        for key, value in raw.items():
            snapshot = _parse_snapshot(value)
            if snapshot is None:
                _logger.warning("Dropping malformed snapshot entry: key=%s", key)
                continue
            states[key] = snapshot
        return states

    def _save(self, states: dict[str, LocalSnapshot]) -> None:
        self.storage.set(
            SNAPSHOTS_KEY,
            {
                key: {
                    "session_id": str(entry.session_id),
                    "day_index": entry.day_index,
                    "started": entry.started,
                    "written_at": entry.written_at.isoformat(),
                }
                for key, entry in states.items()
            },
        )


@dataclass
class PendingFlushJournal:
    """Durable record of duration values not yet confirmed remotely."""

    storage: KeyValueStorage

    def record(self, session_id: UUID, duration_seconds: int) -> None:
        """Remember the latest duration for a session."""
        pending = self.pending()
        current = pending.get(session_id, 0)
        pending[session_id] = max(current, duration_seconds)
        self._save(pending)

    def clear(self, session_id: UUID) -> None:
        """Forget a session once its duration is stored remotely."""
        pending = self.pending()
        if pending.pop(session_id, None) is not None:
            self._save(pending)

    def pending(self) -> dict[UUID, int]:
        """Return journaled durations keyed by session id."""
        raw = self.storage.get(JOURNAL_KEY)
        if not isinstance(raw, dict):
            return {}
        pending: dict[UUID, int] = {}
        for key, value in raw.items():
            try:
                pending[UUID(key)] = int(value)
            except (TypeError, ValueError):
                continue
        return pending

    def _save(self, pending: dict[UUID, int]) -> None:
        if not pending:
            self.storage.remove(JOURNAL_KEY)
            return
        self.storage.set(JOURNAL_KEY, {str(key): value for key, value in pending.items()})


def _parse_snapshot(value: object) -> LocalSnapshot | None:
    if not isinstance(value, dict):
        return None
    try:
        written_at = datetime.fromisoformat(str(value["written_at"]))
        return LocalSnapshot(
            session_id=UUID(str(value["session_id"])),
            day_index=int(value["day_index"]),
            started=bool(value.get("started", False)),
            written_at=written_at
            if written_at.tzinfo
            else written_at.replace(tzinfo=UTC),
        )
    except (KeyError, TypeError, ValueError):
        return None
