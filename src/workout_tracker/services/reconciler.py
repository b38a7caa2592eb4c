"""Reconciles the device-local started state with remote workout sessions."""

import logging
from dataclasses import dataclass, field
from uuid import UUID

from workout_tracker.domain.sessions import LocalSnapshot, WorkoutSession
from workout_tracker.services.sessions import (
    WorkoutDayRepository,
    WorkoutSessionRepository,
)
from workout_tracker.services.snapshots import LocalSnapshotStore, PendingFlushJournal

_logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE_SECONDS = 24 * 60 * 60


@dataclass(frozen=True)
class Reconciliation:
    """Outcome of one activation pass."""

    provisional_days: frozenset[int]
    started_days: frozenset[int]
    active_sessions: tuple[WorkoutSession, ...] = ()
    stale: bool = False


@dataclass
class SessionReconciler:
    """Decides which workout days show as in progress.

    The local store answers first so the UI can paint immediately; the set of
    non-terminal remote sessions then replaces it. Failures keep whatever was
    shown before, and the next activation corrects it.
    """

    session_repository: WorkoutSessionRepository
    day_repository: WorkoutDayRepository
    snapshots: LocalSnapshotStore
    journal: PendingFlushJournal
    max_age_seconds: int = DEFAULT_MAX_AGE_SECONDS
    _started_days: frozenset[int] | None = field(default=None, init=False)

    def provisional_started_days(self) -> frozenset[int]:
        """Return day indices the local store believes are started."""
        return frozenset(self.snapshots.started_day_indices())

    def reconcile(self, student_id: UUID) -> Reconciliation:
        """Run one activation pass for a student."""
        provisional = self._started_days or frozenset()
        try:
            self.snapshots.purge_older_than(self.max_age_seconds)
            provisional = self.provisional_started_days()
            active = self.session_repository.list_active_sessions(student_id)
            if active:
                started = self._adopt_remote(active)
            else:
                started = self._sweep_local()
        except Exception:
            _logger.exception(
                "Workout reconciliation failed",
                extra={"student_id": str(student_id)},
            )
            previous = self._started_days
            return Reconciliation(
                provisional_days=provisional,
                started_days=provisional if previous is None else previous,
                stale=True,
            )

        self._started_days = started
        self._replay_journal(active)
        return Reconciliation(
            provisional_days=provisional,
            started_days=started,
            active_sessions=tuple(active),
        )

    def _adopt_remote(self, active: list[WorkoutSession]) -> frozenset[int]:
        cached = {entry.session_id: entry for entry in self.snapshots.entries()}
        indices = self.day_repository.get_day_indices(
            list({session.workout_day_id for session in active})
        )
        now = self.snapshots.clock()
        entries: list[LocalSnapshot] = []
        for session in active:
            day_index = indices.get(session.workout_day_id)
            if day_index is None and session.id in cached:
                day_index = cached[session.id].day_index
            if day_index is None:
                _logger.warning(
                    "Active session without a known workout day: session_id=%s",
                    session.id,
                )
                continue
            entries.append(
                LocalSnapshot(
                    session_id=session.id,
                    day_index=day_index,
                    started=True,
                    written_at=now,
                )
            )
        self.snapshots.replace_all(entries)
        return frozenset(entry.day_index for entry in entries)

    def _sweep_local(self) -> frozenset[int]:
        entries = self.snapshots.entries()
        if not entries:
            return frozenset()
        confirmed = self.session_repository.list_active_session_ids(
            [entry.session_id for entry in entries]
        )
        for entry in entries:
            if entry.session_id not in confirmed:
                _logger.info(
                    "Dropping stale local workout state: session_id=%s",
                    entry.session_id,
                )
                self.snapshots.remove(entry.session_id)
        return frozenset(
            entry.day_index
            for entry in entries
            if entry.started and entry.session_id in confirmed
        )

    def _replay_journal(self, active: list[WorkoutSession]) -> None:
        pending = self.journal.pending()
        if not pending:
            return
        by_id = {session.id: session for session in active}
        for session_id, duration in pending.items():
            session = by_id.get(session_id)
            if session is not None and duration > session.duration_seconds:
                try:
                    self.session_repository.update_duration(session_id, duration)
                except Exception:
                    _logger.exception(
                        "Journal replay failed, keeping entry for the next pass",
                        extra={"session_id": str(session_id)},
                    )
                    continue
            self.journal.clear(session_id)
