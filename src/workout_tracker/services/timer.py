"""Elapsed-time tracking for the workout in progress on this device."""

import logging
import random
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from typing import Protocol
from uuid import UUID

from workout_tracker.domain.sessions import (
    RestKind,
    RestPeriod,
    SessionStatus,
    WorkoutCompletion,
    WorkoutSession,
    format_duration,
)
from workout_tracker.services.notifications import NotificationService
from workout_tracker.services.sessions import (
    ProfileRepository,
    RestPeriodRepository,
    WorkoutDayRepository,
    WorkoutSessionRepository,
)
from workout_tracker.services.snapshots import (
    LocalSnapshotStore,
    PendingFlushJournal,
    utc_now,
)

_logger = logging.getLogger(__name__)

_FALLBACK_STUDENT_NAME = "Student"

_REST_LABELS = {
    RestKind.BETWEEN_SETS: "sets",
    RestKind.BETWEEN_EXERCISES: "exercises",
}

MOTIVATIONAL_MESSAGES = (
    "You crushed it! Every workout makes you stronger!",
    "Workout completed! Keep it up!",
    "Congratulations! One more step towards your goals!",
    "Amazing! Your dedication is making a difference!",
    "Mission accomplished! Your effort pays off!",
    "You're unstoppable! What a session!",
    "Excellent work! Your body thanks you!",
    "Workout done! You're improving every day!",
)


class TickScheduler(Protocol):
    """Recurring one-second callback owned by the timer."""

    def schedule(self, callback: Callable[[], None]) -> None:
        """Start invoking the callback on every tick, replacing any previous one."""

    def cancel(self) -> None:
        """Stop invoking the callback."""


@dataclass(frozen=True)
class TimerNotice:
    """User-facing outcome of a timer operation."""

    text: str
    level: str = "info"
    completion: WorkoutCompletion | None = None

    @property
    def is_error(self) -> bool:
        return self.level == "error"


@dataclass(frozen=True)
class TimerState:  # noqa: PLR0902
    """Read-only view of the timer for rendering."""

    session_id: UUID | None
    workout_day_id: UUID | None
    day_index: int | None
    elapsed_seconds: int
    paused: bool
    rest_kind: RestKind | None = None
    rest_elapsed_seconds: int = 0
    rest_seconds: int = 0

    @property
    def running(self) -> bool:
        return self.session_id is not None and not self.paused

    @property
    def resting(self) -> bool:
        return self.rest_kind is not None

    @property
    def formatted_time(self) -> str:
        return format_duration(self.elapsed_seconds)


@dataclass
class _ActiveSession:  # noqa: PLR0902
    session_id: UUID
    student_id: UUID
    trainer_id: UUID
    workout_day_id: UUID
    day_index: int
    started_at: datetime | None
    elapsed: int = 0
    since_flush: int = 0
    paused: bool = False
    paused_at: datetime | None = None
    paused_seconds: int = 0
    rest: RestPeriod | None = None
    rest_seconds: int = 0
    rest_count: int = 0


def _run_inline(task: Callable[[], object]) -> None:
    task()


def _missing(*values: object) -> bool:
    return any(value is None or value == "" for value in values)


@dataclass
class WorkoutTimer:  # noqa: PLR0902
    """Counts elapsed seconds for one session and keeps the remote row in step.

    The counter only advances on ``tick`` while a session is active and not
    paused. Every ``flush_interval_seconds`` ticks the value is handed to
    ``dispatch`` without waiting for the result; lifecycle transitions write
    synchronously and always cancel the scheduler first. The repository
    ignores writes to sessions that are no longer active, so a flush that
    lands after a terminal write changes nothing.
    """

    session_repository: WorkoutSessionRepository
    day_repository: WorkoutDayRepository
    profile_repository: ProfileRepository
    rest_repository: RestPeriodRepository
    notification_service: NotificationService
    snapshots: LocalSnapshotStore
    journal: PendingFlushJournal
    scheduler: TickScheduler
    flush_interval_seconds: int = 10
    dispatch: Callable[[Callable[[], object]], object] = _run_inline
    clock: Callable[[], datetime] = utc_now
    _active: _ActiveSession | None = field(default=None, init=False)

    def state(self) -> TimerState:
        """Return the current timer state."""
        active = self._active
        if active is None:
            return TimerState(
                session_id=None,
                workout_day_id=None,
                day_index=None,
                elapsed_seconds=0,
                paused=False,
            )
        rest = active.rest
        return TimerState(
            session_id=active.session_id,
            workout_day_id=active.workout_day_id,
            day_index=active.day_index,
            elapsed_seconds=active.elapsed,
            paused=active.paused,
            rest_kind=rest.kind if rest else None,
            rest_elapsed_seconds=(
                _seconds_between(rest.started_at, self.clock()) if rest else 0
            ),
            rest_seconds=active.rest_seconds,
        )

    def start(
        self,
        student_id: UUID | None,
        trainer_id: UUID | None,
        workout_day_id: UUID | None,
        day_index: int | None = None,
    ) -> TimerNotice:
        """Create a running session for a workout day and start counting."""
        if _missing(student_id, trainer_id, workout_day_id):
            return TimerNotice("Invalid data to start the workout.", level="error")
        if self._active is not None:
            if self._active.workout_day_id == workout_day_id:
                return TimerNotice("This workout is already in progress.")
            return TimerNotice(
                "Finish or cancel the current workout first.", level="error"
            )

        try:
            if day_index is None:
                day_index = self._lookup_day_index(workout_day_id)
            if day_index is None:
                return TimerNotice("Unknown workout day.", level="error")
            existing = self.session_repository.get_active_session(
                student_id, workout_day_id
            )
            if existing is not None:
                self._adopt(existing, day_index)
                return TimerNotice("Workout resumed.")
            session = self.session_repository.create_session(
                student_id=student_id,
                trainer_id=trainer_id,
                workout_day_id=workout_day_id,
                started_at=self.clock(),
            )
        except Exception:
            _logger.exception(
                "Failed to start workout session",
                extra={"student_id": str(student_id)},
            )
            return TimerNotice(
                "Could not start the workout. Check your connection.", level="error"
            )

        self._adopt(session, day_index)
        _logger.info(
            "Workout session started: session_id=%s day_index=%s",
            session.id,
            day_index,
        )
        return TimerNotice("Workout started! Let's go!", level="success")

    def restore(
        self,
        student_id: UUID,
        workout_day_id: UUID,
        day_index: int | None = None,
    ) -> TimerNotice | None:
        """Adopt the non-terminal remote session for a workout day, if any."""
        if self._active is not None:
            return None
        try:
            session = self.session_repository.get_active_session(
                student_id, workout_day_id
            )
            if session is None:
                return None
            if day_index is None:
                day_index = self._lookup_day_index(workout_day_id)
        except Exception:
            _logger.exception(
                "Failed to restore workout session",
                extra={"student_id": str(student_id)},
            )
            return None
        if day_index is None:
            _logger.warning(
                "Not restoring session of unknown workout day: session_id=%s",
                session.id,
            )
            return TimerNotice("Unknown workout day.", level="error")

        self._adopt(session, day_index)
        return TimerNotice("Workout restored.")

    def release_unless_active(
        self, student_id: UUID, active_session_ids: Iterable[UUID]
    ) -> TimerNotice | None:
        """Drop the local session when the backend no longer lists it as active.

        Nothing is written remotely: the session was completed or cancelled
        somewhere else and its row must stay as it is.
        """
        active = self._active
        if active is None or active.student_id != student_id:
            return None
        if active.session_id in set(active_session_ids):
            return None
        _logger.info(
            "Session ended on another device: session_id=%s", active.session_id
        )
        self.scheduler.cancel()
        self._clear(active)
        return TimerNotice("This workout was ended on another device.")

    def tick(self) -> None:
        """Advance the counter by one second."""
        active = self._active
        if active is None or active.paused:
            return
        active.elapsed += 1
        active.since_flush += 1
        if active.since_flush >= self.flush_interval_seconds:
            active.since_flush = 0
            self.dispatch(
                partial(
                    self._flush_duration,
                    active.session_id,
                    active.elapsed,
                    active.rest_seconds,
                )
            )

    def toggle_pause(self) -> TimerNotice:
        """Pause a running workout or resume a paused one."""
        active = self._active
        if active is None:
            return TimerNotice("No active workout.", level="error")

        now = self.clock()
        if not active.paused:
            self.scheduler.cancel()
            active.paused = True
            active.paused_at = now
            status = SessionStatus.PAUSED
            notice = TimerNotice("Workout paused.")
        else:
            active.paused_seconds += _seconds_between(active.paused_at, now)
            active.paused = False
            active.paused_at = None
            status = SessionStatus.RUNNING
            self.scheduler.schedule(self.tick)
            notice = TimerNotice("Workout resumed!")

        try:
            self.session_repository.update_session(
                active.session_id,
                status=status,
                duration_seconds=active.elapsed,
                paused_seconds=active.paused_seconds,
                paused_at=active.paused_at,
                ended_at=None,
                rest_seconds=active.rest_seconds,
            )
        except Exception:
            _logger.exception(
                "Failed to store pause state",
                extra={"session_id": str(active.session_id)},
            )
            return TimerNotice("Could not save workout state. Try again.", level="error")
        active.since_flush = 0
        return notice

    def start_rest(self, kind: RestKind) -> TimerNotice:
        """Open a rest between sets or exercises."""
        active = self._active
        if active is None:
            return TimerNotice("No active workout.", level="error")
        if active.rest is not None:
            return TimerNotice("A rest is already in progress.", level="warning")
        try:
            active.rest = self.rest_repository.create_rest(
                active.session_id, kind, self.clock()
            )
        except Exception:
            _logger.exception(
                "Failed to start rest",
                extra={"session_id": str(active.session_id)},
            )
            return TimerNotice("Could not start the rest.", level="error")
        return TimerNotice(f"Rest between {_REST_LABELS[kind]} started.")

    def end_rest(self) -> TimerNotice:
        """Close the open rest and add it to the session's rest total."""
        active = self._active
        if active is None or active.rest is None:
            return TimerNotice("No rest in progress.", level="error")
        try:
            duration = self._close_rest(active)
            self.session_repository.update_duration(
                active.session_id, active.elapsed, active.rest_seconds
            )
        except Exception:
            _logger.exception(
                "Failed to end rest",
                extra={"session_id": str(active.session_id)},
            )
            return TimerNotice("Could not end the rest.", level="error")
        return TimerNotice(
            f"Rest finished: {format_duration(duration)}", level="success"
        )

    def finish(self) -> TimerNotice:
        """Complete the workout, notify the trainer and clear local state."""
        active = self._active
        if active is None:
            return TimerNotice("No active workout.", level="error")

        self.scheduler.cancel()
        self._close_open_rest(active)
        ended_at = self.clock()
        paused_seconds = active.paused_seconds
        if active.paused:
            paused_seconds += _seconds_between(active.paused_at, ended_at)
        try:
            self.session_repository.update_session(
                active.session_id,
                status=SessionStatus.COMPLETED,
                duration_seconds=active.elapsed,
                paused_seconds=paused_seconds,
                paused_at=None,
                ended_at=ended_at,
                rest_seconds=active.rest_seconds,
            )
        except Exception:
            _logger.exception(
                "Failed to finish workout session",
                extra={"session_id": str(active.session_id)},
            )
            self._resume_ticks()
            return TimerNotice("Could not finish the workout.", level="error")

        self._after_completion(active, paused_seconds)
        self._clear(active)
        completion = WorkoutCompletion(
            session_id=active.session_id,
            total_seconds=active.elapsed,
            formatted_time=format_duration(active.elapsed),
            paused_seconds=paused_seconds,
            started_at=active.started_at,
            ended_at=ended_at,
            message=random.choice(MOTIVATIONAL_MESSAGES),  # noqa: S311
            rest_seconds=active.rest_seconds,
            rest_count=active.rest_count,
        )
        _logger.info(
            "Workout session completed: session_id=%s duration=%s",
            active.session_id,
            active.elapsed,
        )
        return TimerNotice(completion.message, level="success", completion=completion)

    def cancel(self) -> TimerNotice:
        """Cancel the workout without notifying the trainer."""
        active = self._active
        if active is None:
            return TimerNotice("No active workout.", level="error")

        self.scheduler.cancel()
        self._close_open_rest(active)
        try:
            self.session_repository.update_session(
                active.session_id,
                status=SessionStatus.CANCELLED,
                duration_seconds=active.elapsed,
                paused_seconds=active.paused_seconds,
                paused_at=None,
                ended_at=None,
                rest_seconds=active.rest_seconds,
            )
        except Exception:
            _logger.exception(
                "Failed to cancel workout session",
                extra={"session_id": str(active.session_id)},
            )
            self._resume_ticks()
            return TimerNotice("Could not cancel the workout.", level="error")

        self._clear(active)
        return TimerNotice("Workout cancelled.")

    def flush_on_close(self) -> None:
        """Journal the counter locally, then try to store it remotely."""
        active = self._active
        if active is None:
            return
        self.journal.record(active.session_id, active.elapsed)
        try:
            self.session_repository.update_duration(
                active.session_id, active.elapsed, active.rest_seconds
            )
        except Exception:
            _logger.exception(
                "Close flush failed, duration kept in local journal",
                extra={"session_id": str(active.session_id)},
            )
            return
        self.journal.clear(active.session_id)

    def stop(self) -> None:
        """Stop ticking without touching the session (view unmounted)."""
        self.scheduler.cancel()

    def _lookup_day_index(self, workout_day_id: UUID) -> int | None:
        return self.day_repository.get_day_indices([workout_day_id]).get(
            workout_day_id
        )

    def _adopt(self, session: WorkoutSession, day_index: int) -> None:
        journaled = self.journal.pending().get(session.id, 0)
        elapsed = max(session.duration_seconds, journaled)
        if journaled and (
            journaled <= session.duration_seconds
            or self._flush_duration(session.id, journaled)
        ):
            self.journal.clear(session.id)
        rests = self._load_rests(session.id)
        paused = session.status == SessionStatus.PAUSED
        self._active = _ActiveSession(
            session_id=session.id,
            student_id=session.student_id,
            trainer_id=session.trainer_id,
            workout_day_id=session.workout_day_id,
            day_index=day_index,
            started_at=session.started_at,
            elapsed=elapsed,
            paused=paused,
            paused_at=(session.paused_at or self.clock()) if paused else None,
            paused_seconds=session.paused_seconds,
            rest=next((rest for rest in rests if rest.ended_at is None), None),
            rest_seconds=session.rest_seconds,
            rest_count=sum(1 for rest in rests if rest.ended_at is not None),
        )
        self.snapshots.persist(session.id, day_index, started=True)
        if not paused:
            self.scheduler.schedule(self.tick)

    def _load_rests(self, session_id: UUID) -> list[RestPeriod]:
        try:
            return self.rest_repository.list_rests(session_id)
        except Exception:
            _logger.exception(
                "Failed to load rests",
                extra={"session_id": str(session_id)},
            )
            return []

    def _close_rest(self, active: _ActiveSession) -> int:
        rest = active.rest
        if rest is None:
            return 0
        ended_at = self.clock()
        duration = _seconds_between(rest.started_at, ended_at)
        self.rest_repository.end_rest(rest.id, ended_at, duration)
        active.rest = None
        active.rest_seconds += duration
        active.rest_count += 1
        return duration

    def _close_open_rest(self, active: _ActiveSession) -> None:
        try:
            self._close_rest(active)
        except Exception:
            _logger.exception(
                "Failed to close open rest",
                extra={"session_id": str(active.session_id)},
            )

    def _after_completion(self, active: _ActiveSession, paused_seconds: int) -> None:
        try:
            self.day_repository.mark_completed(active.workout_day_id)
        except Exception:
            _logger.exception(
                "Failed to mark workout day completed",
                extra={"workout_day_id": str(active.workout_day_id)},
            )
        try:
            names = self.profile_repository.get_display_names([active.student_id])
            self.notification_service.notify_workout_completed(
                trainer_id=active.trainer_id,
                student_id=active.student_id,
                student_name=names.get(active.student_id) or _FALLBACK_STUDENT_NAME,
                session_id=active.session_id,
                workout_day_id=active.workout_day_id,
                duration_seconds=active.elapsed,
                paused_seconds=paused_seconds,
            )
        except Exception:
            _logger.exception(
                "Failed to notify trainer of completed workout",
                extra={"session_id": str(active.session_id)},
            )

    def _clear(self, active: _ActiveSession) -> None:
        self.snapshots.remove(active.session_id)
        self.journal.clear(active.session_id)
        self._active = None

    def _resume_ticks(self) -> None:
        if self._active is not None and not self._active.paused:
            self.scheduler.schedule(self.tick)

    def _flush_duration(
        self,
        session_id: UUID,
        duration_seconds: int,
        rest_seconds: int | None = None,
    ) -> bool:
        try:
            self.session_repository.update_duration(
                session_id, duration_seconds, rest_seconds
            )
        except Exception:
            _logger.exception(
                "Failed to flush workout duration",
                extra={"session_id": str(session_id)},
            )
            return False
        return True


def _seconds_between(start: datetime | None, end: datetime) -> int:
    if start is None:
        return 0
    return max(0, int((end - start).total_seconds()))
