"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import FastAPI, Request

from workout_tracker.api.admin import router as admin_router
from workout_tracker.api.models import (
    ActivateRequest,
    StartRestRequest,
    StartWorkoutRequest,
)
from workout_tracker.app_logging import configure_logging
from workout_tracker.containers import AppContainer
from workout_tracker.domain.dashboard import ActiveWorkout
from workout_tracker.domain.notifications import Notification
from workout_tracker.services.reconciler import Reconciliation
from workout_tracker.services.timer import TimerNotice, TimerState


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        try:
            app.state.container.timer.flush_on_close()
        except Exception:
            logger.exception("Failed to flush workout state on shutdown")
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/workout")
    async def workout_state(request: Request) -> dict[str, object]:
        """Return the state of the workout on this device."""
        state_container: AppContainer = request.app.state.container
        return {"state": _format_state(state_container.timer.state())}

    @app.post("/workout/start")
    async def start_workout(
        payload: StartWorkoutRequest, request: Request
    ) -> dict[str, object]:
        """Start (or resume) the workout for a day."""
        timer = request.app.state.container.timer
        notice = timer.start(
            payload.student_id,
            payload.trainer_id,
            payload.workout_day_id,
            payload.day_index,
        )
        return _notice_response(notice, timer.state())

    @app.post("/workout/pause")
    async def toggle_pause(request: Request) -> dict[str, object]:
        """Pause or resume the active workout."""
        timer = request.app.state.container.timer
        return _notice_response(timer.toggle_pause(), timer.state())

    @app.post("/workout/finish")
    async def finish_workout(request: Request) -> dict[str, object]:
        """Complete the active workout."""
        timer = request.app.state.container.timer
        return _notice_response(timer.finish(), timer.state())

    @app.post("/workout/cancel")
    async def cancel_workout(request: Request) -> dict[str, object]:
        """Cancel the active workout."""
        timer = request.app.state.container.timer
        return _notice_response(timer.cancel(), timer.state())

    @app.post("/workout/rest/start")
    async def start_rest(
        payload: StartRestRequest, request: Request
    ) -> dict[str, object]:
        """Open a rest between sets or exercises."""
        timer = request.app.state.container.timer
        return _notice_response(timer.start_rest(payload.kind), timer.state())

    @app.post("/workout/rest/end")
    async def end_rest(request: Request) -> dict[str, object]:
        """Close the open rest."""
        timer = request.app.state.container.timer
        return _notice_response(timer.end_rest(), timer.state())

    @app.post("/workout/activate")
    async def activate(payload: ActivateRequest, request: Request) -> dict[str, object]:
        """Reconcile local state with the backend after load or focus."""
        state_container: AppContainer = request.app.state.container
        timer = state_container.timer
        result = state_container.reconciler.reconcile(payload.student_id)
        notice = None
        if not result.stale:
            notice = timer.release_unless_active(
                payload.student_id,
                [session.id for session in result.active_sessions],
            )
            if payload.workout_day_id is not None:
                notice = (
                    timer.restore(
                        payload.student_id, payload.workout_day_id, payload.day_index
                    )
                    or notice
                )
        response = _format_reconciliation(result)
        response["state"] = _format_state(timer.state())
        response["notice"] = _format_notice(notice) if notice else None
        return response

    @app.get("/trainers/{trainer_id}/active-workouts")
    async def active_workouts(
        trainer_id: UUID, request: Request, limit: int = 10
    ) -> dict[str, object]:
        """Return students currently training."""
        state_container: AppContainer = request.app.state.container
        workouts = state_container.dashboard_service.active_workouts(trainer_id, limit)
        return {"workouts": [_format_active_workout(item) for item in workouts]}

    @app.get("/notifications/{recipient_id}")
    async def list_notifications(
        recipient_id: UUID, request: Request, limit: int = 50
    ) -> dict[str, object]:
        """Return the newest notifications of a recipient."""
        service = request.app.state.container.notification_service
        items = service.list_for_recipient(recipient_id, limit)
        return {
            "notifications": [_format_notification(item) for item in items],
            "unread": sum(1 for item in items if not item.read),
        }

    @app.post("/notifications/{notification_id}/read")
    async def mark_notification_read(
        notification_id: UUID, request: Request
    ) -> dict[str, str]:
        """Mark one notification as read."""
        request.app.state.container.notification_service.mark_read(notification_id)
        return {"status": "ok"}

    @app.post("/notifications/{recipient_id}/read-all")
    async def mark_all_notifications_read(
        recipient_id: UUID, request: Request
    ) -> dict[str, str]:
        """Mark every notification of a recipient as read."""
        request.app.state.container.notification_service.mark_all_read(recipient_id)
        return {"status": "ok"}

    @app.delete("/notifications/{notification_id}")
    async def delete_notification(
        notification_id: UUID, request: Request
    ) -> dict[str, str]:
        """Delete a notification."""
        request.app.state.container.notification_service.delete(notification_id)
        return {"status": "ok"}

    return app


def _format_state(state: TimerState) -> dict[str, object]:
    return {
        "session_id": str(state.session_id) if state.session_id else None,
        "workout_day_id": str(state.workout_day_id) if state.workout_day_id else None,
        "day_index": state.day_index,
        "elapsed_seconds": state.elapsed_seconds,
        "formatted_time": state.formatted_time,
        "paused": state.paused,
        "running": state.running,
        "resting": state.resting,
        "rest_kind": state.rest_kind.value if state.rest_kind else None,
        "rest_elapsed_seconds": state.rest_elapsed_seconds,
        "rest_seconds": state.rest_seconds,
    }


def _format_notice(notice: TimerNotice) -> dict[str, object]:
    formatted: dict[str, object] = {"level": notice.level, "text": notice.text}
    completion = notice.completion
    if completion is not None:
        formatted["completion"] = {
            "session_id": str(completion.session_id),
            "total_seconds": completion.total_seconds,
            "formatted_time": completion.formatted_time,
            "paused_seconds": completion.paused_seconds,
            "started_at": completion.started_at.isoformat()
            if completion.started_at
            else None,
            "ended_at": completion.ended_at.isoformat(),
            "message": completion.message,
            "rest_seconds": completion.rest_seconds,
            "rest_count": completion.rest_count,
        }
    return formatted


def _notice_response(notice: TimerNotice, state: TimerState) -> dict[str, object]:
    return {"notice": _format_notice(notice), "state": _format_state(state)}


def _format_reconciliation(result: Reconciliation) -> dict[str, object]:
    return {
        "provisional_days": sorted(result.provisional_days),
        "started_days": sorted(result.started_days),
        "active_workout_day_ids": sorted(
            {str(session.workout_day_id) for session in result.active_sessions}
        ),
        "stale": result.stale,
    }


def _format_active_workout(item: ActiveWorkout) -> dict[str, object]:
    return {
        "session_id": str(item.session_id),
        "student_id": str(item.student_id),
        "student_name": item.student_name,
        "status": item.status.value,
        "started_at": item.started_at.isoformat() if item.started_at else None,
    }


def _format_notification(item: Notification) -> dict[str, object]:
    return {
        "id": str(item.id),
        "type": item.type,
        "title": item.title,
        "body": item.body,
        "payload": item.payload,
        "read": item.read,
        "created_at": item.created_at.isoformat() if item.created_at else None,
    }
