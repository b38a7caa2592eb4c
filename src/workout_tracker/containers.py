"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from workout_tracker.adapters.asyncio_scheduler import AsyncioTickScheduler
from workout_tracker.adapters.json_file_storage import JsonFileStorage
from workout_tracker.adapters.supabase_admin_repository import SupabaseAdminRepository
from workout_tracker.adapters.supabase_notification_repository import (
    SupabaseNotificationRepository,
)
from workout_tracker.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from workout_tracker.adapters.supabase_rest_repository import (
    SupabaseRestPeriodRepository,
)
from workout_tracker.adapters.supabase_session_repository import (
    SupabaseWorkoutSessionRepository,
)
from workout_tracker.adapters.supabase_workout_day_repository import (
    SupabaseWorkoutDayRepository,
)
from workout_tracker.config import Settings
from workout_tracker.services.admin import AdminService
from workout_tracker.services.dashboard import DashboardService
from workout_tracker.services.notifications import NotificationService
from workout_tracker.services.reconciler import SessionReconciler
from workout_tracker.services.snapshots import LocalSnapshotStore, PendingFlushJournal
from workout_tracker.services.timer import WorkoutTimer


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    timer: WorkoutTimer
    reconciler: SessionReconciler
    notification_service: NotificationService
    dashboard_service: DashboardService
    admin_service: AdminService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    session_repository = SupabaseWorkoutSessionRepository(supabase_client)
    day_repository = SupabaseWorkoutDayRepository(supabase_client)
    profile_repository = SupabaseProfileRepository(supabase_client)
    notification_service = NotificationService(
        SupabaseNotificationRepository(supabase_client)
    )
    storage = JsonFileStorage(resolved_settings.snapshot_path)
    snapshots = LocalSnapshotStore(storage)
    journal = PendingFlushJournal(storage)
    scheduler = AsyncioTickScheduler(resolved_settings.tick_interval_seconds)
    timer = WorkoutTimer(
        session_repository=session_repository,
        day_repository=day_repository,
        profile_repository=profile_repository,
        rest_repository=SupabaseRestPeriodRepository(supabase_client),
        notification_service=notification_service,
        snapshots=snapshots,
        journal=journal,
        scheduler=scheduler,
        flush_interval_seconds=resolved_settings.flush_interval_seconds,
        dispatch=scheduler.dispatch,
    )
    reconciler = SessionReconciler(
        session_repository=session_repository,
        day_repository=day_repository,
        snapshots=snapshots,
        journal=journal,
        max_age_seconds=resolved_settings.snapshot_max_age_seconds,
    )
    dashboard_service = DashboardService(session_repository, profile_repository)
    admin_service = AdminService(SupabaseAdminRepository(supabase_client))

    async def close_resources() -> None:
        timer.stop()

    return AppContainer(
        settings=resolved_settings,
        timer=timer,
        reconciler=reconciler,
        notification_service=notification_service,
        dashboard_service=dashboard_service,
        admin_service=admin_service,
        close_resources=close_resources,
    )
