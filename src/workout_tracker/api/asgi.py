"""ASGI entrypoint for the workout tracker API."""

from workout_tracker.api.app import create_app
from workout_tracker.containers import build_container

app = create_app(build_container())
