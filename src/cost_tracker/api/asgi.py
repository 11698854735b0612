"""ASGI entrypoint for the cost tracker API."""

from cost_tracker.api.app import create_app
from cost_tracker.containers import build_container

app = create_app(build_container())
