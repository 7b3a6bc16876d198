"""ASGI entrypoint for the calorie planner API."""

from calorie_planner.api.app import create_app
from calorie_planner.containers import build_container

app = create_app(build_container())
