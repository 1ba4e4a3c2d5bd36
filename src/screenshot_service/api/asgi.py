"""ASGI entrypoint for the screenshot service."""

from screenshot_service.api.app import create_app
from screenshot_service.containers import build_container

app = create_app(build_container())
