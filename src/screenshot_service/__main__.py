"""Run the screenshot service with uvicorn."""

import uvicorn

from screenshot_service.api.app import create_app
from screenshot_service.config import Settings
from screenshot_service.containers import build_container


def main() -> None:
    """Serve the API on the configured host and port."""
    settings = Settings()
    uvicorn.run(
        create_app(build_container(settings)),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
