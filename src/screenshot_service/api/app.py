"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse

from screenshot_service.api.responses import to_response
from screenshot_service.app_logging import configure_logging
from screenshot_service.containers import AppContainer

READY_MESSAGE = "Screenshot Service Ready"


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Screenshot service ready: max_sessions=%s rate_limit=%s/%ss",
            container.settings.max_concurrent_sessions,
            container.settings.rate_limit_max_requests,
            container.settings.rate_limit_window_seconds,
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health", response_class=PlainTextResponse)
    async def health() -> str:
        """Liveness probe, bypassing validation and rate limiting."""
        return READY_MESSAGE

    @app.get("/")
    @app.get("/api/screenshot")
    async def screenshot_from_query(request: Request) -> Response:
        """Capture a screenshot described by query string parameters."""
        # A bare GET / doubles as the readiness probe.
        if request.url.path == "/" and not request.query_params:
            return PlainTextResponse(READY_MESSAGE)
        return await _run_pipeline(request, dict(request.query_params))

    @app.post("/")
    @app.post("/api/screenshot")
    async def screenshot_from_body(request: Request) -> Response:
        """Capture a screenshot described by a JSON body."""
        try:
            params = await request.json()
        except ValueError:
            params = None
        return await _run_pipeline(request, params)

    return app


async def _run_pipeline(request: Request, params: object) -> Response:
    state_container: AppContainer = request.app.state.container
    client_key = _client_key(request, state_container.settings.trust_forwarded_for)
    result = await state_container.pipeline.handle(client_key, params)
    return to_response(result)


def _client_key(request: Request, trust_forwarded_for: bool) -> str:
    """Identify the caller for rate limiting."""
    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "").split(",")[0].strip()
        if forwarded:
            return forwarded
    return request.client.host if request.client else "unknown"
