"""Mapping of pipeline results onto HTTP responses."""

from fastapi import Response
from fastapi.responses import JSONResponse

from screenshot_service.domain.screenshots import ScreenshotResult


def to_response(result: ScreenshotResult) -> Response:
    """Encode a screenshot result as raw image bytes or a JSON error."""
    if result.image_bytes is not None:
        return Response(
            content=result.image_bytes,
            status_code=result.status_code,
            media_type=result.content_type,
            headers=dict(result.headers),
        )
    return JSONResponse(
        content=result.error_body,
        status_code=result.status_code,
        headers=dict(result.headers),
    )
