"""Tests for response encoding."""

import json

from screenshot_service.api.responses import to_response
from screenshot_service.domain.errors import NavigationError, RateLimitExceededError
from screenshot_service.domain.screenshots import CapturedImage, ScreenshotResult


def test_success_result_encodes_image() -> None:
    result = ScreenshotResult.success(
        CapturedImage(image_bytes=b"png-bytes", image_format="png"),
        cache_control="public, max-age=300",
        headers={"X-RateLimit-Remaining": "3"},
    )

    response = to_response(result)

    assert response.status_code == 200
    assert response.body == b"png-bytes"
    assert response.headers["content-type"] == "image/png"
    assert response.headers["cache-control"] == "public, max-age=300"
    assert response.headers["x-ratelimit-remaining"] == "3"


def test_failure_result_encodes_json_error() -> None:
    result = ScreenshotResult.failure(NavigationError("Navigation failed: boom"))

    response = to_response(result)

    assert response.status_code == 500
    assert response.headers["content-type"] == "application/json"
    assert json.loads(response.body) == {
        "error": "navigation failed",
        "message": "Navigation failed: boom",
    }
    assert "cache-control" not in response.headers


def test_rate_limit_result_keeps_retry_after() -> None:
    result = ScreenshotResult.failure(
        RateLimitExceededError(retry_after_seconds=12), headers={"Retry-After": "12"}
    )

    response = to_response(result)

    assert response.status_code == 429
    assert response.headers["retry-after"] == "12"
    assert json.loads(response.body)["error"] == "rate limited"


def test_long_error_messages_are_truncated() -> None:
    result = ScreenshotResult.failure(NavigationError("x" * 500))

    body = json.loads(to_response(result).body)

    assert len(body["message"]) == 300
    assert body["message"].endswith("...")
