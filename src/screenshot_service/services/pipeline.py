"""Request-to-image pipeline."""

import asyncio
import logging
import time
from dataclasses import dataclass

from screenshot_service.domain.errors import (
    RateLimitExceededError,
    RequestTimeoutError,
    ScreenshotError,
)
from screenshot_service.domain.screenshots import (
    CapturedImage,
    ScreenshotRequest,
    ScreenshotResult,
)
from screenshot_service.services.browser import ScreenshotService
from screenshot_service.services.rate_limiter import RateLimiter
from screenshot_service.services.validation import parse_screenshot_request

_logger = logging.getLogger(__name__)


@dataclass
class ScreenshotPipeline:
    """Throttles, validates, and captures a single screenshot request."""

    rate_limiter: RateLimiter
    screenshot_service: ScreenshotService
    cache_control: str
    request_timeout_ms: int = 60000

    async def handle(self, client_key: str, params: object) -> ScreenshotResult:
        """Run the pipeline for one request.

        Failures never propagate: each one is turned into an error result with
        the matching status code.
        """
        decision = self.rate_limiter.hit(client_key)
        headers = {
            "X-RateLimit-Limit": str(decision.limit),
            "X-RateLimit-Remaining": str(decision.remaining),
        }
        if not decision.allowed:
            _logger.warning("Rate limit exceeded for %s", client_key)
            error = RateLimitExceededError(decision.reset_after_seconds)
            return ScreenshotResult.failure(
                error, {**headers, "Retry-After": str(error.retry_after_seconds)}
            )

        started = time.perf_counter()
        try:
            request = parse_screenshot_request(params)
            image = await self._capture(request)
        except ScreenshotError as exc:
            _logger.warning(
                "Screenshot request failed: status=%s error=%s message=%s",
                exc.status_code,
                exc.label,
                exc.message,
            )
            return ScreenshotResult.failure(exc, headers)
        except Exception:
            _logger.exception("Unexpected screenshot failure")
            return ScreenshotResult.failure(
                ScreenshotError("Unexpected error while capturing the page"), headers
            )

        elapsed_ms = (time.perf_counter() - started) * 1000
        _logger.info(
            "Captured %s as %s (%s bytes) in %.0f ms",
            request.url,
            request.format,
            len(image.image_bytes),
            elapsed_ms,
        )
        return ScreenshotResult.success(image, self.cache_control, headers)

    async def _capture(self, request: ScreenshotRequest) -> CapturedImage:
        timeout_ms = self.request_timeout_ms
        try:
            async with asyncio.timeout(timeout_ms / 1000):
                return await self.screenshot_service.capture(request)
        except TimeoutError as exc:
            raise RequestTimeoutError(
                f"Request exceeded {timeout_ms} ms: {request.url}"
            ) from exc
