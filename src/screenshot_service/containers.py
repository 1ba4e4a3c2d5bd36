"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from screenshot_service.adapters.playwright_browser import PlaywrightBrowserLauncher
from screenshot_service.config import (
    Settings,
    build_cache_control,
    parse_browser_args,
)
from screenshot_service.services.browser import (
    BrowserLauncher,
    CaptureOptions,
    ScreenshotService,
)
from screenshot_service.services.pipeline import ScreenshotPipeline
from screenshot_service.services.rate_limiter import InMemoryRateLimiter, RateLimiter


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    rate_limiter: RateLimiter
    screenshot_service: ScreenshotService
    pipeline: ScreenshotPipeline
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    settings: Settings | None = None, launcher: BrowserLauncher | None = None
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    rate_limiter = InMemoryRateLimiter(
        max_requests=resolved_settings.rate_limit_max_requests,
        window_seconds=resolved_settings.rate_limit_window_seconds,
    )
    options = CaptureOptions(
        browser_args=tuple(parse_browser_args(resolved_settings.browser_args)),
        user_agent=resolved_settings.user_agent,
        headless=resolved_settings.browser_headless,
        wait_until=resolved_settings.navigation_wait_until,
        navigation_timeout_ms=resolved_settings.navigation_timeout_ms,
        settle_delay_ms=resolved_settings.settle_delay_ms,
        jpeg_quality=resolved_settings.jpeg_quality,
    )
    screenshot_service = ScreenshotService(
        launcher=launcher or PlaywrightBrowserLauncher(),
        options=options,
        max_concurrent_sessions=resolved_settings.max_concurrent_sessions,
    )
    pipeline = ScreenshotPipeline(
        rate_limiter=rate_limiter,
        screenshot_service=screenshot_service,
        cache_control=build_cache_control(
            resolved_settings.cache_max_age_seconds,
            resolved_settings.cache_shared_max_age_seconds,
        ),
        request_timeout_ms=resolved_settings.request_timeout_ms,
    )

    async def close_resources() -> None:
        await screenshot_service.aclose()

    return AppContainer(
        settings=resolved_settings,
        rate_limiter=rate_limiter,
        screenshot_service=screenshot_service,
        pipeline=pipeline,
        close_resources=close_resources,
    )
