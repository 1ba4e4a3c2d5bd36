"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field

import pytest

from screenshot_service.config import Settings
from screenshot_service.containers import AppContainer, build_container
from screenshot_service.services.browser import (
    BrowserLauncher,
    BrowserPage,
    BrowserSession,
    CaptureOptions,
    ScreenshotService,
)

FAKE_JPEG = b"\xff\xd8\xff\xe0fake-jpeg"
FAKE_PNG = b"\x89PNG\r\n\x1a\nfake-png"


class EngineFailure(RuntimeError):
    """Simulated browser engine failure."""


@dataclass
class FakePage(BrowserPage):
    """Fake page that records configuration, navigation, and captures."""

    goto_error: Exception | None = None
    goto_delay_seconds: float = 0.0
    screenshot_error: Exception | None = None
    viewport: tuple[int, int] | None = None
    headers: dict[str, str] = field(default_factory=dict)
    navigations: list[dict[str, object]] = field(default_factory=list)
    screenshots: list[dict[str, object]] = field(default_factory=list)

    async def set_viewport_size(self, width: int, height: int) -> None:
        self.viewport = (width, height)

    async def set_extra_http_headers(self, headers: dict[str, str]) -> None:
        self.headers = dict(headers)

    async def goto(self, url: str, *, wait_until: str, timeout_ms: int) -> None:
        self.navigations.append(
            {"url": url, "wait_until": wait_until, "timeout_ms": timeout_ms}
        )
        if self.goto_delay_seconds:
            await asyncio.sleep(self.goto_delay_seconds)
        if self.goto_error is not None:
            raise self.goto_error

    async def screenshot(
        self, *, image_format: str, quality: int | None, full_page: bool
    ) -> bytes:
        self.screenshots.append(
            {"type": image_format, "quality": quality, "full_page": full_page}
        )
        if self.screenshot_error is not None:
            raise self.screenshot_error
        return FAKE_PNG if image_format == "png" else FAKE_JPEG


@dataclass
class FakeBrowserSession(BrowserSession):
    """Fake browser process tracking whether it was closed."""

    page: FakePage
    new_page_error: Exception | None = None
    close_error: Exception | None = None
    closed: bool = False

    async def new_page(self) -> FakePage:
        if self.new_page_error is not None:
            raise self.new_page_error
        return self.page

    async def close(self) -> None:
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


@dataclass
class FakeBrowserLauncher(BrowserLauncher):
    """Fake launcher that hands out recording sessions.

    Error attributes are copied onto every session it launches.
    """

    launch_error: Exception | None = None
    new_page_error: Exception | None = None
    goto_error: Exception | None = None
    goto_delay_seconds: float = 0.0
    screenshot_error: Exception | None = None
    close_error: Exception | None = None
    launches: list[dict[str, object]] = field(default_factory=list)
    sessions: list[FakeBrowserSession] = field(default_factory=list)
    peak_open_sessions: int = 0

    async def launch(self, *, headless: bool, args: list[str]) -> FakeBrowserSession:
        self.launches.append({"headless": headless, "args": args})
        if self.launch_error is not None:
            raise self.launch_error
        session = FakeBrowserSession(
            page=FakePage(
                goto_error=self.goto_error,
                goto_delay_seconds=self.goto_delay_seconds,
                screenshot_error=self.screenshot_error,
            ),
            new_page_error=self.new_page_error,
            close_error=self.close_error,
        )
        self.sessions.append(session)
        open_sessions = sum(not existing.closed for existing in self.sessions)
        self.peak_open_sessions = max(self.peak_open_sessions, open_sessions)
        return session

    @property
    def last_page(self) -> FakePage:
        return self.sessions[-1].page


def make_service(
    launcher: FakeBrowserLauncher,
    max_concurrent_sessions: int = 4,
    **overrides: object,
) -> ScreenshotService:
    """Build a screenshot service with test-friendly capture options."""
    options: dict[str, object] = {
        "browser_args": ("--disable-gpu", "--no-sandbox"),
        "user_agent": "TestAgent/1.0",
        "settle_delay_ms": 0,
    }
    options.update(overrides)
    return ScreenshotService(
        launcher=launcher,
        options=CaptureOptions(**options),
        max_concurrent_sessions=max_concurrent_sessions,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(environment="test", settle_delay_ms=0)


@pytest.fixture
def launcher() -> FakeBrowserLauncher:
    return FakeBrowserLauncher()


@pytest.fixture
def container(settings: Settings, launcher: FakeBrowserLauncher) -> AppContainer:
    return build_container(settings, launcher=launcher)
