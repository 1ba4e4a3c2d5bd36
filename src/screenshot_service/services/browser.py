"""Per-request headless browser lifecycle."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Protocol

from screenshot_service.domain.errors import (
    BrowserLaunchError,
    CaptureError,
    NavigationError,
)
from screenshot_service.domain.screenshots import CapturedImage, ScreenshotRequest

_logger = logging.getLogger(__name__)


class BrowserPage(Protocol):
    """A single tab inside a launched browser."""

    async def set_viewport_size(self, width: int, height: int) -> None:
        """Resize the page viewport."""

    async def set_extra_http_headers(self, headers: dict[str, str]) -> None:
        """Send the given headers with every request from this page."""

    async def goto(self, url: str, *, wait_until: str, timeout_ms: int) -> None:
        """Navigate and wait for the load condition.

        Raises the builtin ``TimeoutError`` when ``timeout_ms`` elapses.
        """

    async def screenshot(
        self, *, image_format: str, quality: int | None, full_page: bool
    ) -> bytes:
        """Rasterize the page and return the encoded image."""


class BrowserSession(Protocol):
    """One browser process owned by a single request."""

    async def new_page(self) -> BrowserPage:
        """Open a new page in the browser."""

    async def close(self) -> None:
        """Terminate the browser process."""


class BrowserLauncher(Protocol):
    """Interface for starting headless browser processes."""

    async def launch(self, *, headless: bool, args: list[str]) -> BrowserSession:
        """Launch a browser process with the given engine flags."""


@dataclass(frozen=True)
class CaptureOptions:
    """Browser policy applied to every capture."""

    browser_args: tuple[str, ...]
    user_agent: str
    headless: bool = True
    wait_until: str = "networkidle"
    navigation_timeout_ms: int = 20000
    settle_delay_ms: int = 1000
    jpeg_quality: int = 90


@dataclass
class ScreenshotService:
    """Launches one browser per request and captures a single page."""

    launcher: BrowserLauncher
    options: CaptureOptions
    max_concurrent_sessions: int = 4
    _session_slots: asyncio.Semaphore = field(init=False)
    _live: dict[int, BrowserSession] = field(default_factory=dict, init=False)

    def __post_init__(self) -> None:
        self._session_slots = asyncio.Semaphore(self.max_concurrent_sessions)

    @property
    def active_sessions(self) -> int:
        """Number of browser processes currently alive."""
        return len(self._live)

    async def capture(self, request: ScreenshotRequest) -> CapturedImage:
        """Run the launch, navigate, and capture stages for ``request``.

        The browser is closed on every exit path, including cancellation.
        """
        async with self._session_slots, self.open_session() as session:
            page = await self._open_page(session, request)
            await self._navigate(page, request)
            return await self._screenshot(page, request)

    @asynccontextmanager
    async def open_session(self) -> AsyncIterator[BrowserSession]:
        """Launch a browser and guarantee it is closed when the scope exits."""
        try:
            session = await self.launcher.launch(
                headless=self.options.headless, args=list(self.options.browser_args)
            )
        except Exception as exc:
            raise BrowserLaunchError(f"Failed to launch browser: {exc}") from exc
        self._live[id(session)] = session
        try:
            yield session
        finally:
            if self._live.pop(id(session), None) is not None:
                await self._close(session)

    async def aclose(self) -> None:
        """Close any browser sessions still alive, used on shutdown."""
        sessions = list(self._live.values())
        self._live.clear()
        for session in sessions:
            await self._close(session)
        if sessions:
            _logger.warning("Closed %s browser session(s) on shutdown", len(sessions))

    async def _open_page(
        self, session: BrowserSession, request: ScreenshotRequest
    ) -> BrowserPage:
        try:
            page = await session.new_page()
            await page.set_viewport_size(request.width, request.height)
            await page.set_extra_http_headers(
                {
                    "User-Agent": self.options.user_agent,
                    "Referer": request.effective_referer,
                }
            )
        except Exception as exc:
            raise BrowserLaunchError(f"Failed to open page: {exc}") from exc
        return page

    async def _navigate(self, page: BrowserPage, request: ScreenshotRequest) -> None:
        timeout_ms = self.options.navigation_timeout_ms
        try:
            await page.goto(
                request.url, wait_until=self.options.wait_until, timeout_ms=timeout_ms
            )
        except TimeoutError as exc:
            raise NavigationError(
                f"Navigation timed out after {timeout_ms} ms: {request.url}"
            ) from exc
        except Exception as exc:
            raise NavigationError(f"Navigation failed: {exc}") from exc
        # Late client-side rendering is not covered by the network-idle signal.
        if self.options.settle_delay_ms > 0:
            await asyncio.sleep(self.options.settle_delay_ms / 1000)

    async def _screenshot(
        self, page: BrowserPage, request: ScreenshotRequest
    ) -> CapturedImage:
        quality = self.options.jpeg_quality if request.format == "jpeg" else None
        try:
            image_bytes = await page.screenshot(
                image_format=request.format,
                quality=quality,
                full_page=request.full_page,
            )
        except Exception as exc:
            raise CaptureError(f"Screenshot failed: {exc}") from exc
        return CapturedImage(image_bytes=image_bytes, image_format=request.format)

    async def _close(self, session: BrowserSession) -> None:
        try:
            await session.close()
        except Exception:
            _logger.exception("Failed to close browser session")
