"""Playwright adapter for the browser session protocols."""

import asyncio
from dataclasses import dataclass

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from screenshot_service.services.browser import (
    BrowserLauncher,
    BrowserPage,
    BrowserSession,
)


@dataclass
class PlaywrightPage(BrowserPage):
    """Browser page backed by a Playwright ``Page``."""

    page: Page

    async def set_viewport_size(self, width: int, height: int) -> None:
        await self.page.set_viewport_size({"width": width, "height": height})

    async def set_extra_http_headers(self, headers: dict[str, str]) -> None:
        await self.page.set_extra_http_headers(headers)

    async def goto(self, url: str, *, wait_until: str, timeout_ms: int) -> None:
        """Navigate, translating Playwright timeouts into ``TimeoutError``."""
        try:
            await self.page.goto(url, wait_until=wait_until, timeout=timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise TimeoutError(str(exc)) from exc

    async def screenshot(
        self, *, image_format: str, quality: int | None, full_page: bool
    ) -> bytes:
        options: dict[str, object] = {"type": image_format, "full_page": full_page}
        if quality is not None:
            options["quality"] = quality
        return await self.page.screenshot(**options)


@dataclass
class PlaywrightBrowserSession(BrowserSession):
    """A Chromium process plus the Playwright driver that started it."""

    playwright: Playwright
    browser: Browser

    async def new_page(self) -> PlaywrightPage:
        return PlaywrightPage(page=await self.browser.new_page())

    async def close(self) -> None:
        """Close the browser, then stop its driver."""
        try:
            await self.browser.close()
        finally:
            await self.playwright.stop()


class PlaywrightBrowserLauncher(BrowserLauncher):
    """Launches headless Chromium through Playwright."""

    async def launch(
        self, *, headless: bool, args: list[str]
    ) -> PlaywrightBrowserSession:
        """Start a Playwright driver and a Chromium process owned by it.

        The driver is stopped if the launch fails or is cancelled.
        """
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(headless=headless, args=args)
        except BaseException:
            await asyncio.shield(playwright.stop())
            raise
        return PlaywrightBrowserSession(playwright=playwright, browser=browser)
