"""
One isolated headless Chromium per scan.

A ``BrowserSession`` starts its own Playwright driver, browser,
context and page, and tears all four down on exit.  Nothing is pooled;
two concurrent scans run two browsers.
"""

from __future__ import annotations

import contextlib
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Literal

from playwright import async_api

from cookiecare.config import ScanSettings, get_settings
from cookiecare.models import scan
from cookiecare.utils import errors, logger

log = logger.create_logger("BrowserSession")

RequestHandler = Callable[[async_api.Request], None]

WaitUntil = Literal["commit", "domcontentloaded", "load", "networkidle"]

_CHROMIUM_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


class BrowserSession:
    """Async context manager around a desktop-profile Chromium page."""

    def __init__(self, settings: ScanSettings | None = None) -> None:
        self._settings = settings or get_settings()
        self._playwright: async_api.Playwright | None = None
        self._browser: async_api.Browser | None = None
        self._context: async_api.BrowserContext | None = None
        self._page: async_api.Page | None = None

    async def __aenter__(self) -> BrowserSession:
        try:
            await self.launch_browser()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def page(self) -> async_api.Page:
        if self._page is None:
            raise RuntimeError("No browser session active")
        return self._page

    async def launch_browser(self) -> None:
        """Start Chromium with the configured user agent and viewport.

        Raises:
            errors.NavigationError: Playwright could not start the browser.
        """
        cfg = self._settings
        viewport = {"width": cfg.viewport_width, "height": cfg.viewport_height}
        log.info("Starting Chromium", {"viewport": f"{cfg.viewport_width}x{cfg.viewport_height}"})
        try:
            self._playwright = await async_api.async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=True, args=_CHROMIUM_ARGS)
            self._context = await self._browser.new_context(user_agent=cfg.user_agent, viewport=viewport)
            self._page = await self._context.new_page()
        except Exception as error:
            raise errors.NavigationError(f"Could not launch browser: {errors.get_error_message(error)}") from error

    async def close(self) -> None:
        """Release context, browser and driver; failures are only logged."""
        closers: list[tuple[str, Callable[[], Awaitable[None]]]] = []
        if self._context is not None:
            closers.append(("context", self._context.close))
        if self._browser is not None:
            closers.append(("browser", self._browser.close))
        if self._playwright is not None:
            closers.append(("playwright", self._playwright.stop))
        self._page = self._context = self._browser = self._playwright = None

        for name, closer in closers:
            try:
                await closer()
            except Exception as exc:
                log.debug(f"Ignoring {name} shutdown error", {"error": str(exc)})
        if closers:
            log.debug("Browser session closed")

    async def navigate_to(
        self,
        url: str,
        wait_until: WaitUntil = "networkidle",
        timeout: int | None = None,
    ) -> None:
        """Open *url*, waiting for the network to settle.

        Raises:
            errors.NavigationError: Load failure or navigation timeout.
        """
        if timeout is None:
            timeout = self._settings.navigation_timeout_ms
        try:
            response = await self.page.goto(url, wait_until=wait_until, timeout=timeout)
        except Exception as error:
            reason = errors.get_error_message(error)
            log.warn("Navigation failed", {"url": url, "error": reason})
            raise errors.NavigationError(f"Could not load {url}: {reason}") from error

        if response is not None and response.status >= 400:
            log.warn("Page answered with an HTTP error", {"status": response.status})
        if self.page.url != url:
            log.info("Followed redirect", {"from": url, "to": self.page.url})

    async def reload(self, wait_until: WaitUntil = "networkidle") -> None:
        await self.page.reload(wait_until=wait_until)

    @contextlib.asynccontextmanager
    async def listen_requests(self, handler: RequestHandler) -> AsyncIterator[None]:
        """Feed every request the page issues inside the block to *handler*."""
        page = self.page
        page.on("request", handler)
        try:
            yield
        finally:
            page.remove_listener("request", handler)

    async def get_cookies(self) -> list[scan.CookieObservation]:
        """Snapshot of the context's cookie jar."""
        if self._context is None:
            raise RuntimeError("No browser session active")
        raw = await self._context.cookies()
        log.debug("Read cookie jar", {"count": len(raw)})
        return [scan.CookieObservation.from_browser_cookie(dict(cookie)) for cookie in raw]

    async def take_screenshot(self, full_page: bool = False) -> bytes:
        return await self.page.screenshot(type="png", full_page=full_page)
