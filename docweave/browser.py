"""Pooled headless browser used to render nodes to images.

One Chromium process is launched lazily and shared for the life of the
process. Callers borrow a page with ``async with pool.page() as page`` and the
page is closed on every exit path.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from docweave.config import BrowserConfig, get_config
from docweave.errors import ResourceUnavailable

if TYPE_CHECKING:
    from playwright.async_api import Browser, Page, Playwright

logger = logging.getLogger(__name__)


class BrowserPool:
    def __init__(self, config: BrowserConfig | None = None) -> None:
        self._config = config
        self._lock = asyncio.Lock()
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    @property
    def config(self) -> BrowserConfig:
        return self._config or get_config().browser

    async def _ensure_browser(self) -> Browser:
        async with self._lock:
            if self._browser is not None and self._browser.is_connected():
                return self._browser

            from playwright.async_api import Error as PlaywrightError
            from playwright.async_api import async_playwright

            logger.info("Launching headless browser")
            try:
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                self._browser = await self._playwright.chromium.launch(
                    headless=self.config.headless
                )
            except PlaywrightError as e:
                raise ResourceUnavailable("browser", e) from e
            return self._browser

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Borrow a fresh page; it is closed however the block exits."""
        from playwright.async_api import TimeoutError as PlaywrightTimeout

        browser = await self._ensure_browser()
        page = await browser.new_page(
            viewport={
                "width": self.config.viewport_width,
                "height": self.config.viewport_height,
            }
        )
        page.set_default_timeout(self.config.timeout_ms)
        try:
            yield page
        except PlaywrightTimeout as e:
            raise ResourceUnavailable("browser", e) from e
        finally:
            await page.close()

    async def shutdown(self) -> None:
        async with self._lock:
            if self._browser is not None:
                await self._browser.close()
                self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
        logger.debug("Browser pool shut down")


_pool: BrowserPool | None = None


def get_pool() -> BrowserPool:
    """The process-wide pool, created on first use."""
    global _pool
    if _pool is None:
        _pool = BrowserPool()
    return _pool
