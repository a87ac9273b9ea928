"""Browser manager for Playwright context management per run."""

import logging
from typing import Dict, Optional

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright

logger = logging.getLogger(__name__)

VIEWPORT = {"width": 1920, "height": 1080}


class BrowserManager:
    """Manages one Playwright browser, context and page per run."""

    def __init__(self):
        self._browsers: Dict[str, Browser] = {}
        self._contexts: Dict[str, BrowserContext] = {}
        self._pages: Dict[str, Page] = {}
        self._playwright: Optional[Playwright] = None

    async def initialize(self):
        """Start Playwright."""
        if self._playwright is None:
            self._playwright = await async_playwright().start()
            logger.info("Playwright initialized")

    async def get_or_create_context(
        self,
        run_id: str,
        headless: bool = True,
        slow_mo_ms: int = 0
    ) -> BrowserContext:
        """
        Get or create an isolated browser context for a run.

        Args:
            run_id: Run identifier
            headless: Run browser in headless mode
            slow_mo_ms: Delay between browser operations

        Returns:
            BrowserContext
        """
        if run_id in self._contexts:
            return self._contexts[run_id]

        if self._playwright is None:
            await self.initialize()

        logger.info(f"[{run_id}] Launching browser (headless={headless})")
        browser = await self._playwright.chromium.launch(
            headless=headless,
            slow_mo=slow_mo_ms
        )
        self._browsers[run_id] = browser

        context = await browser.new_context(viewport=VIEWPORT)
        self._contexts[run_id] = context

        logger.info(f"Created browser context for run: {run_id}")
        return context

    async def get_page(
        self,
        run_id: str,
        headless: bool = True,
        slow_mo_ms: int = 0
    ) -> Page:
        """Get or create the single page used by a run."""
        if run_id in self._pages:
            return self._pages[run_id]

        context = await self.get_or_create_context(
            run_id,
            headless=headless,
            slow_mo_ms=slow_mo_ms
        )
        page = await context.new_page()
        self._pages[run_id] = page

        logger.info(f"Created page for run: {run_id}")
        return page

    async def close_context(self, run_id: str) -> None:
        """Close page, context and browser for a run."""
        for registry in (self._pages, self._contexts, self._browsers):
            resource = registry.pop(run_id, None)
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as e:
                logger.debug(f"[{run_id}] Error closing {type(resource).__name__}: {e}")

        logger.info(f"Closed browser context for run: {run_id}")

    async def close_all(self) -> None:
        """Close all browser contexts."""
        run_ids = set(self._contexts) | set(self._browsers) | set(self._pages)
        for run_id in run_ids:
            await self.close_context(run_id)

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None
            logger.info("Playwright stopped")


# Global browser manager instance
_browser_manager = BrowserManager()


def get_browser_manager() -> BrowserManager:
    """Get global browser manager instance."""
    return _browser_manager
