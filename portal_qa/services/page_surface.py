"""
Page-automation surface.

The readiness and batch services only talk to a page through this
protocol. `PlaywrightPageSurface` adapts a Playwright `Page`; tests supply
an in-memory implementation.
"""

import logging
import re
from pathlib import Path
from typing import Any, List, Optional, Protocol

from playwright.async_api import Page, TimeoutError as PlaywrightTimeoutError

logger = logging.getLogger(__name__)


class WaitTimeoutError(Exception):
    """A bounded wait elapsed before its condition held."""

    def __init__(self, locator: str, timeout_ms: int):
        self.locator = locator
        self.timeout_ms = timeout_ms
        super().__init__(f"Timed out after {timeout_ms}ms waiting for '{locator}'")


class PageSurface(Protocol):
    """Operations the core needs from a browser page."""

    async def navigate(self, target: str) -> None: ...

    async def click(self, locator: str) -> None: ...

    async def fill(self, locator: str, value: str) -> None: ...

    async def press(self, locator: str, key: str) -> None: ...

    async def query(self, locator: str) -> Optional[Any]: ...

    async def query_all(self, locator: str) -> List[Any]: ...

    async def wait_for_existence(self, locator: str, timeout_ms: int) -> Any: ...

    async def is_visible(self, element: Any) -> bool: ...

    async def current_location(self) -> str: ...

    async def wait_for_settled(self, timeout_ms: int) -> None: ...

    async def capture_diagnostic_snapshot(self, label: str) -> Optional[str]: ...


def snapshot_filename(label: str) -> str:
    """Turn a caller label into a safe PNG filename."""
    safe = re.sub(r"[^A-Za-z0-9._-]+", "-", label).strip("-") or "snapshot"
    return safe if safe.endswith(".png") else f"{safe}.png"


class PlaywrightPageSurface:
    """`PageSurface` backed by a Playwright page."""

    def __init__(
        self,
        page: Page,
        snapshot_dir: Optional[Path] = None,
        navigation_timeout_ms: int = 30000
    ):
        self.page = page
        self.snapshot_dir = Path(snapshot_dir) if snapshot_dir else Path(".")
        self.navigation_timeout_ms = navigation_timeout_ms

    async def navigate(self, target: str) -> None:
        logger.debug(f"Navigating to {target}")
        await self.page.goto(target, timeout=self.navigation_timeout_ms)
        # Long-polling pages never go network-idle; the load itself succeeded
        try:
            await self.wait_for_settled(self.navigation_timeout_ms)
        except WaitTimeoutError:
            logger.warning(f"Network did not go idle after navigating to {target}")

    async def click(self, locator: str) -> None:
        await self.page.click(locator)

    async def fill(self, locator: str, value: str) -> None:
        await self.page.fill(locator, value)

    async def press(self, locator: str, key: str) -> None:
        await self.page.press(locator, key)

    async def query(self, locator: str) -> Optional[Any]:
        return await self.page.query_selector(locator)

    async def query_all(self, locator: str) -> List[Any]:
        return await self.page.query_selector_all(locator)

    async def wait_for_existence(self, locator: str, timeout_ms: int) -> Any:
        try:
            return await self.page.wait_for_selector(
                locator,
                state="attached",
                timeout=timeout_ms
            )
        except PlaywrightTimeoutError as e:
            raise WaitTimeoutError(locator, timeout_ms) from e

    async def is_visible(self, element: Any) -> bool:
        if element is None:
            return False
        return await element.is_visible()

    async def current_location(self) -> str:
        return self.page.url

    async def wait_for_settled(self, timeout_ms: int) -> None:
        try:
            await self.page.wait_for_load_state("networkidle", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise WaitTimeoutError("networkidle", timeout_ms) from e

    async def capture_diagnostic_snapshot(self, label: str) -> Optional[str]:
        """Save a full-page screenshot; returns its path or None if capture failed."""
        path = self.snapshot_dir / snapshot_filename(label)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await self.page.screenshot(path=str(path), full_page=True)
        except Exception as e:
            logger.warning(f"Could not capture snapshot '{label}': {e}")
            return None

        logger.info(f"Screenshot saved: {path}")
        return str(path)
