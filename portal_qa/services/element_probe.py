"""Locator fallback: first matching candidate in priority order."""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from portal_qa.services.page_surface import PageSurface

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_MS = 100


@dataclass
class ProbeMatch:
    """A candidate locator that resolved to an element."""
    locator: str
    element: Any


class ElementProbe:
    """
    Tries candidate locators most-specific-first and stops at the first hit.

    A missing candidate, or one whose query fails, is skipped; only
    exhausting the list is a negative result.
    """

    def __init__(self, surface: PageSurface, poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS):
        self.surface = surface
        self.poll_interval_ms = poll_interval_ms

    async def find_first(
        self,
        candidates: Sequence[str],
        require_visible: bool = True
    ) -> Optional[ProbeMatch]:
        """
        Return the first candidate that resolves to an (optionally visible) element.

        Args:
            candidates: Locators in priority order
            require_visible: Skip elements that exist but are hidden

        Returns:
            ProbeMatch, or None when no candidate matched
        """
        for locator in candidates:
            try:
                element = await self.surface.query(locator)
                if element is None:
                    continue
                if require_visible and not await self.surface.is_visible(element):
                    continue
            except Exception as e:
                logger.debug(f"Probe candidate {locator} failed: {e}")
                continue

            logger.debug(f"Probe matched: {locator}")
            return ProbeMatch(locator=locator, element=element)

        return None

    async def wait_for_first(
        self,
        candidates: Sequence[str],
        timeout_ms: int,
        require_visible: bool = True
    ) -> Optional[ProbeMatch]:
        """Poll `find_first` until a candidate matches or the timeout elapses."""
        deadline = time.monotonic() + timeout_ms / 1000
        while True:
            match = await self.find_first(candidates, require_visible=require_visible)
            if match is not None or time.monotonic() >= deadline:
                return match
            await asyncio.sleep(self.poll_interval_ms / 1000)

    async def wait_for_absence(self, locator: str, timeout_ms: int) -> bool:
        """
        Poll until `locator` no longer resolves to a visible element.

        Returns:
            True if it went away within the timeout
        """
        deadline = time.monotonic() + timeout_ms / 1000
        while True:
            match = await self.find_first([locator], require_visible=True)
            if match is None:
                return True
            if time.monotonic() >= deadline:
                return False
            await asyncio.sleep(self.poll_interval_ms / 1000)
