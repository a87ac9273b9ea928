"""Detection and dismissal of the optional "Select Project" modal."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from portal_qa.models.match import ModalResolution
from portal_qa.services.element_probe import ElementProbe
from portal_qa.services.page_surface import PageSurface
from portal_qa.utils.events import EventLog, Stopwatch

logger = logging.getLogger(__name__)


@dataclass
class ModalProfile:
    """Locators and timeouts describing one selection modal."""
    marker: str = "text=/Select Project/i"
    row_candidates: List[str] = field(default_factory=lambda: [
        "table tbody tr:first-child",
        ".modal table tbody tr:first-child",
        "[role='dialog'] table tbody tr:first-child",
        "table tr:first-child td:first-child",
    ])
    submit_candidates: List[str] = field(default_factory=lambda: [
        "button[type='submit']",
        "button:has-text('Submit')",
        "button:has-text('OK')",
        "button:has-text('Select')",
        ".modal button[type='submit']",
    ])
    detect_timeout_ms: int = 3000
    populate_timeout_ms: int = 1000
    close_timeout_ms: int = 2000


class ModalResolver:
    """Drives an optional selection modal to completion."""

    def __init__(
        self,
        surface: PageSurface,
        profile: Optional[ModalProfile] = None,
        probe: Optional[ElementProbe] = None,
        events: Optional[EventLog] = None
    ):
        self.surface = surface
        self.profile = profile or ModalProfile()
        self.probe = probe or ElementProbe(surface)
        self.events = events or EventLog()

    async def resolve(self) -> ModalResolution:
        """
        Wait briefly for the modal to become visible; if it does, select the first row and submit.

        Absence is the normal case. A modal whose submit control cannot be
        found is reported as present but unresolved, never raised.
        """
        profile = self.profile
        watch = Stopwatch()

        # A marker left hidden in the DOM is not an open modal
        marker = await self.probe.wait_for_first(
            [profile.marker],
            timeout_ms=profile.detect_timeout_ms
        )
        if marker is None:
            return ModalResolution.absent()

        logger.info("Selection modal detected")

        # The row list has no loaded signal of its own; the bounded wait is the settle time
        row = await self.probe.wait_for_first(
            profile.row_candidates,
            timeout_ms=profile.populate_timeout_ms
        )
        row_locator = None
        if row is not None:
            await row.element.click()
            row_locator = row.locator
            logger.info(f"Selected first modal item: {row.locator}")
        else:
            logger.info("No selectable item found in modal")

        submit = await self.probe.find_first(profile.submit_candidates)
        if submit is None:
            logger.warning("Modal detected but couldn't find submit button")
            self.events.emit(
                "modal",
                "unresolved",
                duration_ms=watch.elapsed_ms,
                detail="no submit control",
                level=logging.WARNING
            )
            return ModalResolution(present=True, resolved=False, row_locator=row_locator)

        await submit.element.click()
        logger.info(f"Clicked modal submit: {submit.locator}")

        closed = await self.probe.wait_for_absence(profile.marker, profile.close_timeout_ms)
        if not closed:
            logger.warning(
                f"Modal still visible {profile.close_timeout_ms}ms after submit"
            )

        self.events.emit("modal", "resolved", duration_ms=watch.elapsed_ms, detail=submit.locator)
        return ModalResolution(
            present=True,
            resolved=True,
            row_locator=row_locator,
            submit_locator=submit.locator
        )
