"""
Screen readiness detection for Match screens.

The target screens load data with unpredictable latency and sometimes
interpose a "Select Project" modal (first visit vs. repeat visit), so a
single fixed wait is unreliable. Readiness is decided in three linear
stages:

1. loading-indicator (optional): wait briefly for the transient loading
   text. Not seeing it is fine; it may never show or vanish too fast.
2. modal: resolve the selection modal if it appears.
3. final-signal: wait for the ready marker (#reactTable) to exist, then
   require it to be visible.

Any fault inside a stage becomes `Failed(reason)`; the detector returns an
outcome for the steady-state path instead of raising.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from portal_qa.models.match import ModalResolution, ReadinessOutcome, ReadinessStage
from portal_qa.services.element_probe import ElementProbe
from portal_qa.services.modal_resolver import ModalProfile, ModalResolver
from portal_qa.services.page_surface import PageSurface, WaitTimeoutError
from portal_qa.utils.events import EventLog, Stopwatch

logger = logging.getLogger(__name__)

DEFAULT_READINESS_TIMEOUT_MS = 60000


@dataclass
class ScreenProfile:
    """Markers that describe when a screen is usable."""
    ready_marker: str = "#reactTable"
    loading_marker: Optional[str] = "text=/loading large data sets/i"
    loading_timeout_ms: int = 5000
    modal: Optional[ModalProfile] = field(default_factory=ModalProfile)


MATCH_SCREEN = ScreenProfile()


class ReadinessDetector:
    """Decides whether the current screen finished loading."""

    def __init__(
        self,
        surface: PageSurface,
        profile: Optional[ScreenProfile] = None,
        events: Optional[EventLog] = None
    ):
        self.surface = surface
        self.profile = profile or MATCH_SCREEN
        self.events = events or EventLog()
        self.probe = ElementProbe(surface)

    async def detect_readiness(
        self,
        timeout_ms: int = DEFAULT_READINESS_TIMEOUT_MS,
        entry: Optional[str] = None
    ) -> ReadinessOutcome:
        """
        Run the loading-indicator, modal and final-signal stages.

        Args:
            timeout_ms: Budget for the ready marker to appear
            entry: Label of the menu entry being checked, for events

        Returns:
            ReadinessOutcome: Ready, TimedOut(final-signal) or Failed(reason)
        """
        watch = Stopwatch()
        stage = ReadinessStage.LOADING_INDICATOR
        modal = ModalResolution.absent()

        try:
            await self._wait_for_loading_indicator(entry)

            stage = ReadinessStage.MODAL
            modal = await self._resolve_modal(entry)

            stage = ReadinessStage.FINAL_SIGNAL
            return await self._wait_for_ready_marker(timeout_ms, modal, watch, entry)

        except Exception as e:
            logger.error(f"Error during page load ({stage.value}): {e}", exc_info=True)
            outcome = ReadinessOutcome.failed(
                reason=f"{type(e).__name__}: {e}",
                stage=stage,
                modal=modal,
                duration_ms=watch.elapsed_ms
            )
            self.events.emit(
                stage.value,
                "failed",
                duration_ms=outcome.duration_ms,
                detail=outcome.reason,
                entry=entry,
                level=logging.ERROR
            )
            return outcome

    async def _wait_for_loading_indicator(self, entry: Optional[str]) -> None:
        marker = self.profile.loading_marker
        if not marker:
            return

        watch = Stopwatch()
        try:
            await self.surface.wait_for_existence(marker, self.profile.loading_timeout_ms)
        except WaitTimeoutError:
            self.events.emit(
                ReadinessStage.LOADING_INDICATOR.value,
                "not_observed",
                duration_ms=watch.elapsed_ms,
                entry=entry,
                level=logging.DEBUG
            )
            return

        self.events.emit(
            ReadinessStage.LOADING_INDICATOR.value,
            "observed",
            duration_ms=watch.elapsed_ms,
            entry=entry
        )

    async def _resolve_modal(self, entry: Optional[str]) -> ModalResolution:
        if self.profile.modal is None:
            return ModalResolution.absent()

        resolver = ModalResolver(
            self.surface,
            profile=self.profile.modal,
            probe=self.probe,
            events=self.events
        )
        modal = await resolver.resolve()
        if modal.resolved:
            logger.info("Handled selection modal")
        elif modal.unhandled:
            logger.warning("Selection modal left open; continuing to ready marker")
        return modal

    async def _wait_for_ready_marker(
        self,
        timeout_ms: int,
        modal: ModalResolution,
        watch: Stopwatch,
        entry: Optional[str]
    ) -> ReadinessOutcome:
        marker = self.profile.ready_marker
        stage = ReadinessStage.FINAL_SIGNAL
        logger.info(f"Waiting for {marker} (timeout: {timeout_ms}ms)")

        try:
            element = await self.surface.wait_for_existence(marker, timeout_ms)
        except WaitTimeoutError:
            outcome = ReadinessOutcome.timed_out(
                stage,
                reason=f"{marker} did not appear within {timeout_ms}ms",
                modal=modal,
                duration_ms=watch.elapsed_ms
            )
            self.events.emit(
                stage.value,
                "timed_out",
                duration_ms=outcome.duration_ms,
                detail=outcome.reason,
                entry=entry,
                level=logging.ERROR
            )
            return outcome

        if not await self.surface.is_visible(element):
            outcome = ReadinessOutcome.failed(
                reason=f"{marker} found but not visible",
                stage=stage,
                modal=modal,
                duration_ms=watch.elapsed_ms
            )
            self.events.emit(
                stage.value,
                "not_visible",
                duration_ms=outcome.duration_ms,
                detail=outcome.reason,
                entry=entry,
                level=logging.ERROR
            )
            return outcome

        outcome = ReadinessOutcome.ready(modal=modal, duration_ms=watch.elapsed_ms)
        self.events.emit(stage.value, "ready", duration_ms=outcome.duration_ms, entry=entry)
        return outcome
