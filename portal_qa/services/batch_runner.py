"""
Fail-fast batch over discovered menu entries.

Each entry is opened, checked for readiness, and on success the page goes
back to the fixed home location before the next entry. In-page menu
traversal from arbitrary sub-pages is unreliable on this portal, so the
runner never uses it to get back. The first entry that is not Ready gets
a diagnostic snapshot and ends the batch.
"""

import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from portal_qa.models.match import BatchRecord, BatchResult, MenuEntry
from portal_qa.services.page_surface import PageSurface
from portal_qa.services.readiness_detector import DEFAULT_READINESS_TIMEOUT_MS, ReadinessDetector
from portal_qa.utils.events import EventLog, Stopwatch

logger = logging.getLogger(__name__)

EntryNavigator = Callable[[MenuEntry], Awaitable[None]]
HomeNavigator = Callable[[], Awaitable[None]]


class BatchAbortedError(Exception):
    """Navigation failed mid-batch; carries the partial result."""

    def __init__(
        self,
        entry: MenuEntry,
        result: BatchResult,
        cause: BaseException,
        snapshot_path: Optional[str] = None
    ):
        self.entry = entry
        self.result = result
        self.cause = cause
        self.snapshot_path = snapshot_path
        super().__init__(f"Error testing '{entry.label}': {cause}")


class BatchRunner:
    """Runs readiness checks over menu entries, stopping at the first failure."""

    def __init__(
        self,
        surface: PageSurface,
        detector: ReadinessDetector,
        navigator: EntryNavigator,
        return_home: HomeNavigator,
        events: Optional[EventLog] = None
    ):
        self.surface = surface
        self.detector = detector
        self.navigator = navigator
        self.return_home = return_home
        self.events = events or detector.events

    async def run_batch(
        self,
        entries: Sequence[MenuEntry],
        per_entry_timeout_ms: int = DEFAULT_READINESS_TIMEOUT_MS
    ) -> BatchResult:
        """
        Open and validate each entry in order.

        Args:
            entries: Entries in discovery order
            per_entry_timeout_ms: Ready marker budget for each entry

        Returns:
            BatchResult with one record per attempted entry

        Raises:
            BatchAbortedError: If navigating to an entry or back home fails
        """
        total = len(entries)
        records: List[BatchRecord] = []

        for index, entry in enumerate(entries):
            position = index + 1
            logger.info(f"[{position}/{total}] Testing: {entry.label} ({entry.destination})")
            watch = Stopwatch()

            try:
                await self.navigator(entry)
            except Exception as e:
                await self._abort(entry, position, records, total, e, "navigation")

            logger.info(f"Navigated to: {await self.surface.current_location()}")

            outcome = await self.detector.detect_readiness(
                timeout_ms=per_entry_timeout_ms,
                entry=entry.label
            )

            if not outcome.is_ready:
                snapshot = await self._snapshot(f"entry-failure-{position}")
                records.append(BatchRecord(entry=entry, outcome=outcome, snapshot_path=snapshot))
                self.events.emit(
                    "entry",
                    "failed",
                    duration_ms=watch.elapsed_ms,
                    detail=outcome.describe(),
                    entry=entry.label,
                    level=logging.ERROR
                )
                logger.error(
                    f"FAILED: {entry.label} - {outcome.describe()}; "
                    f"skipping {total - position} remaining entries"
                )
                break

            records.append(BatchRecord(entry=entry, outcome=outcome))
            self.events.emit("entry", "ready", duration_ms=watch.elapsed_ms, entry=entry.label)
            logger.info(f"SUCCESS: {entry.label} loaded correctly")

            if position < total:
                try:
                    await self.return_home()
                except Exception as e:
                    await self._abort(entry, position, records, total, e, "return_home")

        result = BatchResult(total_entries=total, records=records)
        logger.info(
            f"Batch finished: {result.ready_count}/{total} entries ready"
            + ("" if result.passed else " (halted)")
        )
        return result

    async def _abort(
        self,
        entry: MenuEntry,
        position: int,
        records: List[BatchRecord],
        total: int,
        cause: Exception,
        step: str
    ) -> None:
        snapshot = await self._snapshot(f"entry-error-{position}")
        self.events.emit(
            step,
            "error",
            detail=str(cause),
            entry=entry.label,
            level=logging.ERROR
        )
        logger.error(f"Error testing '{entry.label}' during {step}: {cause}")
        raise BatchAbortedError(
            entry,
            BatchResult(total_entries=total, records=list(records)),
            cause,
            snapshot_path=snapshot
        ) from cause

    async def _snapshot(self, label: str) -> Optional[str]:
        try:
            return await self.surface.capture_diagnostic_snapshot(label)
        except Exception as e:
            logger.warning(f"Snapshot '{label}' failed: {e}")
            return None
