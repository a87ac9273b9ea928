"""
Tools → Match workflow.

Setup (login, company selection), discovery (Match* entries in the Tools
dropdown) and the fail-fast batch over every discovered entry, summarised
as a WorkflowReport.
"""

import logging
from datetime import datetime
from typing import List, Optional

from portal_qa.models.runs import RunState, WorkflowReport
from portal_qa.services.batch_runner import BatchAbortedError, BatchRunner
from portal_qa.services.browser_manager import BrowserManager
from portal_qa.services.login_executor import LoginError, LoginExecutor
from portal_qa.services.menu_discovery import MenuDiscovery
from portal_qa.services.modal_resolver import ModalProfile
from portal_qa.services.page_surface import PageSurface, PlaywrightPageSurface, WaitTimeoutError
from portal_qa.services.readiness_detector import ReadinessDetector, ScreenProfile
from portal_qa.services.run_store import RunStore
from portal_qa.services.tools_menu import MenuNotFoundError, ToolsMenu
from portal_qa.utils.config import Settings, require_credentials, settings as default_settings
from portal_qa.utils.events import EventLog, Stopwatch

logger = logging.getLogger(__name__)


def match_screen_profile(config: Settings) -> ScreenProfile:
    """Match screen markers with timeouts taken from settings."""
    return ScreenProfile(
        loading_timeout_ms=config.LOADING_INDICATOR_TIMEOUT_MS,
        modal=ModalProfile(
            detect_timeout_ms=config.MODAL_DETECT_TIMEOUT_MS,
            populate_timeout_ms=config.MODAL_POPULATE_TIMEOUT_MS,
            close_timeout_ms=config.MODAL_CLOSE_TIMEOUT_MS,
        ),
    )


class MatchWorkflow:
    """Runs the Tools → Match workflow on one page."""

    def __init__(
        self,
        surface: PageSurface,
        config: Optional[Settings] = None,
        events: Optional[EventLog] = None
    ):
        self.surface = surface
        self.config = config or default_settings
        self.events = events or EventLog()

        self.login = LoginExecutor(surface, self.config)
        self.menu = ToolsMenu(surface, self.config)
        self.discovery = MenuDiscovery(surface)
        self.detector = ReadinessDetector(
            surface,
            profile=match_screen_profile(self.config),
            events=self.events
        )
        self.runner = BatchRunner(
            surface,
            self.detector,
            navigator=self.menu.open_entry,
            return_home=self.menu.return_home,
            events=self.events
        )

    async def run(
        self,
        report: WorkflowReport,
        username: str,
        password: str,
        company: Optional[str] = None,
        prefix: Optional[str] = None,
        timeout_ms: Optional[int] = None
    ) -> WorkflowReport:
        """
        Execute setup, discovery and testing, filling in `report`.

        Failures end up in `report.status` and `report.error`.
        """
        prefix = prefix or self.config.MENU_PREFIX
        timeout_ms = timeout_ms or self.config.READINESS_TIMEOUT_MS
        artifacts: List[str] = []
        watch = Stopwatch()

        report.status = RunState.RUNNING
        report.started_at = datetime.utcnow()

        try:
            # Setup
            location = await self.login.login(username, password, company)
            self.events.emit("setup", "logged_in", duration_ms=watch.elapsed_ms, detail=location)

            # Discovery
            await self.menu.open()
            entries = await self.discovery.discover_entries(self.menu.container, prefix)
            report.entries = entries
            self.events.emit(
                "discovery",
                "found" if entries else "empty",
                duration_ms=watch.elapsed_ms,
                detail=f"{len(entries)} '{prefix}' entries"
            )
            if not entries:
                report.status = RunState.FAILED
                report.error = f"No '{prefix}' menu items found"
                return report

            # Testing
            batch = await self.runner.run_batch(entries, per_entry_timeout_ms=timeout_ms)
            report.batch = batch
            artifacts.extend(r.snapshot_path for r in batch.records if r.snapshot_path)

            if batch.passed:
                report.status = RunState.PASSED
            else:
                failed = batch.failed_record
                report.status = RunState.FAILED
                report.error = f"{failed.entry.label}: {failed.outcome.describe()}"

        except BatchAbortedError as e:
            report.batch = e.result
            report.status = RunState.ERROR
            report.error = str(e)
            if e.snapshot_path:
                artifacts.append(e.snapshot_path)
        except (LoginError, MenuNotFoundError, WaitTimeoutError) as e:
            logger.error(f"[{report.run_id}] Setup failed: {e}")
            snapshot = await self.surface.capture_diagnostic_snapshot("setup-error")
            if snapshot:
                artifacts.append(snapshot)
            report.status = RunState.ERROR
            report.error = str(e)
        except Exception as e:
            logger.error(f"[{report.run_id}] Workflow error: {e}", exc_info=True)
            report.status = RunState.ERROR
            report.error = f"{type(e).__name__}: {e}"
        finally:
            report.completed_at = datetime.utcnow()
            report.duration_ms = watch.elapsed_ms
            report.events = [event.to_dict() for event in self.events.events]
            report.artifacts = artifacts

        logger.info(f"[{report.run_id}] Workflow finished: {report.status.value}")
        return report


async def run_match_workflow(
    run_id: str,
    store: RunStore,
    browser_manager: BrowserManager,
    config: Optional[Settings] = None,
    company: Optional[str] = None,
    prefix: Optional[str] = None,
    timeout_ms: Optional[int] = None,
    headless: Optional[bool] = None,
    events: Optional[EventLog] = None
) -> WorkflowReport:
    """
    Run the workflow in a fresh browser session and persist its report.

    Raises:
        ValueError: If portal credentials are not configured
    """
    config = config or default_settings
    username, password = require_credentials(config)

    report = store.get_run(run_id) or store.create_run(
        run_id,
        base_url=config.PORTAL_BASE_URL,
        environment=config.ENVIRONMENT,
        company=company or config.PORTAL_COMPANY
    )

    page = await browser_manager.get_page(
        run_id,
        headless=config.HEADLESS if headless is None else headless,
        slow_mo_ms=config.SLOW_MO_MS
    )
    surface = PlaywrightPageSurface(
        page,
        snapshot_dir=store.screenshots_path(run_id),
        navigation_timeout_ms=config.NAVIGATION_TIMEOUT_MS
    )

    try:
        workflow = MatchWorkflow(surface, config=config, events=events)
        report = await workflow.run(
            report,
            username,
            password,
            company=company,
            prefix=prefix,
            timeout_ms=timeout_ms
        )
    finally:
        await browser_manager.close_context(run_id)
        store.save_report(report)

    return report
