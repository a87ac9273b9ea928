"""Tests for the Playwright page adapter, using a stand-in Playwright page."""

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from portal_qa.services.page_surface import PlaywrightPageSurface, WaitTimeoutError, snapshot_filename


class StubPlaywrightPage:
    """Records Playwright calls; `idle` controls whether networkidle is reached."""

    def __init__(self, idle=True, present=(), screenshot_error=None):
        self.url = "about:blank"
        self.idle = idle
        self.present = set(present)
        self.screenshot_error = screenshot_error
        self.screenshots = []

    async def goto(self, url, timeout=None):
        self.url = url

    async def wait_for_load_state(self, state, timeout=None):
        if not self.idle:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")

    async def wait_for_selector(self, selector, state=None, timeout=None):
        if selector not in self.present:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")
        return selector

    async def screenshot(self, path=None, full_page=False):
        if self.screenshot_error:
            raise self.screenshot_error
        self.screenshots.append(path)


class TestPlaywrightPageSurface:
    """Tests for PlaywrightPageSurface."""

    async def test_navigate_tolerates_long_polling_page(self):
        """A page that never goes network-idle still counts as navigated."""
        page = StubPlaywrightPage(idle=False)
        surface = PlaywrightPageSurface(page, navigation_timeout_ms=50)

        await surface.navigate("https://portal.test")

        assert await surface.current_location() == "https://portal.test"

    async def test_settle_wait_reports_timeout(self):
        """An explicit settle wait still surfaces the timeout to the caller."""
        surface = PlaywrightPageSurface(StubPlaywrightPage(idle=False))

        with pytest.raises(WaitTimeoutError):
            await surface.wait_for_settled(50)

    async def test_existence_wait_maps_timeout(self):
        surface = PlaywrightPageSurface(StubPlaywrightPage(present={"#reactTable"}))

        assert await surface.wait_for_existence("#reactTable", 100) == "#reactTable"
        with pytest.raises(WaitTimeoutError) as exc_info:
            await surface.wait_for_existence("#missing", 100)
        assert exc_info.value.timeout_ms == 100

    async def test_snapshot_path_under_snapshot_dir(self, tmp_path):
        page = StubPlaywrightPage()
        surface = PlaywrightPageSurface(page, snapshot_dir=tmp_path / "screenshots")

        path = await surface.capture_diagnostic_snapshot("entry-failure-2")

        assert path == str(tmp_path / "screenshots" / "entry-failure-2.png")
        assert page.screenshots == [path]

    async def test_snapshot_failure_returns_none(self, tmp_path):
        """Snapshot capture is best-effort."""
        page = StubPlaywrightPage(screenshot_error=RuntimeError("target closed"))
        surface = PlaywrightPageSurface(page, snapshot_dir=tmp_path)

        assert await surface.capture_diagnostic_snapshot("setup-error") is None

    def test_snapshot_filename_is_safe(self):
        assert snapshot_filename("entry error/1") == "entry-error-1.png"
