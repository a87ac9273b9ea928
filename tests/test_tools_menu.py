"""Tests for Tools dropdown navigation."""

import pytest

from conftest import FakeElement
from fake_portal import FakePortal
from portal_qa.models.match import MenuEntry
from portal_qa.services.tools_menu import MenuNotFoundError, ToolsMenu

MENU = [("Match Rules", "/match/rules"), ("Match Queue", "/match/queue")]


@pytest.fixture
def portal(page, portal_settings):
    portal = FakePortal(page, portal_settings, menu=MENU)
    page.location = portal_settings.home_url
    portal.show_home()
    return portal


class TestToolsMenu:
    """Tests for ToolsMenu."""

    async def test_open_shows_dropdown(self, page, portal, portal_settings):
        menu = ToolsMenu(page, portal_settings)

        assert not await menu.is_open()
        await menu.open()
        assert await menu.is_open()

    async def test_open_without_tools_link(self, page, portal_settings):
        """No Tools link at all is a MenuNotFoundError."""
        with pytest.raises(MenuNotFoundError, match="not found"):
            await ToolsMenu(page, portal_settings).open()

    async def test_dropdown_never_showing(self, page, portal_settings):
        """Clicking Tools without the dropdown appearing fails after the open timeout."""
        page.add("a:has-text('Tools')", FakeElement(text="Tools"))

        with pytest.raises(MenuNotFoundError, match="not visible"):
            await ToolsMenu(page, portal_settings).open()

    def test_entry_locator_targets_destination(self, page, portal_settings):
        menu = ToolsMenu(page, portal_settings)
        entry = MenuEntry(label="Match Rules", destination="/match/rules")

        assert menu.entry_locator(entry) == ".dropdown-menu a[href='/match/rules']"

    async def test_open_entry_reopens_closed_menu(self, page, portal, portal_settings):
        """Opening an entry from the main page opens the dropdown first."""
        menu = ToolsMenu(page, portal_settings)

        await menu.open_entry(MenuEntry(label="Match Queue", destination="/match/queue"))

        assert page.location == "https://portal.test/match/queue"
        assert page.clicked == [".dropdown-menu a[href='/match/queue']"]

    async def test_open_entry_tolerates_busy_network(self, page, portal, portal_settings):
        """A page that never goes network-idle is not an error here."""
        page.settle_times_out = True
        menu = ToolsMenu(page, portal_settings)

        await menu.open_entry(MenuEntry(label="Match Rules", destination="/match/rules"))

        assert page.location == "https://portal.test/match/rules"

    async def test_return_home_navigates_directly(self, page, portal, portal_settings):
        page.location = "https://portal.test/match/rules"

        await ToolsMenu(page, portal_settings).return_home()

        assert page.history == [portal_settings.home_url]
