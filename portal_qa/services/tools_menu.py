"""Navigation through the portal's Tools dropdown."""

import logging
from typing import Optional

from portal_qa.models.match import MenuEntry
from portal_qa.services.element_probe import ElementProbe
from portal_qa.services.page_surface import PageSurface, WaitTimeoutError
from portal_qa.utils.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class MenuNotFoundError(Exception):
    """The Tools menu could not be opened."""
    pass


class ToolsMenu:
    """Opens the Tools dropdown and follows its entries."""

    TOOLS_LINK_SELECTORS = [
        "text=/^Tools$/i",
        "a:has-text('Tools')",
        "button:has-text('Tools')",
        "[aria-label*='Tools']",
        ".menu-item:has-text('Tools')",
    ]

    def __init__(
        self,
        surface: PageSurface,
        config: Optional[Settings] = None,
        probe: Optional[ElementProbe] = None
    ):
        self.surface = surface
        self.config = config or default_settings
        self.probe = probe or ElementProbe(surface)

    @property
    def container(self) -> str:
        return self.config.MENU_CONTAINER

    async def is_open(self) -> bool:
        match = await self.probe.find_first([self.container])
        return match is not None

    async def open(self) -> None:
        """
        Click the Tools link and wait for the dropdown to become visible.

        Raises:
            MenuNotFoundError: If no Tools link exists or the dropdown never shows
        """
        link = await self.probe.find_first(self.TOOLS_LINK_SELECTORS)
        if link is None:
            raise MenuNotFoundError("Tools menu link not found")

        await link.element.click()
        logger.info(f"Clicked Tools menu: {link.locator}")

        opened = await self.probe.wait_for_first(
            [self.container],
            timeout_ms=self.config.MENU_OPEN_TIMEOUT_MS
        )
        if opened is None:
            raise MenuNotFoundError(
                f"{self.container} not visible {self.config.MENU_OPEN_TIMEOUT_MS}ms after opening Tools"
            )

    def entry_locator(self, entry: MenuEntry) -> str:
        return f"{self.container} a[href='{entry.destination}']"

    async def open_entry(self, entry: MenuEntry) -> None:
        """Click an entry by destination, reopening the dropdown if needed."""
        if not await self.is_open():
            await self.open()

        await self.surface.click(self.entry_locator(entry))
        try:
            await self.surface.wait_for_settled(self.config.NAVIGATION_TIMEOUT_MS)
        except WaitTimeoutError:
            logger.warning(f"Network did not go idle after opening '{entry.label}'")

    async def return_home(self) -> None:
        """Go back to the main page by direct navigation."""
        await self.surface.navigate(self.config.home_url)
