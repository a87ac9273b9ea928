"""Login executor for the portal's username/password form and company selection."""

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from portal_qa.services.element_probe import ElementProbe
from portal_qa.services.page_surface import PageSurface, WaitTimeoutError
from portal_qa.utils.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class LoginError(Exception):
    """Login or company selection did not reach the main application page."""
    pass


@dataclass
class LoginResult:
    """Result of a single login attempt."""
    status: str  # "success" | "failure"
    location: str
    error_message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == "success"


def _normalize(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.netloc.lower()}{parsed.path.rstrip('/')}"


class LoginExecutor:
    """
    Service for logging into the portal.

    After a successful login the portal lands on one of two pages:
    - the company selection page, when no company is preselected
    - the main application page otherwise
    """

    USERNAME_SELECTOR = "#user_id"
    PASSWORD_SELECTOR = "#password"
    SUBMIT_SELECTOR = "button[type='submit']"
    ERROR_SELECTORS = [".error-message", ".alert-danger", "[role='alert']"]

    # Company picker varies between deployments
    COMPANY_INPUT_SELECTORS = [
        "input[name='companies']",
        "input[placeholder*='compan']",
        "#companies",
        "[aria-label*='compan']",
        "input[type='text']",
        "input[type='search']",
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

    def is_company_selection(self, location: str) -> bool:
        return _normalize(location) == _normalize(self.config.company_url)

    def is_home(self, location: str) -> bool:
        return _normalize(location) == _normalize(self.config.home_url)

    def is_logged_in_location(self, location: str) -> bool:
        """Logged in iff the portal moved to company selection or the main page."""
        return self.is_company_selection(location) or self.is_home(location)

    async def open_login_page(self) -> None:
        await self.surface.navigate(self.config.PORTAL_BASE_URL)

    async def attempt_login(self, username: str, password: str) -> LoginResult:
        """
        Fill the login form and report where the portal went.

        Args:
            username: Portal username
            password: Portal password

        Returns:
            LoginResult with status "success" or "failure"
        """
        await self.open_login_page()
        logger.info(f"Attempting login from URL: {await self.surface.current_location()}")

        await self.surface.fill(self.USERNAME_SELECTOR, username)
        await self.surface.fill(self.PASSWORD_SELECTOR, password)
        await self.surface.click(self.SUBMIT_SELECTOR)

        try:
            await self.surface.wait_for_settled(self.config.LOGIN_TIMEOUT_MS)
        except WaitTimeoutError:
            logger.warning(f"Page did not settle within {self.config.LOGIN_TIMEOUT_MS}ms after login")

        location = await self.surface.current_location()
        logger.info(f"URL after login: {location}")

        if self.is_logged_in_location(location):
            return LoginResult(status="success", location=location)

        error_message = await self._check_for_errors()
        if error_message:
            logger.warning(f"Login error detected: {error_message}")
        return LoginResult(status="failure", location=location, error_message=error_message)

    async def select_company(self, company: str) -> str:
        """
        Enter a company name on the selection page and submit it with Enter.

        Returns:
            Location after the selection settled

        Raises:
            LoginError: If no companies input can be found
        """
        match = await self.probe.find_first(self.COMPANY_INPUT_SELECTORS)
        if match is None:
            await self.surface.capture_diagnostic_snapshot("company-selection-page")
            raise LoginError("Companies input field not found")

        logger.info(f"Selecting company '{company}' using: {match.locator}")
        await match.element.fill(company)
        await match.element.press("Enter")

        try:
            await self.surface.wait_for_settled(self.config.LOGIN_TIMEOUT_MS)
        except WaitTimeoutError:
            logger.warning("Page did not settle after company selection")

        return await self.surface.current_location()

    async def login(self, username: str, password: str, company: Optional[str] = None) -> str:
        """
        Log in and, when asked, pick a company, ending on the main page.

        Returns:
            Location of the main application page

        Raises:
            LoginError: If any step does not reach the expected page
        """
        if not username or not password:
            raise LoginError("Username and password are required")

        result = await self.attempt_login(username, password)
        if not result.success:
            raise LoginError(
                f"Login failed: {result.error_message or 'still on ' + result.location}"
            )

        location = result.location
        if self.is_company_selection(location):
            location = await self.select_company(company or self.config.PORTAL_COMPANY)
            logger.info(f"Company selected. URL: {location}")

        if not self.is_home(location):
            raise LoginError(f"Expected main application page, got {location}")

        logger.info("On main application page")
        return location

    async def _check_for_errors(self) -> Optional[str]:
        """Return visible error banner text, if any."""
        match = await self.probe.find_first(self.ERROR_SELECTORS)
        if match is None:
            return None
        text = await match.element.text_content()
        return (text or "").strip()[:200] or None
