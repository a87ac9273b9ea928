"""Shared fixtures: an in-memory page surface standing in for a browser."""

from typing import Callable, Dict, List, Optional

import pytest

from portal_qa.services.modal_resolver import ModalProfile
from portal_qa.services.page_surface import WaitTimeoutError
from portal_qa.services.readiness_detector import ScreenProfile
from portal_qa.utils.config import Settings


class FakeElement:
    """Element handle with just enough behaviour for the services."""

    def __init__(
        self,
        text: str = "",
        attrs: Optional[Dict[str, str]] = None,
        visible: bool = True,
        on_click: Optional[Callable[[], None]] = None,
        on_press: Optional[Callable[[str], None]] = None
    ):
        self.text = text
        self.attrs = attrs or {}
        self.visible = visible
        self.on_click = on_click
        self.on_press = on_press
        self.clicks = 0
        self.value = None
        self.pressed: List[str] = []

    async def click(self):
        self.clicks += 1
        if self.on_click:
            self.on_click()

    async def is_visible(self):
        return self.visible

    async def text_content(self):
        return self.text

    async def get_attribute(self, name):
        return self.attrs.get(name)

    async def fill(self, value):
        self.value = value

    async def press(self, key):
        self.pressed.append(key)
        if self.on_press:
            self.on_press(key)


def link(text: str, href: Optional[str] = None, **kwargs) -> FakeElement:
    attrs = {"href": href} if href is not None else {}
    return FakeElement(text=text, attrs=attrs, **kwargs)


class FakePage:
    """
    In-memory page surface.

    `elements` maps a locator to the elements it resolves to. Waits never
    sleep: a locator that is missing when waited on times out at once.
    `routes` maps a navigation target to a callback that sets up the page.
    """

    def __init__(self, location: str = "about:blank"):
        self.location = location
        self.elements: Dict[str, List[FakeElement]] = {}
        self.routes: Dict[str, Callable[[], None]] = {}
        self.errors: Dict[str, Exception] = {}
        self.history: List[str] = []
        self.clicked: List[str] = []
        self.filled: Dict[str, str] = {}
        self.snapshots: List[str] = []
        self.settle_times_out = False

    def add(self, locator: str, *elements: FakeElement) -> FakeElement:
        self.elements.setdefault(locator, []).extend(elements)
        return elements[0]

    def remove(self, locator: str) -> None:
        self.elements.pop(locator, None)

    def show(self, elements: Dict[str, List[FakeElement]], location: Optional[str] = None) -> None:
        self.elements = dict(elements)
        if location is not None:
            self.location = location

    def _raise_if_broken(self, locator: str) -> None:
        if locator in self.errors:
            raise self.errors[locator]

    async def navigate(self, target: str) -> None:
        self._raise_if_broken(target)
        self.history.append(target)
        self.location = target
        if target in self.routes:
            self.routes[target]()

    async def click(self, locator: str) -> None:
        self._raise_if_broken(locator)
        found = self.elements.get(locator)
        if not found:
            raise WaitTimeoutError(locator, 0)
        self.clicked.append(locator)
        await found[0].click()

    async def fill(self, locator: str, value: str) -> None:
        self.filled[locator] = value

    async def press(self, locator: str, key: str) -> None:
        found = self.elements.get(locator)
        if found:
            await found[0].press(key)

    async def query(self, locator: str):
        self._raise_if_broken(locator)
        found = self.elements.get(locator)
        return found[0] if found else None

    async def query_all(self, locator: str):
        self._raise_if_broken(locator)
        return list(self.elements.get(locator, []))

    async def wait_for_existence(self, locator: str, timeout_ms: int):
        self._raise_if_broken(locator)
        found = self.elements.get(locator)
        if not found:
            raise WaitTimeoutError(locator, timeout_ms)
        return found[0]

    async def is_visible(self, element) -> bool:
        if element is None:
            return False
        return await element.is_visible()

    async def current_location(self) -> str:
        return self.location

    async def wait_for_settled(self, timeout_ms: int) -> None:
        if self.settle_times_out:
            raise WaitTimeoutError("networkidle", timeout_ms)

    async def capture_diagnostic_snapshot(self, label: str) -> Optional[str]:
        self.snapshots.append(label)
        return f"screenshots/{label}.png"


@pytest.fixture
def page():
    return FakePage()


@pytest.fixture
def fast_profile():
    """Match screen profile with tiny timeouts."""
    return ScreenProfile(
        loading_timeout_ms=10,
        modal=ModalProfile(detect_timeout_ms=10, populate_timeout_ms=10, close_timeout_ms=10)
    )


@pytest.fixture
def portal_settings(tmp_path):
    return Settings(
        PORTAL_BASE_URL="https://portal.test",
        PORTAL_USERNAME="qa-automation",
        PORTAL_PASSWORD="not-a-real-password",
        LOADING_INDICATOR_TIMEOUT_MS=10,
        MODAL_DETECT_TIMEOUT_MS=10,
        MODAL_POPULATE_TIMEOUT_MS=10,
        MODAL_CLOSE_TIMEOUT_MS=10,
        MENU_OPEN_TIMEOUT_MS=50,
        READINESS_TIMEOUT_MS=2000,
        ARTIFACTS_PATH=str(tmp_path / "artifacts"),
    )
