"""A scripted in-memory portal built on FakePage."""

from conftest import FakeElement, FakePage, link
from portal_qa.utils.config import Settings

TOOLS_LINK = "text=/^Tools$/i"


class FakePortal:
    """
    Login form, company selection, main page with a Tools dropdown and one
    screen per Match entry. `ready` lists the destinations whose table
    shows up.
    """

    def __init__(self, page: FakePage, config: Settings, menu, ready=None):
        self.page = page
        self.config = config
        self.menu = list(menu)
        self.ready = set(ready if ready is not None else (href for _, href in self.menu))
        self.skip_company = False
        self.company_input = FakeElement(on_press=self._select_company)

        page.routes[config.PORTAL_BASE_URL] = self.show_login
        page.routes[config.home_url] = self.show_home

    @property
    def container(self) -> str:
        return self.config.MENU_CONTAINER

    def show_login(self):
        self.page.show({
            "button[type='submit']": [FakeElement(text="Log in", on_click=self._submit_login)],
        })

    def _submit_login(self):
        if self.skip_company:
            self.page.location = self.config.home_url
            self.show_home()
            return
        self.page.show(
            {"input[name='companies']": [self.company_input]},
            location=self.config.company_url
        )

    def _select_company(self, key):
        if key == "Enter":
            self.page.location = self.config.home_url
            self.show_home()

    def show_home(self):
        self.page.show({TOOLS_LINK: [FakeElement(text="Tools", on_click=self._open_tools)]})

    def _open_tools(self):
        anchors = [link(label, href) for label, href in self.menu]
        self.page.add(self.container, FakeElement())
        self.page.add(f"{self.container} a", *anchors)
        for (label, href), anchor in zip(self.menu, anchors):
            anchor.on_click = lambda href=href: self._open_screen(href)
            self.page.add(f"{self.container} a[href='{href}']", anchor)

    def _open_screen(self, href):
        elements = {}
        if href in self.ready:
            elements["#reactTable"] = [FakeElement()]
        self.page.show(elements, location=self.config.portal_url(href))
