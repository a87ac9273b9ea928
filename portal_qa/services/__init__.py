"""Services for Portal Match QA."""

from portal_qa.services.page_surface import PageSurface, PlaywrightPageSurface, WaitTimeoutError
from portal_qa.services.element_probe import ElementProbe, ProbeMatch
from portal_qa.services.modal_resolver import ModalProfile, ModalResolver
from portal_qa.services.readiness_detector import MATCH_SCREEN, ReadinessDetector, ScreenProfile
from portal_qa.services.menu_discovery import MenuDiscovery
from portal_qa.services.batch_runner import BatchAbortedError, BatchRunner
from portal_qa.services.login_executor import LoginError, LoginExecutor, LoginResult
from portal_qa.services.tools_menu import MenuNotFoundError, ToolsMenu
from portal_qa.services.browser_manager import BrowserManager, get_browser_manager
from portal_qa.services.run_store import RunStore
from portal_qa.services.rate_limiter import RateLimiter
from portal_qa.services.match_workflow import MatchWorkflow, run_match_workflow

__all__ = [
    "PageSurface",
    "PlaywrightPageSurface",
    "WaitTimeoutError",
    "ElementProbe",
    "ProbeMatch",
    "ModalProfile",
    "ModalResolver",
    "MATCH_SCREEN",
    "ReadinessDetector",
    "ScreenProfile",
    "MenuDiscovery",
    "BatchAbortedError",
    "BatchRunner",
    "LoginError",
    "LoginExecutor",
    "LoginResult",
    "MenuNotFoundError",
    "ToolsMenu",
    "BrowserManager",
    "get_browser_manager",
    "RunStore",
    "RateLimiter",
    "MatchWorkflow",
    "run_match_workflow",
]
