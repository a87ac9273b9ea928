"""Utility modules for Portal Match QA."""

from portal_qa.utils.config import settings, require_credentials
from portal_qa.utils.logging import setup_logging
from portal_qa.utils.guards import check_env_guard, GuardError
from portal_qa.utils.events import EventLog, StageEvent

__all__ = [
    'settings',
    'require_credentials',
    'setup_logging',
    'check_env_guard',
    'GuardError',
    'EventLog',
    'StageEvent',
]
