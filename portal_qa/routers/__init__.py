"""API routers for Portal Match QA."""

from portal_qa.routers import health, runs

__all__ = ['health', 'runs']
