"""Portal Match QA - readiness checks for the portal's Tools → Match screens."""

__version__ = "1.0.0"
