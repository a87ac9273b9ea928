"""
Security guards for workflow execution.

Prevents accidental execution against production portals or with
non-test accounts.
"""

import logging
from typing import Optional
from urllib.parse import urlparse

from fastapi import HTTPException

from portal_qa.utils.config import settings

logger = logging.getLogger(__name__)

PROD_KEYWORDS = ['prod', 'production', 'prd', 'live']


class GuardError(Exception):
    """Exception raised when a guard check fails."""
    pass


def is_production_target(base_url: str, environment: str) -> bool:
    """Check whether the environment name or portal host looks like production."""
    env_lower = environment.lower().strip()
    if any(kw in env_lower for kw in PROD_KEYWORDS):
        return True

    host = (urlparse(base_url).hostname or "").lower()
    # Match whole host labels so that e.g. "uat-dimension" never trips "prd"
    labels = host.replace("-", ".").split(".")
    return any(label in PROD_KEYWORDS for label in labels)


def check_env_guard(
    base_url: str,
    environment: str,
    force_allow: bool = False
) -> None:
    """
    Check if a workflow run is allowed against the given portal.

    Args:
        base_url: Portal base URL
        environment: Target environment name (e.g. 'uat', 'staging', 'prod')
        force_allow: Override guard (requires explicit permission)

    Raises:
        GuardError: If execution is not allowed
    """
    if not settings.ENV_GUARD_ENABLED:
        logger.warning("ENV_GUARD is disabled - allowing all environments")
        return

    if not is_production_target(base_url, environment):
        logger.debug(f"ENV_GUARD: Allowed execution in environment '{environment}'")
        return

    if settings.ENV_GUARD_ALLOW_PRODUCTION:
        logger.info(f"ENV_GUARD: Production runs allowed by configuration ({base_url})")
        return

    if force_allow:
        logger.warning(
            f"ENV_GUARD: Force-allowing production execution against '{base_url}' "
            f"in environment '{environment}'"
        )
        return

    logger.error(
        f"ENV_GUARD: Blocked execution against production portal '{base_url}' "
        f"(environment '{environment}')"
    )
    raise GuardError(
        f"Execution blocked: '{base_url}' looks like a production portal "
        f"(environment '{environment}'). Set ENV_GUARD_ALLOW_PRODUCTION or use force_allow flag."
    )


def enforce_env_guard(
    base_url: str,
    environment: str,
    force_allow: bool = False
) -> None:
    """
    Run the environment guard for an HTTP request.

    Raises:
        HTTPException: If the guard check fails
    """
    try:
        check_env_guard(base_url, environment, force_allow=force_allow)
    except GuardError as e:
        raise HTTPException(
            status_code=403,
            detail={
                "error": "Guard check failed",
                "message": str(e),
                "base_url": base_url,
                "environment": environment
            }
        )


def validate_credentials_are_test_accounts(
    username: Optional[str] = None,
    company: Optional[str] = None
) -> bool:
    """
    Validate that provided credentials appear to be test accounts.

    This is a heuristic check - actual validation should be done
    against the portal's identity provider.

    Args:
        username: Username to check
        company: Company to check

    Returns:
        True if credentials appear to be test accounts
    """
    test_indicators = ['test', 'qa', 'automation', 'demo', 'sandbox', 'mock']

    if username:
        username_lower = username.lower()
        if any(ind in username_lower for ind in test_indicators):
            return True

        if username_lower.startswith('svc-') or username_lower.startswith('bot-'):
            return True

    if company:
        company_lower = company.lower()
        if any(ind in company_lower for ind in test_indicators):
            return True

    return False
