"""
Configuration settings for Portal Match QA.

All settings can be overridden via environment variables.
"""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Environment Configuration
    ENVIRONMENT: str = Field(default="uat", description="Target environment name")

    # API Configuration
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8080, description="API port")
    ENABLE_DOCS: bool = Field(default=True, description="Enable OpenAPI docs")

    # Portal
    PORTAL_BASE_URL: str = Field(
        default="https://portal.example.com",
        description="Portal base URL (login page)"
    )
    PORTAL_HOME_PATH: str = Field(default="/run", description="Main application page")
    PORTAL_COMPANY_PATH: str = Field(
        default="/login_company",
        description="Company selection page shown after login"
    )
    PORTAL_COMPANY: str = Field(default="MOCK", description="Company to select after login")

    # Menu discovery
    MENU_CONTAINER: str = Field(default=".dropdown-menu", description="Tools dropdown container")
    MENU_PREFIX: str = Field(default="Match", description="Menu entry name prefix")

    # Timeouts (milliseconds)
    READINESS_TIMEOUT_MS: int = Field(default=60000, description="Ready marker timeout per entry")
    LOADING_INDICATOR_TIMEOUT_MS: int = Field(default=5000, description="Loading indicator wait")
    MODAL_DETECT_TIMEOUT_MS: int = Field(default=3000, description="Modal marker wait")
    MODAL_POPULATE_TIMEOUT_MS: int = Field(default=1000, description="Modal rows populate wait")
    MODAL_CLOSE_TIMEOUT_MS: int = Field(default=2000, description="Modal close wait")
    MENU_OPEN_TIMEOUT_MS: int = Field(default=5000, description="Dropdown open wait")
    LOGIN_TIMEOUT_MS: int = Field(default=10000, description="Post-login network idle wait")
    NAVIGATION_TIMEOUT_MS: int = Field(default=30000, description="Page navigation timeout")

    # Browser
    HEADLESS: bool = Field(default=True, description="Run browser headless")
    SLOW_MO_MS: int = Field(default=0, description="Slow down browser operations")

    # Security Guards
    ENV_GUARD_ENABLED: bool = Field(default=True, description="Enable environment guard")
    ENV_GUARD_ALLOW_PRODUCTION: bool = Field(
        default=False,
        description="Allow runs against production-looking targets"
    )

    # Rate Limiting
    MAX_CONCURRENT_RUNS: int = Field(default=1, description="Max concurrent workflow runs")

    # Artifact Storage
    ARTIFACTS_PATH: str = Field(default="./artifacts", description="Artifacts storage path")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Log level")
    LOG_FORMAT: str = Field(default="json", description="Log format: json or text")

    # Secrets
    PORTAL_USERNAME: Optional[str] = Field(default=None, description="Portal test account username")
    PORTAL_PASSWORD: Optional[str] = Field(default=None, description="Portal test account password")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    def portal_url(self, path: str) -> str:
        """Join a portal path onto the base URL."""
        return self.PORTAL_BASE_URL.rstrip("/") + "/" + path.lstrip("/")

    @property
    def home_url(self) -> str:
        return self.portal_url(self.PORTAL_HOME_PATH)

    @property
    def company_url(self) -> str:
        return self.portal_url(self.PORTAL_COMPANY_PATH)


settings = Settings()


def require_credentials(config: Optional[Settings] = None) -> tuple:
    """
    Return (username, password) or fail naming the missing variable.

    Raises:
        ValueError: If a credential is not configured
    """
    config = config or settings
    if not config.PORTAL_USERNAME:
        raise ValueError("PORTAL_USERNAME environment variable not set")
    if not config.PORTAL_PASSWORD:
        raise ValueError("PORTAL_PASSWORD environment variable not set")
    return config.PORTAL_USERNAME, config.PORTAL_PASSWORD


# Secret patterns for redaction
SECRET_PATTERNS = [
    r"password",
    r"secret",
    r"token",
    r"api[_-]?key",
    r"auth",
    r"credential",
    r"bearer",
]
