"""Models for workflow run management."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from portal_qa.models.match import BatchResult, MenuEntry


class RunState(str, Enum):
    """Possible states of a workflow run."""
    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"


class RunRequest(BaseModel):
    """Request to start a Tools → Match workflow run."""
    environment: Optional[str] = Field(
        None,
        description="Target environment name (defaults to ENVIRONMENT)",
        max_length=50
    )
    company: Optional[str] = Field(
        None,
        description="Company to select after login (defaults to PORTAL_COMPANY)",
        max_length=100
    )
    menu_prefix: Optional[str] = Field(
        None,
        description="Menu entry prefix (defaults to MENU_PREFIX)",
        max_length=100
    )
    readiness_timeout_ms: Optional[int] = Field(
        None,
        description="Ready marker timeout per entry",
        ge=1000,
        le=600000
    )
    headless: bool = Field(default=True, description="Run browser headless")
    force_allow_prod: bool = Field(
        default=False,
        description="Force allow production execution (dangerous)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "environment": "uat",
                "company": "MOCK",
                "menu_prefix": "Match",
                "readiness_timeout_ms": 60000,
                "headless": True
            }
        }


class RunResponse(BaseModel):
    """Response after creating a workflow run."""
    run_id: str = Field(..., description="Unique run identifier")
    status: RunState = Field(..., description="Current run status")
    created_at: datetime = Field(..., description="Run creation time")
    message: str = Field(..., description="Status message")


class WorkflowReport(BaseModel):
    """Outcome of one workflow run."""
    run_id: str = Field(..., description="Unique run identifier")
    status: RunState = Field(default=RunState.PENDING, description="Current status")
    base_url: str = Field(..., description="Portal base URL")
    environment: str = Field(..., description="Target environment")
    company: Optional[str] = Field(None, description="Selected company")

    # Timing
    created_at: datetime = Field(default_factory=datetime.utcnow, description="Run creation time")
    started_at: Optional[datetime] = Field(None, description="Actual start time")
    completed_at: Optional[datetime] = Field(None, description="Completion time")
    duration_ms: Optional[int] = Field(None, description="Total duration in ms")

    # Results
    entries: List[MenuEntry] = Field(default_factory=list, description="Discovered menu entries")
    batch: Optional[BatchResult] = Field(None, description="Batch result (partial on failure)")
    events: List[Dict[str, Any]] = Field(default_factory=list, description="Stage events")
    artifacts: List[str] = Field(default_factory=list, description="Artifact file paths")

    # Error info
    error: Optional[str] = Field(None, description="Error message if failed")

    @property
    def passed(self) -> bool:
        return self.status == RunState.PASSED


class RunListResponse(BaseModel):
    """List of runs."""
    runs: List[WorkflowReport]
    total: int
