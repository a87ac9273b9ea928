"""Models for Match screen readiness and menu batch runs."""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator


class MenuEntry(BaseModel):
    """A navigable menu entry discovered in a container."""
    label: str = Field(..., description="Trimmed display text")
    destination: str = Field(..., description="Navigation target (href)")

    class Config:
        frozen = True


class ReadinessStage(str, Enum):
    """Stages of the screen readiness sequence."""
    LOADING_INDICATOR = "loading-indicator"
    MODAL = "modal"
    FINAL_SIGNAL = "final-signal"


class ReadinessStatus(str, Enum):
    """Terminal states of a readiness check."""
    READY = "ready"
    TIMED_OUT = "timed_out"
    FAILED = "failed"


class ModalResolution(BaseModel):
    """What happened to the optional selection modal."""
    present: bool = Field(default=False, description="Modal marker appeared")
    resolved: bool = Field(default=False, description="Modal was submitted")
    row_locator: Optional[str] = Field(None, description="Locator of the selected row")
    submit_locator: Optional[str] = Field(None, description="Locator of the clicked submit control")

    class Config:
        frozen = True

    @model_validator(mode="after")
    def _resolved_requires_present(self):
        if self.resolved and not self.present:
            raise ValueError("a modal cannot be resolved when it was not present")
        return self

    @classmethod
    def absent(cls) -> "ModalResolution":
        return cls(present=False, resolved=False)

    @property
    def unhandled(self) -> bool:
        """Detected but could not be dismissed."""
        return self.present and not self.resolved


class ReadinessOutcome(BaseModel):
    """Result of one readiness check: Ready, TimedOut(stage) or Failed(reason)."""
    status: ReadinessStatus
    stage: Optional[ReadinessStage] = Field(None, description="Stage that did not complete")
    reason: Optional[str] = Field(None, description="Failure detail")
    modal: Optional[ModalResolution] = Field(None, description="Modal handling observed")
    duration_ms: int = Field(default=0, description="Elapsed time")

    class Config:
        frozen = True

    @classmethod
    def ready(cls, modal: Optional[ModalResolution] = None, duration_ms: int = 0) -> "ReadinessOutcome":
        return cls(status=ReadinessStatus.READY, modal=modal, duration_ms=duration_ms)

    @classmethod
    def timed_out(
        cls,
        stage: ReadinessStage,
        reason: Optional[str] = None,
        modal: Optional[ModalResolution] = None,
        duration_ms: int = 0
    ) -> "ReadinessOutcome":
        return cls(
            status=ReadinessStatus.TIMED_OUT,
            stage=stage,
            reason=reason,
            modal=modal,
            duration_ms=duration_ms
        )

    @classmethod
    def failed(
        cls,
        reason: str,
        stage: Optional[ReadinessStage] = None,
        modal: Optional[ModalResolution] = None,
        duration_ms: int = 0
    ) -> "ReadinessOutcome":
        return cls(
            status=ReadinessStatus.FAILED,
            stage=stage,
            reason=reason,
            modal=modal,
            duration_ms=duration_ms
        )

    @property
    def is_ready(self) -> bool:
        return self.status == ReadinessStatus.READY

    def describe(self) -> str:
        if self.is_ready:
            return "ready"
        if self.status == ReadinessStatus.TIMED_OUT:
            return f"timed out at {self.stage.value if self.stage else 'unknown stage'}"
        return f"failed: {self.reason}"


class BatchRecord(BaseModel):
    """One attempted menu entry."""
    entry: MenuEntry
    outcome: ReadinessOutcome
    snapshot_path: Optional[str] = Field(None, description="Diagnostic screenshot, failures only")


class BatchResult(BaseModel):
    """Ordered records of attempted entries, up to and including the first failure."""
    total_entries: int = Field(..., ge=0, description="Number of entries given to the run")
    records: List[BatchRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def _records_form_prefix(self):
        if len(self.records) > self.total_entries:
            raise ValueError("more records than input entries")
        for record in self.records[:-1]:
            if not record.outcome.is_ready:
                raise ValueError("records continue after a failed entry")
        return self

    @property
    def attempted(self) -> int:
        return len(self.records)

    @property
    def ready_count(self) -> int:
        return sum(1 for r in self.records if r.outcome.is_ready)

    @property
    def failed_record(self) -> Optional[BatchRecord]:
        if self.records and not self.records[-1].outcome.is_ready:
            return self.records[-1]
        return None

    @property
    def passed(self) -> bool:
        """Every input entry was attempted and reached Ready."""
        return self.attempted == self.total_entries and self.ready_count == self.total_entries
