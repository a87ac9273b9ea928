"""Data models for Portal Match QA."""

from portal_qa.models.match import (
    MenuEntry,
    ModalResolution,
    ReadinessOutcome,
    ReadinessStage,
    ReadinessStatus,
    BatchRecord,
    BatchResult,
)
from portal_qa.models.runs import (
    RunRequest,
    RunResponse,
    RunState,
    RunListResponse,
    WorkflowReport,
)

__all__ = [
    'MenuEntry',
    'ModalResolution',
    'ReadinessOutcome',
    'ReadinessStage',
    'ReadinessStatus',
    'BatchRecord',
    'BatchResult',
    'RunRequest',
    'RunResponse',
    'RunState',
    'RunListResponse',
    'WorkflowReport',
]
