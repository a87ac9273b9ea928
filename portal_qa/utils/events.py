"""
Structured stage events.

Readiness stages and batch steps report progress as events instead of
console text, so the CLI summary, the run report and the log stream all
consume the same records.
"""

import logging
import time
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

EventListener = Callable[["StageEvent"], None]


@dataclass
class StageEvent:
    """One observed step of a workflow."""
    stage: str
    outcome: str
    duration_ms: int = 0
    detail: Optional[str] = None
    entry: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat() + "Z"
        return data


class EventLog:
    """Collects stage events and fans them out to listeners."""

    def __init__(self, listeners: Optional[List[EventListener]] = None):
        self._events: List[StageEvent] = []
        self._listeners: List[EventListener] = list(listeners or [])

    @property
    def events(self) -> List[StageEvent]:
        return list(self._events)

    def subscribe(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def emit(
        self,
        stage: str,
        outcome: str,
        duration_ms: int = 0,
        detail: Optional[str] = None,
        entry: Optional[str] = None,
        level: int = logging.INFO
    ) -> StageEvent:
        """Record an event, log it with structured fields and notify listeners."""
        event = StageEvent(
            stage=stage,
            outcome=outcome,
            duration_ms=duration_ms,
            detail=detail,
            entry=entry
        )
        self._events.append(event)

        message = f"{stage}: {outcome}" + (f" ({detail})" if detail else "")
        logger.log(
            level,
            message,
            extra={
                "stage": stage,
                "outcome": outcome,
                "duration_ms": duration_ms,
                "entry": entry,
            }
        )

        for listener in self._listeners:
            try:
                listener(event)
            except Exception as e:
                logger.warning(f"Event listener failed: {e}")

        return event


class Stopwatch:
    """Milliseconds elapsed since construction."""

    def __init__(self):
        self._start = time.monotonic()

    @property
    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self._start) * 1000)
