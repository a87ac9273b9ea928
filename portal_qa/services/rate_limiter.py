"""
Concurrency control for workflow runs.

Each run owns a browser session; the limiter caps how many exist at once.
"""

import asyncio
import logging
from datetime import datetime
from typing import Dict
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class RunInfo:
    """Information about an active run."""
    run_id: str
    started_at: datetime = field(default_factory=datetime.utcnow)


class RateLimiter:
    """Global concurrency limit with active run tracking."""

    def __init__(self, max_concurrent: int = 1):
        self.max_concurrent = max_concurrent
        self._active_runs: Dict[str, RunInfo] = {}
        self._lock = asyncio.Lock()

        logger.info(f"RateLimiter initialized: max_concurrent={max_concurrent}")

    async def acquire(self, run_id: str) -> bool:
        """
        Try to acquire a slot for a run.

        Returns:
            True if slot acquired, False if at limit
        """
        async with self._lock:
            if len(self._active_runs) >= self.max_concurrent:
                logger.warning(
                    f"Rate limit: max concurrent runs ({self.max_concurrent}) reached"
                )
                return False

            self._active_runs[run_id] = RunInfo(run_id=run_id)
            logger.info(
                f"Acquired slot for run {run_id}. "
                f"Active: {len(self._active_runs)}/{self.max_concurrent}"
            )
            return True

    async def release(self, run_id: str) -> bool:
        """
        Release a slot for a run.

        Returns:
            True if released, False if not found
        """
        async with self._lock:
            run_info = self._active_runs.pop(run_id, None)
            if run_info:
                logger.info(
                    f"Released slot for run {run_id}. "
                    f"Active: {len(self._active_runs)}/{self.max_concurrent}"
                )
                return True
            return False

    async def get_status(self) -> Dict:
        """Get current rate limiter status."""
        async with self._lock:
            return {
                "max_concurrent": self.max_concurrent,
                "active_runs": len(self._active_runs),
                "available_slots": self.max_concurrent - len(self._active_runs),
                "active_run_ids": list(self._active_runs.keys())
            }
