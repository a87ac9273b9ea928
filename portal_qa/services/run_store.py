"""Run store for workflow reports with JSON persistence."""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from portal_qa.models.runs import RunState, WorkflowReport

logger = logging.getLogger(__name__)

REPORT_FILENAME = "run_report.json"


class RunStore:
    """In-memory report store, persisted under one directory per run."""

    def __init__(self, base_path: Optional[Path] = None):
        """
        Initialize run store.

        Args:
            base_path: Base path for run artifacts (defaults to ./artifacts)
        """
        self._runs: Dict[str, WorkflowReport] = {}
        self.base_path = Path(base_path or "./artifacts")
        self.base_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"RunStore initialized with base_path: {self.base_path}")

    def run_path(self, run_id: str) -> Path:
        return self.base_path / run_id

    def screenshots_path(self, run_id: str) -> Path:
        return self.run_path(run_id) / "screenshots"

    def create_run(
        self,
        run_id: str,
        base_url: str,
        environment: str,
        company: Optional[str] = None
    ) -> WorkflowReport:
        """Register a pending run."""
        report = WorkflowReport(
            run_id=run_id,
            status=RunState.PENDING,
            base_url=base_url,
            environment=environment,
            company=company
        )
        self._runs[run_id] = report
        self.save_report(report)
        logger.info(f"Created run: {run_id}")
        return report

    def get_run(self, run_id: str) -> Optional[WorkflowReport]:
        """Get a report by ID, falling back to disk."""
        if run_id in self._runs:
            return self._runs[run_id]
        return self.load_run(run_id)

    def save_report(self, report: WorkflowReport) -> Path:
        """Store and persist a report."""
        self._runs[report.run_id] = report
        run_dir = self.run_path(report.run_id)
        run_dir.mkdir(parents=True, exist_ok=True)

        file_path = run_dir / REPORT_FILENAME
        with open(file_path, "w") as f:
            json.dump(report.model_dump(mode="json"), f, indent=2, default=str)

        logger.debug(f"Saved run report: {file_path}")
        return file_path

    def load_run(self, run_id: str) -> Optional[WorkflowReport]:
        """Load a persisted report; None if missing or unreadable."""
        file_path = self.run_path(run_id) / REPORT_FILENAME
        if not file_path.exists():
            return None

        try:
            with open(file_path) as f:
                data = json.load(f)
            report = WorkflowReport(**data)
        except Exception as e:
            logger.error(f"Failed to load run {run_id}: {e}")
            return None

        self._runs[run_id] = report
        logger.info(f"Loaded run from disk: {run_id}")
        return report

    def list_runs(self, status: Optional[RunState] = None) -> List[WorkflowReport]:
        """List in-memory runs, newest first."""
        runs = sorted(self._runs.values(), key=lambda r: r.created_at, reverse=True)
        if status is not None:
            runs = [r for r in runs if r.status == status]
        return runs
