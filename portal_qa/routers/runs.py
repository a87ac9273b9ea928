"""Workflow run endpoints."""

import logging
import uuid
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, FastAPI, HTTPException, Query, Request

from portal_qa.models.runs import (
    RunListResponse,
    RunRequest,
    RunResponse,
    RunState,
    WorkflowReport,
)
from portal_qa.services.match_workflow import run_match_workflow
from portal_qa.utils.config import require_credentials, settings
from portal_qa.utils.guards import enforce_env_guard

logger = logging.getLogger(__name__)
router = APIRouter()


async def execute_run(app: FastAPI, run_id: str, run_request: RunRequest) -> None:
    """Background task: run the workflow and always release the slot."""
    store = app.state.run_store
    try:
        await run_match_workflow(
            run_id,
            store=store,
            browser_manager=app.state.browser_manager,
            company=run_request.company,
            prefix=run_request.menu_prefix,
            timeout_ms=run_request.readiness_timeout_ms,
            headless=run_request.headless
        )
    except Exception as e:
        logger.error(f"[{run_id}] Run failed to execute: {e}", exc_info=True)
        report = store.get_run(run_id)
        if report is not None:
            report.status = RunState.ERROR
            report.error = f"{type(e).__name__}: {e}"
            report.completed_at = datetime.utcnow()
            store.save_report(report)
    finally:
        await app.state.rate_limiter.release(run_id)


@router.post("", response_model=RunResponse, status_code=202)
async def create_run(request: Request, run_request: RunRequest, background_tasks: BackgroundTasks):
    """
    Start a Tools → Match workflow run.

    Blocked when the portal looks like production (unless allowed), when
    credentials are missing, or when all run slots are busy.
    """
    environment = run_request.environment or settings.ENVIRONMENT
    enforce_env_guard(
        settings.PORTAL_BASE_URL,
        environment,
        force_allow=run_request.force_allow_prod
    )

    try:
        require_credentials()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    run_id = f"run-{uuid.uuid4().hex[:12]}"
    if not await request.app.state.rate_limiter.acquire(run_id):
        raise HTTPException(status_code=409, detail="A workflow run is already in progress")

    report = request.app.state.run_store.create_run(
        run_id,
        base_url=settings.PORTAL_BASE_URL,
        environment=environment,
        company=run_request.company or settings.PORTAL_COMPANY
    )
    background_tasks.add_task(execute_run, request.app, run_id, run_request)

    return RunResponse(
        run_id=run_id,
        status=report.status,
        created_at=report.created_at,
        message="Workflow run started"
    )


@router.get("", response_model=RunListResponse)
async def list_runs(
    request: Request,
    status: Optional[RunState] = Query(None, description="Filter by status"),
    limit: int = Query(50, ge=1, le=100, description="Max results")
):
    """List workflow runs, newest first."""
    runs = request.app.state.run_store.list_runs(status=status)
    return RunListResponse(runs=runs[:limit], total=len(runs))


@router.get("/{run_id}", response_model=WorkflowReport)
async def get_run(request: Request, run_id: str):
    """Get a run report."""
    report = request.app.state.run_store.get_run(run_id)
    if not report:
        raise HTTPException(status_code=404, detail=f"Run not found: {run_id}")
    return report
