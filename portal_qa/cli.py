#!/usr/bin/env python3
"""
Command line entry point.

Usage:
    portal-qa run [--company MOCK] [--prefix Match] [--headed]
    portal-qa serve [--host 0.0.0.0] [--port 8080]

Exit codes for `run`: 0 when every Match screen became ready, 1 when the
workflow failed, 2 when the run was refused (guard or missing credentials).
"""

import argparse
import asyncio
import logging
import sys
import uuid

from portal_qa.models.runs import WorkflowReport
from portal_qa.services.browser_manager import get_browser_manager
from portal_qa.services.match_workflow import run_match_workflow
from portal_qa.services.run_store import RunStore
from portal_qa.utils.config import require_credentials, settings
from portal_qa.utils.events import EventLog, StageEvent
from portal_qa.utils.guards import GuardError, check_env_guard, validate_credentials_are_test_accounts
from portal_qa.utils.logging import setup_logging

logger = logging.getLogger(__name__)

EXIT_PASSED = 0
EXIT_FAILED = 1
EXIT_REFUSED = 2


def print_event(event: StageEvent) -> None:
    entry = f" [{event.entry}]" if event.entry else ""
    detail = f" - {event.detail}" if event.detail else ""
    print(f"  {event.stage:<18} {event.outcome:<14} {event.duration_ms:>7}ms{entry}{detail}")


def print_summary(report: WorkflowReport) -> None:
    print(f"\nRun {report.run_id}: {report.status.value.upper()}")
    print(f"Portal: {report.base_url} ({report.environment}, company {report.company})")
    print(f"Discovered {len(report.entries)} entries")

    if report.batch:
        for idx, record in enumerate(report.batch.records, 1):
            mark = "✅" if record.outcome.is_ready else "❌"
            print(f"  {mark} [{idx}/{report.batch.total_entries}] {record.entry.label}: {record.outcome.describe()}")
        skipped = report.batch.total_entries - report.batch.attempted
        if skipped:
            print(f"  ⏭  {skipped} entries not attempted")

    if report.error:
        print(f"\nError: {report.error}")
    for artifact in report.artifacts:
        print(f"📄 {artifact}")


async def _run(args: argparse.Namespace) -> WorkflowReport:
    config = settings
    if args.environment:
        config = settings.model_copy(update={"ENVIRONMENT": args.environment})

    events = EventLog()
    if args.verbose:
        events.subscribe(print_event)

    store = RunStore(config.ARTIFACTS_PATH)
    browser_manager = get_browser_manager()
    run_id = args.run_id or f"run-{uuid.uuid4().hex[:12]}"
    try:
        return await run_match_workflow(
            run_id,
            store=store,
            browser_manager=browser_manager,
            config=config,
            company=args.company,
            prefix=args.prefix,
            timeout_ms=args.timeout_ms,
            headless=False if args.headed else None,
            events=events
        )
    finally:
        await browser_manager.close_all()


def cmd_run(args: argparse.Namespace) -> int:
    environment = args.environment or settings.ENVIRONMENT
    try:
        check_env_guard(settings.PORTAL_BASE_URL, environment, force_allow=args.force_allow_prod)
        username, _ = require_credentials()
    except (GuardError, ValueError) as e:
        print(f"Error: {e}")
        return EXIT_REFUSED

    company = args.company or settings.PORTAL_COMPANY
    if not validate_credentials_are_test_accounts(username, company):
        logger.warning(f"User '{username}' / company '{company}' do not look like a test account")

    print(f"Testing '{args.prefix or settings.MENU_PREFIX}' screens on {settings.PORTAL_BASE_URL}...")
    report = asyncio.run(_run(args))
    print_summary(report)
    return EXIT_PASSED if report.passed else EXIT_FAILED


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "portal_qa.main:app",
        host=args.host or settings.API_HOST,
        port=args.port or settings.API_PORT
    )
    return EXIT_PASSED


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="portal-qa",
        description="Readiness checks for the portal's Tools → Match screens"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run the Tools → Match workflow once")
    run.add_argument("--company", help="Company to select after login")
    run.add_argument("--prefix", help="Menu label prefix (default: MENU_PREFIX)")
    run.add_argument("--timeout-ms", type=int, help="Per-entry readiness timeout")
    run.add_argument("--environment", help="Target environment name for the guard")
    run.add_argument("--run-id", help="Explicit run id (default: generated)")
    run.add_argument("--headed", action="store_true", help="Show the browser window")
    run.add_argument("--force-allow-prod", action="store_true", help="Override the production guard")
    run.add_argument("-v", "--verbose", action="store_true", help="Print stage events as they happen")
    run.set_defaults(func=cmd_run)

    serve = subparsers.add_parser("serve", help="Start the HTTP API")
    serve.add_argument("--host", help="Bind address (default: API_HOST)")
    serve.add_argument("--port", type=int, help="Port (default: API_PORT)")
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
