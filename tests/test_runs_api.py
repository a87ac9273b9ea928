"""API contract tests for the runs and health endpoints."""

import pytest
from fastapi.testclient import TestClient

from portal_qa.main import create_app
from portal_qa.models.runs import RunState
from portal_qa.routers import runs
from portal_qa.utils.config import settings


class WorkflowStub:
    """Replaces run_match_workflow; marks the stored run with a fixed status."""

    def __init__(self, status=RunState.PASSED, error=None):
        self.status = status
        self.error = error
        self.calls = []

    async def __call__(self, run_id, store, browser_manager, **kwargs):
        self.calls.append((run_id, kwargs))
        if self.error:
            raise self.error
        report = store.get_run(run_id)
        report.status = self.status
        store.save_report(report)
        return report


@pytest.fixture
def workflow(monkeypatch):
    stub = WorkflowStub()
    monkeypatch.setattr(runs, "run_match_workflow", stub)
    return stub


@pytest.fixture
def client(tmp_path, monkeypatch, workflow):
    monkeypatch.setattr(settings, "ARTIFACTS_PATH", str(tmp_path / "artifacts"))
    monkeypatch.setattr(settings, "PORTAL_BASE_URL", "https://uat.example.com")
    monkeypatch.setattr(settings, "PORTAL_USERNAME", "qa-automation")
    monkeypatch.setattr(settings, "PORTAL_PASSWORD", "pw")
    monkeypatch.setattr(settings, "ENV_GUARD_ENABLED", True)
    monkeypatch.setattr(settings, "ENV_GUARD_ALLOW_PRODUCTION", False)
    with TestClient(create_app()) as client:
        yield client


class TestHealth:
    """Tests for health endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, client):
        """Readiness includes the run slot status."""
        body = client.get("/health/ready").json()

        assert body["ready"] is True
        assert body["runs"]["max_concurrent"] == settings.MAX_CONCURRENT_RUNS
        assert body["runs"]["active_runs"] == 0

    def test_config_hides_credentials(self, client):
        """Config endpoint reports whether credentials exist, never their values."""
        body = client.get("/health/config").json()

        assert body["credentials_configured"] is True
        assert "pw" not in body.values()


class TestRuns:
    """Tests for the /runs endpoints."""

    def test_create_run_and_fetch_report(self, client, workflow):
        """A started run is accepted, executed and retrievable."""
        response = client.post("/runs", json={"company": "MOCK", "menu_prefix": "Match"})

        assert response.status_code == 202
        run_id = response.json()["run_id"]
        assert run_id.startswith("run-")

        report = client.get(f"/runs/{run_id}").json()
        assert report["status"] == "passed"
        assert report["company"] == "MOCK"
        assert workflow.calls[0][1]["prefix"] == "Match"

    def test_list_runs(self, client):
        client.post("/runs", json={})
        client.post("/runs", json={})

        body = client.get("/runs").json()

        assert body["total"] == 2
        assert client.get("/runs", params={"status": "failed"}).json()["total"] == 0

    def test_unknown_run(self, client):
        assert client.get("/runs/run-missing").status_code == 404

    def test_blocks_production_portal(self, client, monkeypatch):
        """A production-looking portal is refused with 403."""
        monkeypatch.setattr(settings, "PORTAL_BASE_URL", "https://portal.prod.example.com")

        response = client.post("/runs", json={})

        assert response.status_code == 403
        assert "production" in response.json()["detail"]["message"]

    def test_force_allow_production(self, client, monkeypatch):
        monkeypatch.setattr(settings, "PORTAL_BASE_URL", "https://portal.prod.example.com")

        response = client.post("/runs", json={"force_allow_prod": True})

        assert response.status_code == 202

    def test_missing_credentials(self, client, monkeypatch):
        """Runs are refused with 400 when credentials are not configured."""
        monkeypatch.setattr(settings, "PORTAL_PASSWORD", None)

        response = client.post("/runs", json={})

        assert response.status_code == 400
        assert "PORTAL_PASSWORD" in response.json()["detail"]

    def test_busy_limiter(self, client):
        """All slots taken gives 409."""
        client.app.state.rate_limiter.max_concurrent = 0

        response = client.post("/runs", json={})

        assert response.status_code == 409

    def test_invalid_timeout(self, client):
        response = client.post("/runs", json={"readiness_timeout_ms": 5})

        assert response.status_code == 422

    def test_crashed_run_is_marked_error(self, client, workflow):
        """An exception escaping the workflow marks the run ERROR and frees the slot."""
        workflow.error = RuntimeError("browser crashed")

        run_id = client.post("/runs", json={}).json()["run_id"]

        report = client.get(f"/runs/{run_id}").json()
        assert report["status"] == "error"
        assert "browser crashed" in report["error"]
        assert client.post("/runs", json={}).status_code == 202
