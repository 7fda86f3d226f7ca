from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tokenguard.health.report import HealthReport
from tokenguard.main import create_app


def _client(report: HealthReport) -> TestClient:
    async def runner() -> HealthReport:
        return report

    return TestClient(create_app(health_runner=runner))


@pytest.mark.parametrize("path", ["/healthz", "/health"])
def test_healthy_report_is_200(path):
    report = HealthReport()
    report.checks["rpc_connection"] = True

    response = _client(report).get(path)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["checks"] == {"rpc_connection": True}


def test_warning_report_is_still_200():
    report = HealthReport()
    report.add_warning("Withheld tokens accumulating (5000 base units), burner may not be running")

    response = _client(report).get("/healthz")

    assert response.status_code == 200
    assert response.json()["status"] == "warning"


def test_critical_report_is_503():
    response = _client(HealthReport.critical("Mint account does not exist")).get("/healthz")

    assert response.status_code == 503
    assert response.json()["errors"] == ["Mint account does not exist"]


def test_metrics_endpoint_exposes_registry():
    response = _client(HealthReport()).get("/metrics")

    assert response.status_code == 200
    assert "tokenguard_health_runs_total" in response.text
