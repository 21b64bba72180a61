"""Tests for the HTTP interface."""

import pytest
from fastapi.testclient import TestClient

from apix.server import app


@pytest.fixture
def client(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.setenv("APIX_TYPE_CHECK", "0")
    return TestClient(app)


def test_health_endpoint(client) -> None:
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_analyze_project(client, nextjs_project) -> None:
    response = client.post("/api/analyze-project", json={"path": str(nextjs_project)})
    assert response.status_code == 200
    assert response.json()["platform"] == "nextjs"


def test_missing_project_maps_to_404(client, tmp_path) -> None:
    response = client.post("/api/analyze-project", json={"path": str(tmp_path / "nope")})
    assert response.status_code == 404
    detail = response.json()["detail"]
    assert detail["code"] == "NO_PROJECT_FOUND"
    assert detail["hint"]


def test_recommend_and_status(client, make_project) -> None:
    root = make_project(deps={"next": "14.2.0", "react": "18.3.0", "shop-cart-lib": "1.0.0"})
    recs = client.post("/api/recommend", json={"path": str(root)}).json()
    assert recs[0]["capability"] == "token-service"
    assert recs[0]["priority"] == "high"

    status = client.post("/api/integration-status", json={"path": str(root)}).json()
    assert status["token-service"]["active"] is False


def test_compile_plan_returns_validation(client, nextjs_project) -> None:
    response = client.post(
        "/api/compile-plan",
        json={"path": str(nextjs_project), "capability": "token-service", "options": {"name": "Acme", "symbol": "ACM"}},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["validation"]["passed"] is True
    assert body["plan"]["new_files"][0]["path"] == "lib/hedera/hts.ts"


def test_invalid_options_map_to_422(client, nextjs_project) -> None:
    response = client.post(
        "/api/compile-plan",
        json={"path": str(nextjs_project), "capability": "token", "options": {"decimals": 99, "symbol": "lower"}},
    )
    assert response.status_code == 422
    fields = {v["field"] for v in response.json()["detail"]["violations"]}
    assert fields == {"decimals", "symbol"}


def test_wallet_providers_alone_compile(client, nextjs_project) -> None:
    response = client.post(
        "/api/compile-plan",
        json={"path": str(nextjs_project), "capability": "wallet", "options": {"providers": ["blade"]}},
    )
    assert response.status_code == 200
    assert response.json()["plan"]["config"]["default_provider"] == "blade"


def test_unknown_capability_maps_to_400(client, nextjs_project) -> None:
    response = client.post("/api/compile-plan", json={"path": str(nextjs_project), "capability": "teleport"})
    assert response.status_code == 400
    assert response.json()["detail"]["category"] == "Unsupported"


def test_add_integration_dry_run(client, nextjs_project) -> None:
    response = client.post(
        "/api/add-integration",
        json={"path": str(nextjs_project), "capability": "account", "dry_run": True},
    )
    assert response.status_code == 200
    assert response.json()["status"] == "planned"


def test_health_checks(client, nextjs_project) -> None:
    full = client.post("/api/health-check", json={"path": str(nextjs_project)}).json()
    assert full["overall"] == "critical"
    assert full["checks"]["hedera-sdk"]["status"] == "fail"

    quick = client.post("/api/quick-health-check", json={"path": str(nextjs_project)}).json()
    assert quick["healthy"] is True


def test_classify_intent(client) -> None:
    response = client.post("/api/classify-intent", json={"requirement": "audit trail for drug trials"})
    body = response.json()
    assert body["industry"] == "pharmaceutical"
    assert body["capabilities"] == ["audit-log"]


def test_empty_requirement_rejected(client) -> None:
    assert client.post("/api/classify-intent", json={"requirement": "  "}).status_code == 422
