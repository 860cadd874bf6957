"""Route tests for health, analytics and app-wide error handling."""

import json
import logging

from fastapi.testclient import TestClient

from feedbackai.main import create_app


def test_health(client, test_settings):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "FeedbackAI API is running"
    assert body["version"] == test_settings.app_version
    assert body["timestamp"]


def test_rate_limit_headers_on_success(client):
    resp = client.get("/api/health")
    assert resp.headers["X-RateLimit-Limit"] == "100"
    assert resp.headers["X-RateLimit-Remaining"] == "99"


def test_security_headers(client):
    resp = client.get("/api/health")
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "SAMEORIGIN"


def test_cors_allows_frontend_origin(client):
    resp = client.get("/api/health", headers={"Origin": "http://localhost:3000"})
    assert resp.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert resp.headers["access-control-allow-credentials"] == "true"


def test_cors_rejects_other_origin(client):
    resp = client.get("/api/health", headers={"Origin": "http://evil.example"})
    assert "access-control-allow-origin" not in resp.headers


def test_analytics(client, valid_payload):
    client.post("/api/feedback", json=valid_payload)
    created = client.post("/api/feedback", json={**valid_payload, "type": "feature"})
    client.put(f"/api/feedback/{created.json()['data']['id']}", json={"status": "resolved"})

    resp = client.get("/api/analytics")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["stats"]["total"] == 2
    assert data["stats"]["byType"] == {"bug": 1, "feature": 1, "improvement": 0, "other": 0}
    assert data["stats"]["byStatus"]["resolved"] == 1
    assert set(data["trends"]) == {"weekly", "monthly"}
    assert data["generatedAt"]


def test_unknown_endpoint(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Endpoint not found"}


def test_unsupported_method_is_not_found(client):
    resp = client.patch("/api/health")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Endpoint not found"


def test_body_too_large(test_settings, store):
    settings = test_settings.model_copy(update={"max_body_bytes": 64})
    app = create_app(settings, store=store)
    with TestClient(app) as c:
        resp = c.post("/api/feedback", json={"title": "x" * 200})
    assert resp.status_code == 413
    assert resp.json() == {"success": False, "message": "Request body too large"}


def test_streamed_body_too_large(test_settings, store):
    settings = test_settings.model_copy(update={"max_body_bytes": 64})
    app = create_app(settings, store=store)

    def chunks():
        yield b'{"title": "'
        for _ in range(10):
            yield b"x" * 50
        yield b'"}'

    with TestClient(app) as c:
        resp = c.post(
            "/api/feedback",
            content=chunks(),
            headers={"Content-Type": "application/json"},
        )
    assert resp.status_code == 413
    assert resp.json() == {"success": False, "message": "Request body too large"}
    assert len(store) == 0


def test_streamed_body_under_limit_reaches_route(client, valid_payload):
    raw = json.dumps(valid_payload).encode()

    def chunks():
        yield raw[:10]
        yield raw[10:]

    resp = client.post(
        "/api/feedback", content=chunks(), headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 201
    assert resp.json()["data"]["title"] == valid_payload["title"]


def test_unhandled_error_returns_generic_500(test_settings, store):
    app = create_app(test_settings, store=store)

    @app.get("/api/explode")
    async def explode():
        raise RuntimeError("secret internal detail")

    with TestClient(app, raise_server_exceptions=False) as c:
        resp = c.get("/api/explode")
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "message": "Internal server error"}
    assert "secret" not in resp.text


def test_mutations_written_to_audit_log(client, valid_payload, tmp_path):
    client.post("/api/feedback", json=valid_payload)
    client.delete("/api/feedback/1")
    client.get("/api/feedback")

    lines = (tmp_path / "audit_log.jsonl").read_text().strip().splitlines()
    assert len(lines) == 2


def test_startup_logs_answer_source(test_settings, store, caplog):
    caplog.set_level(logging.INFO, logger="feedbackai.main")
    with TestClient(create_app(test_settings, store=store)):
        pass
    assert "AI answers from: mock" in caplog.text
