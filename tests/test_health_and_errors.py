import logging

from fastapi.testclient import TestClient

from zone_api.main import app


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["environment"] == "test"


def test_health_detailed_checks_database(client):
    response = client.get("/health/detailed")

    assert response.status_code == 200
    assert response.json()["checks"]["database"] == {"status": "ok"}


def test_unknown_route(client):
    response = client.get("/api/nowhere")

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"] == {"code": "HTTP_404", "message": "Route GET /api/nowhere not found"}


def test_method_not_allowed(client):
    response = client.patch("/api/zones")

    assert response.status_code == 405
    assert response.json()["error"]["code"] == "HTTP_405"


def test_request_id_is_generated(client):
    response = client.get("/health")

    request_id = response.headers["X-Request-ID"]
    assert len(request_id) == 36


def test_request_id_is_propagated(client):
    response = client.get("/api/nowhere", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert response.json()["requestId"] == "req-123"


def test_request_id_in_success_envelope(client, auth_headers):
    response = client.get("/api/zones", headers={**auth_headers, "X-Request-ID": "abc"})

    assert response.json()["requestId"] == "abc"


def test_failure_after_commit_keeps_error_envelope(client, user, auth_headers, zone_payload, monkeypatch, caplog):
    def broken_format(zone):
        raise RuntimeError("format failed")

    # La zona ya se guardó cuando falla el formateo de la respuesta
    monkeypatch.setattr("zone_api.zones.service.format_zone", broken_format)
    failing_client = TestClient(app, raise_server_exceptions=False)

    with caplog.at_level(logging.ERROR):
        response = failing_client.post(
            "/api/zones", json=zone_payload(), headers={**auth_headers, "X-Request-ID": "req-500"}
        )

    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "INTERNAL_ERROR"
    assert body["requestId"] == "req-500"
    assert f"user_id={user.id}" in caplog.text
