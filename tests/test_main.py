import uuid

import pytest
from fastapi.testclient import TestClient

from snapgram import main
from snapgram.core.settings import settings
from snapgram.main import app


def test_root_endpoint(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == settings.project_name
    assert data["version"] == settings.version
    assert data["docs"] == "/docs"


def test_health_check(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["dependencies"]["database"] == "connected"
    assert "memory_mb" in data
    assert data["correlation_id"] == response.headers["X-Correlation-ID"]


def test_health_check_reports_unreachable_database(client, container, monkeypatch) -> None:
    async def failing_ping() -> bool:
        return False

    monkeypatch.setattr(container.database, "ping", failing_ping)

    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"


def test_metrics_endpoint(client: TestClient) -> None:
    response = client.get("/metrics")

    assert response.status_code == 200
    assert "snapgram_upload_files_total" in response.text


def test_correlation_id_echoes_client_request_id(client: TestClient) -> None:
    request_id = str(uuid.uuid4())

    response = client.get("/", headers={"X-Request-ID": request_id})

    assert response.headers["X-Correlation-ID"] == request_id


def test_invalid_request_id_is_replaced(client: TestClient) -> None:
    response = client.get("/", headers={"X-Request-ID": "not-a-uuid"})

    correlation_id = response.headers["X-Correlation-ID"]
    assert correlation_id != "not-a-uuid"
    uuid.UUID(correlation_id)


def test_error_body_carries_correlation_id(client: TestClient) -> None:
    response = client.post("/auth", json={})

    assert response.status_code == 400
    assert response.json()["correlation_id"] == response.headers["X-Correlation-ID"]


@pytest.mark.parametrize(
    ("accept", "content_type", "body"),
    [
        ("text/html", "text/html", "<h1>404 Page Not Found!</h1>"),
        ("application/json", "application/json", '{"message":"404 Page Not Found!"}'),
        ("text/plain", "text/plain", "404 Page Not Found!"),
        ("image/png", "text/plain", "404 Page Not Found!"),
    ],
)
def test_unknown_route_negotiates_404(client, accept, content_type, body) -> None:
    response = client.get("/does/not/exist", headers={"Accept": accept})

    assert response.status_code == 404
    assert response.headers["content-type"].startswith(content_type)
    assert body in response.text


def test_unknown_route_prefers_html_for_wildcard(client: TestClient) -> None:
    response = client.get("/nowhere", headers={"Accept": "*/*"})

    assert response.status_code == 404
    assert response.headers["content-type"].startswith("text/html")


def test_malformed_json_is_bad_request(client: TestClient) -> None:
    response = client.post(
        "/users", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request data!"


def test_app_metadata() -> None:
    assert app.title == settings.project_name
    assert app.version == settings.version


def test_run_serves_on_configured_host_and_port(monkeypatch) -> None:
    captured = {}
    monkeypatch.setattr(main.uvicorn, "run", lambda app, **kwargs: captured.update(kwargs, app=app))
    monkeypatch.setattr(settings.api, "host", "127.0.0.1")
    monkeypatch.setattr(settings.api, "port", 8123)

    main.run()

    assert captured["app"] is app
    assert captured["host"] == "127.0.0.1"
    assert captured["port"] == 8123
