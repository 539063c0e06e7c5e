"""Service entry point tests."""

from fastapi.testclient import TestClient

from menu_portal.main import app


client = TestClient(app)


def test_api_index_describes_service() -> None:
    """API index should report the service name and version."""
    response = client.get("/api")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["name"] == "Menu Portal API"


def test_health_endpoint() -> None:
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": {"status": "ok"}}


def test_unknown_route_uses_error_envelope() -> None:
    response = client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Not Found"}


def test_protected_route_without_token() -> None:
    """Protected endpoints should answer 401 with the gate message."""
    response = client.get("/api/orders")

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "No token provided"}
