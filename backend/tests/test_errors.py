import logging

from fastapi.testclient import TestClient

from rentshare.main import app
from rentshare.db.session import get_db


def test_unexpected_error_is_logged_and_hidden(client, caplog):
    async def broken_db():
        raise RuntimeError("database unreachable")

    app.dependency_overrides[get_db] = broken_db
    # the handler response is returned instead of re-raising into the test
    quiet_client = TestClient(app, raise_server_exceptions=False)

    with caplog.at_level(logging.ERROR, logger="rentshare.main"):
        response = quiet_client.get("/api/items")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert "database unreachable" not in response.text
    assert any(r.name == "rentshare.main" and r.exc_info for r in caplog.records)


def test_http_errors_use_error_key(client):
    response = client.get("/api/items/999")
    assert response.status_code == 404
    assert response.json() == {"error": "Item not found"}


def test_validation_errors_are_400(client):
    response = client.get("/api/items/not-a-number")
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid request"
    assert body["details"]
