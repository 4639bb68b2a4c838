from fastapi.testclient import TestClient
from inline_snapshot import snapshot


def test_health(client: TestClient):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == snapshot(
        {"status": "running", "issuer": "https://idp.example.com"}
    )
    assert response.headers["access-control-allow-origin"] == "*"


def test_health_without_issuer(bypass_client: TestClient):
    response = bypass_client.get("/health")

    assert response.json() == {"status": "running", "issuer": None}


def test_health_preflight(client: TestClient):
    response = client.options("/health")

    assert response.status_code == 204
    assert response.content == b""
    assert response.headers["access-control-allow-methods"] == "GET, OPTIONS"
    assert response.headers["access-control-allow-headers"] == "Content-Type"


def test_unknown_path_is_not_found(client: TestClient):
    response = client.get("/favicon.ico")

    assert response.status_code == 404
    assert "404 - Not Found" in response.text


def test_other_methods_on_root_are_not_found(client: TestClient):
    response = client.post("/", data={"code": "abc"})

    assert response.status_code == 404
