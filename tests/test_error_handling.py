import logging

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError, OperationalError

from commodities.core.errors import register_exception_handlers
from commodities.middleware.observability import ObservabilityMiddleware


def _build_client() -> TestClient:
    app = FastAPI()
    app.add_middleware(ObservabilityMiddleware)
    register_exception_handlers(app)

    @app.get("/boom-db")
    def boom_db():
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    @app.get("/boom-unique")
    def boom_unique():
        raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: products.sku"))

    @app.get("/boom-check")
    def boom_check():
        raise IntegrityError("INSERT", {}, Exception("CHECK constraint failed: users_role_check"))

    @app.get("/boom")
    def boom():
        raise RuntimeError("unexpected")

    return TestClient(app, raise_server_exceptions=False)


def test_unknown_route_uses_error_body(client):
    response = client.get("/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"error": "Route not found"}


def test_invalid_json_body_is_400(client, manager_headers):
    response = client.post(
        "/products",
        content="{not json",
        headers={**manager_headers, "Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert "error" in response.json()


def test_invalid_path_parameter_is_400(client, manager_headers):
    response = client.get("/products/abc", headers=manager_headers)

    assert response.status_code == 400
    assert response.json()["error"].startswith("product_id")


def test_database_errors_map_to_500():
    response = _build_client().get("/boom-db")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_unique_violation_maps_to_409():
    response = _build_client().get("/boom-unique")

    assert response.status_code == 409
    assert response.json() == {"error": "Conflict with existing data"}


def test_other_integrity_errors_map_to_500():
    response = _build_client().get("/boom-check")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_unhandled_errors_map_to_500():
    response = _build_client().get("/boom")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_unhandled_error_log_keeps_request_id(caplog):
    with caplog.at_level(logging.ERROR, logger="commodities.core.errors"):
        response = _build_client().get("/boom", headers={"X-Request-ID": "req-boom"})

    assert response.status_code == 500
    record = next(entry for entry in caplog.records if entry.getMessage() == "unhandled error")
    assert record.request_id == "req-boom"
    assert record.endpoint == "/boom"
