"""Tests for RFC 7807 error handling."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from apps.api.core.errors import (
    AppError,
    AuthenticationError,
    BadRequestError,
    ForbiddenError,
    NotFoundError,
    PayloadTooLargeError,
    PersistenceError,
    ValidationError,
    register_error_handlers,
)


@pytest.fixture
def error_app():
    """Create a test app with error handlers registered."""
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/test/not-found")
    async def raise_not_found():
        raise NotFoundError("Transaction xyz not found")

    @app.get("/test/validation")
    async def raise_validation():
        raise ValidationError("Invalid amount")

    @app.get("/test/auth")
    async def raise_auth():
        raise AuthenticationError()

    @app.get("/test/bad-request")
    async def raise_bad_request():
        raise BadRequestError("Only CSV files are supported")

    @app.get("/test/forbidden")
    async def raise_forbidden():
        raise ForbiddenError("Only management can upload bank statements")

    @app.get("/test/too-large")
    async def raise_too_large():
        raise PayloadTooLargeError()

    @app.get("/test/persistence")
    async def raise_persistence():
        raise PersistenceError("Failed to insert transactions: timeout")

    @app.get("/test/unhandled")
    async def raise_unhandled():
        raise RuntimeError("Unexpected crash")

    return app


@pytest.fixture
def client(error_app):
    return TestClient(error_app, raise_server_exceptions=False)


class TestRFC7807ErrorFormat:
    """All errors should return RFC 7807 Problem Details format."""

    def test_not_found_returns_rfc7807(self, client):
        response = client.get("/test/not-found")
        assert response.status_code == 404
        body = response.json()
        assert body["type"] == "about:blank"
        assert body["title"] == "Not Found"
        assert body["status"] == 404
        assert body["detail"] == "Transaction xyz not found"
        assert body["instance"] == "/test/not-found"

    def test_validation_error_returns_rfc7807(self, client):
        response = client.get("/test/validation")
        assert response.status_code == 422
        body = response.json()
        assert body["title"] == "Unprocessable Entity"
        assert body["detail"] == "Invalid amount"

    def test_auth_error_returns_rfc7807(self, client):
        response = client.get("/test/auth")
        assert response.status_code == 401
        body = response.json()
        assert body["title"] == "Unauthorized"

    def test_unhandled_error_returns_rfc7807(self, client):
        response = client.get("/test/unhandled")
        assert response.status_code == 500
        body = response.json()
        assert body["title"] == "Internal Server Error"
        assert body["detail"] == "An unexpected error occurred"

    def test_bad_request_returns_rfc7807(self, client):
        response = client.get("/test/bad-request")
        assert response.status_code == 400
        assert response.json()["title"] == "Bad Request"
        assert response.json()["detail"] == "Only CSV files are supported"

    def test_forbidden_returns_rfc7807(self, client):
        response = client.get("/test/forbidden")
        assert response.status_code == 403
        assert response.json()["title"] == "Forbidden"

    def test_payload_too_large_returns_rfc7807(self, client):
        response = client.get("/test/too-large")
        assert response.status_code == 413
        assert response.json()["title"] == "Payload Too Large"

    def test_persistence_error_keeps_detail(self, client):
        response = client.get("/test/persistence")
        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to insert transactions: timeout"

    def test_unknown_route_returns_rfc7807(self, client):
        response = client.get("/test/missing")
        assert response.status_code == 404
        assert response.json()["title"] == "Not Found"
