"""Tests for health endpoints and API middleware."""

from unittest.mock import AsyncMock, patch

import httpx
from fastapi.testclient import TestClient

from textile_catalog.catalog.store import CatalogStore
from textile_catalog.infrastructure.identity import StaticIdentityProvider
from textile_catalog.main import app


class TestHealth:
    """Tests for public endpoints."""

    def test_health_check(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "textile-catalog"
        assert "version" in data

    def test_readiness_check(self, client: TestClient) -> None:
        response = client.get("/ready")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"


class TestRequestIdMiddleware:
    """Tests for request ID correlation middleware."""

    def test_generates_request_id_if_not_provided(self, client: TestClient) -> None:
        """Should generate request ID if not in request headers."""
        response = client.get("/health")
        assert response.status_code == 200
        # UUID format
        assert len(response.headers["X-Request-ID"]) == 36

    def test_uses_provided_request_id(self, client: TestClient) -> None:
        custom_id = "custom-request-id-12345"
        response = client.get("/health", headers={"X-Request-ID": custom_id})
        assert response.headers["X-Request-ID"] == custom_id


class TestAuthMiddleware:
    """Tests for bearer token authentication."""

    def test_protected_endpoints_require_auth(self, client: TestClient) -> None:
        response = client.get("/categories")
        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    def test_invalid_auth_format_rejected(self, client: TestClient) -> None:
        response = client.get("/categories", headers={"Authorization": "InvalidFormat"})
        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    def test_unknown_token_rejected(self, client: TestClient) -> None:
        response = client.get(
            "/categories",
            headers={"Authorization": "Bearer nope", "X-Request-ID": "req-1"},
        )
        assert response.status_code == 401
        data = response.json()
        assert data["error_code"] == "INVALID_TOKEN"
        assert data["message"] == "You must be logged in"
        assert data["request_id"] == "req-1"

    def test_identity_backend_failure(self, client: TestClient) -> None:
        with patch.object(
            StaticIdentityProvider,
            "verify_token",
            new_callable=AsyncMock,
            side_effect=httpx.ConnectError("refused"),
        ):
            response = client.get("/categories", headers={"Authorization": "Bearer user-token"})

        assert response.status_code == 502
        assert response.json()["error_code"] == "TRANSPORT_ERROR"


class TestCurrentUser:
    """Tests for role resolution through /me."""

    def test_plain_user(self, auth_client: TestClient) -> None:
        response = auth_client.get("/me")
        assert response.status_code == 200
        assert response.json() == {
            "uid": "user-1",
            "email": "user@example.com",
            "role": "user",
            "is_admin": False,
        }

    def test_allowlisted_admin(self, admin_client: TestClient) -> None:
        assert admin_client.get("/me").json()["role"] == "admin"

    def test_stored_role_wins(self, admin_client: TestClient, seed) -> None:
        seed("users", "admin-1", {"role": "user"})
        assert admin_client.get("/me").json()["is_admin"] is False


class TestUnhandledErrors:
    """Tests for the catch-all exception handler."""

    def test_internal_error_envelope(self) -> None:
        client = TestClient(
            app,
            raise_server_exceptions=False,
            headers={"Authorization": "Bearer user-token", "X-Request-ID": "req-9"},
        )
        with patch.object(
            CatalogStore,
            "list_categories",
            new_callable=AsyncMock,
            side_effect=RuntimeError("boom"),
        ):
            response = client.get("/categories")

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "INTERNAL_ERROR"
        assert data["message"] == "An internal error occurred"
        assert data["request_id"] == "req-9"
