"""
Integration tests for OpenAPI documentation.

Verifies OpenAPI schema is correctly generated for all endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from keeps_auth.api.main import app


@pytest.fixture
def client() -> TestClient:
    """Create test client for the application."""
    return TestClient(app)


@pytest.fixture
def schema(client: TestClient) -> dict:
    """Fetched OpenAPI document."""
    response = client.get("/openapi.json")
    assert response.status_code == 200
    return response.json()


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    def test_openapi_title_and_description(self, schema: dict) -> None:
        """OpenAPI schema has correct title and description."""
        assert schema["info"]["title"] == "keeps-auth"
        assert "verification link issuer" in schema["info"]["description"]
        assert schema["info"]["version"] == "0.1.0"

    def test_send_verification_documented(self, schema: dict) -> None:
        """POST /send-verification is documented; OPTIONS and 405 handlers are not."""
        path = schema["paths"]["/send-verification"]
        assert set(path) == {"post"}
        assert path["post"]["summary"] == "Send a verification email"
        assert {"200", "400", "500"} <= set(path["post"]["responses"])

    def test_v1_endpoints_documented(self, schema: dict) -> None:
        """The RPC and the account-created hook are under /v1."""
        assert "post" in schema["paths"]["/v1/resend-verification"]
        hook = schema["paths"]["/v1/hooks/account-created"]["post"]
        assert "202" in hook["responses"]

    def test_error_schemas(self, schema: dict) -> None:
        """Both error body shapes are published."""
        components = schema["components"]["schemas"]
        assert "ErrorResponse" in components
        assert "RpcErrorResponse" in components
        assert components["RpcError"]["properties"]["code"]["enum"] == [
            "invalid-argument",
            "internal",
        ]

    def test_health_endpoint(self, client: TestClient) -> None:
        """Health answers before startup wiring."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] in {"starting", "healthy"}
