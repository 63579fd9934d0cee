"""Tests for API middleware."""

from fastapi.testclient import TestClient


class TestRequestIdMiddleware:
    """Tests for request ID correlation middleware."""

    def test_generates_request_id_if_not_provided(self, client: TestClient) -> None:
        """Should generate request ID if not in request headers."""
        response = client.get("/health")
        assert response.status_code == 200
        # UUID format
        assert len(response.headers["X-Request-ID"]) == 36

    def test_uses_provided_request_id(self, client: TestClient) -> None:
        """Should use request ID from request headers."""
        custom_id = "custom-request-id-12345"
        response = client.get("/health", headers={"X-Request-ID": custom_id})
        assert response.headers["X-Request-ID"] == custom_id

    def test_reports_handling_time(self, client: TestClient) -> None:
        """Responses carry their handling time."""
        response = client.get("/shop/shoes")
        assert float(response.headers["X-Response-Time-Ms"]) >= 0

    def test_error_envelope_carries_request_id(self, client: TestClient) -> None:
        """Error responses echo the request ID."""
        response = client.get("/shop/nowhere", headers={"X-Request-ID": "req-404"})
        assert response.status_code == 404
        assert response.json()["request_id"] == "req-404"
