"""
Tests for health check endpoints.
"""

from unittest.mock import AsyncMock


class TestHealthEndpoint:
    """Tests for /health endpoints."""

    def test_health_returns_200(self, client):
        """Test health endpoint returns 200 OK."""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "processing"
        assert "timestamp" in data

    def test_detailed_health_in_process(self, client):
        """Test that an injected setup reports in-process messaging."""
        response = client.get("/health/detailed")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["document_store"] == "healthy"
        assert data["messaging"] == "in-process"

    def test_detailed_health_store_down(self, client, store):
        """Test that a failing store makes the service unhealthy."""
        store.get = AsyncMock(side_effect=ConnectionError("down"))

        data = client.get("/health/detailed").json()

        assert data["status"] == "unhealthy"
        assert data["document_store"] == "unhealthy"

    def test_readiness(self, client, store):
        """Test readiness with a reachable and an unreachable store."""
        assert client.get("/health/ready").json() == {"status": "ready"}

        store.get = AsyncMock(side_effect=ConnectionError("down"))
        assert client.get("/health/ready").status_code == 503

    def test_liveness(self, client):
        """Test liveness check."""
        assert client.get("/health/live").json() == {"status": "alive"}

    def test_metrics(self, client):
        """Test that Prometheus metrics are exposed."""
        client.get("/health")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "http_requests_total" in response.text

    def test_metrics_labelled_by_route_template(self, client, auth_headers):
        """Test that thought ids do not leak into metric labels."""
        client.post("/api/v1/thoughts/secret-thought-id/revert", headers=auth_headers)

        text = client.get("/metrics").text

        assert 'endpoint="/api/v1/thoughts/{thought_id}/revert"' in text
        assert "secret-thought-id" not in text
