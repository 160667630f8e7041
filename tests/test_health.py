# =============================================================================
# tests/test_health.py - Health and Error Envelope Tests
# =============================================================================


class TestHealth:

    def test_health(self, anonymous_client):
        body = anonymous_client.get("/api/v1/health").json()

        assert body["status"] == "healthy"
        assert body["environment"] == "development"
        assert body["version"] == "1.0.0"

    def test_ready(self, anonymous_client):
        body = anonymous_client.get("/api/v1/health/ready").json()

        assert body["status"] == "ready"
        assert body["checks"]["database"] == "healthy"

    def test_degraded_when_database_fails(self, anonymous_client, fake_db):
        fake_db.failing_tables.add("vehicles")

        body = anonymous_client.get("/api/v1/health/ready").json()

        assert body["status"] == "degraded"
        assert body["checks"]["database"].startswith("unhealthy")

    def test_live(self, anonymous_client):
        assert anonymous_client.get("/api/v1/health/live").json()["status"] == "alive"

    def test_root(self, anonymous_client):
        assert anonymous_client.get("/").json()["health"] == "/api/v1/health"


class TestErrorEnvelope:

    def test_unknown_route(self, anonymous_client):
        response = anonymous_client.get("/api/v1/nowhere")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Not Found", "code": "NOT_FOUND"}

    def test_database_error(self, client, fake_db):
        fake_db.failing_tables.add("branches")

        response = client.get("/api/v1/branches/cccccccc-0000-0000-0000-000000000001")

        assert response.status_code == 500
        assert response.json()["code"] == "DATABASE_ERROR"
