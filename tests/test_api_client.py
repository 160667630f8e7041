# =============================================================================
# tests/test_api_client.py - API Client Tests
# =============================================================================
# Requests are answered by an httpx.MockTransport; nothing leaves the process.
# =============================================================================

import httpx
import pytest

from lib.api_client import RentalDeskApiError, RentalDeskClient

BASE_URL = "http://rentaldesk.test"


def make_client(handler, **kwargs) -> RentalDeskClient:
    transport = httpx.MockTransport(handler)
    return RentalDeskClient(BASE_URL, client=httpx.Client(transport=transport), **kwargs)


class TestRentalDeskClient:

    def test_sends_bearer_token(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            seen["url"] = str(request.url)
            return httpx.Response(200, json={"success": True})

        with make_client(handler, token="abc") as client:
            assert client.get("/api/v1/branches", params={"page": 2}) == {"success": True}

        assert seen["auth"] == "Bearer abc"
        assert seen["url"] == f"{BASE_URL}/api/v1/branches?page=2"

    def test_token_provider_called_per_request(self):
        tokens = iter(["first", "second"])
        seen = []

        def handler(request):
            seen.append(request.headers.get("Authorization"))
            return httpx.Response(200, json={})

        client = make_client(handler, token_provider=lambda: next(tokens))
        client.get("/a")
        client.get("/b")

        assert seen == ["Bearer first", "Bearer second"]

    def test_no_token_no_header(self):
        def handler(request):
            assert "Authorization" not in request.headers
            return httpx.Response(204)

        assert make_client(handler).delete("/api/v1/branches/1") is None

    def test_unauthorized_clears_token(self):
        signed_out = []

        def handler(request):
            return httpx.Response(401, json={"success": False, "error": "Token has expired", "code": "UNAUTHORIZED"})

        client = make_client(handler, token="stale", on_unauthorized=lambda: signed_out.append(True))

        with pytest.raises(RentalDeskApiError) as exc_info:
            client.get("/api/v1/vehicles")

        assert str(exc_info.value) == "Token has expired"
        assert exc_info.value.status_code == 401
        assert client.token is None
        assert signed_out == [True]

    def test_error_without_envelope(self):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        with pytest.raises(RentalDeskApiError) as exc_info:
            make_client(handler).get("/api/v1/vehicles")

        assert str(exc_info.value) == "Request failed with status 502"
        assert exc_info.value.details == "Bad Gateway"

    def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        with pytest.raises(RentalDeskApiError, match="Request failed"):
            make_client(handler).get("/api/v1/health")

    def test_list_all(self):
        def handler(request):
            assert request.url.params["limit"] == "-1"
            assert request.url.params["is_active"] == "true"
            return httpx.Response(200, json={"success": True, "branches": [{"id": "1"}, {"id": "2"}]})

        rows = make_client(handler).list_all("/api/v1/branches", "branches", params={"is_active": "true"})

        assert [row["id"] for row in rows] == ["1", "2"]
