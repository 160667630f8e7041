# =============================================================================
# tests/test_auth.py - Token Verification Tests
# =============================================================================
# Tokens are signed with the HS256 test secret set in conftest, or with an
# ES256 key served from a stubbed JWKS endpoint.
# =============================================================================

import time

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from fastapi import HTTPException
from jose import jwk, jwt

from app.auth import dependencies
from app.auth.dependencies import JWKS_CACHE_TTL, JWT_AUDIENCE, decode_token, fetch_jwks
from app.config import settings
from tests.conftest import TEST_USER_ID


def make_token(**claims) -> str:
    payload = {
        "sub": TEST_USER_ID,
        "email": "agent@rentaldesk.test",
        "aud": JWT_AUDIENCE,
        "exp": int(time.time()) + 3600,
        **claims,
    }
    return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm="HS256")


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def claims() -> dict:
    return {"sub": TEST_USER_ID, "aud": JWT_AUDIENCE, "exp": int(time.time()) + 60}


@pytest.fixture
def signing_key():
    """An ES256 private key (PEM) and its public JWK published as kid "key-1"."""
    private_key = ec.generate_private_key(ec.SECP256R1())
    private_pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    public_pem = private_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    public_jwk = {**jwk.construct(public_pem, "ES256").to_dict(), "kid": "key-1", "use": "sig"}
    return private_pem, public_jwk


@pytest.fixture
def jwks_endpoint(monkeypatch, signing_key):
    """
    Serve the signing key from a stubbed JWKS endpoint with an empty cache.

    Set `endpoint.status` to make later fetches fail; `endpoint.requests`
    counts the fetches.
    """
    monkeypatch.setattr(dependencies, "_jwks_cache", {})
    monkeypatch.setattr(dependencies, "_jwks_fetched_at", 0.0)

    class Endpoint:
        status = 200
        requests = 0

    endpoint = Endpoint()

    def fake_get(url, timeout=None):
        endpoint.requests += 1
        return httpx.Response(
            endpoint.status,
            json={"keys": [signing_key[1]]},
            request=httpx.Request("GET", url),
        )

    monkeypatch.setattr(dependencies.httpx, "get", fake_get)
    return endpoint


class TestDecodeToken:

    def test_valid_token(self):
        user = decode_token(make_token())

        assert str(user.id) == TEST_USER_ID
        assert user.email == "agent@rentaldesk.test"

    def test_expired_token(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_token(make_token(exp=int(time.time()) - 60))

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token has expired"

    def test_wrong_audience(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_token(make_token(aud="anon"))

        assert exc_info.value.status_code == 401

    def test_wrong_secret(self):
        token = jwt.encode(
            {"sub": TEST_USER_ID, "aud": JWT_AUDIENCE, "exp": int(time.time()) + 60},
            "some-other-secret",
            algorithm="HS256",
        )

        with pytest.raises(HTTPException):
            decode_token(token)

    def test_malformed_subject(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_token(make_token(sub="not-a-uuid"))

        assert exc_info.value.detail == "Invalid token: malformed user ID"


class TestHS256WithoutSecret:
    """A project without a JWT secret only accepts tokens from its published keys."""

    @pytest.fixture(autouse=True)
    def no_secret(self, monkeypatch):
        monkeypatch.setattr(settings, "SUPABASE_JWT_SECRET", "")

    def test_token_signed_with_empty_secret_rejected(self):
        token = jwt.encode(claims(), "", algorithm="HS256")

        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid token: HS256 tokens are not accepted"

    def test_unreadable_header_rejected(self):
        with pytest.raises(HTTPException) as exc_info:
            decode_token("not-a-jwt")

        assert exc_info.value.status_code == 401

    def test_endpoint_rejects_empty_secret_token(self, anonymous_client):
        token = jwt.encode(claims(), "", algorithm="HS256")

        response = anonymous_client.get("/api/v1/auth/verify", headers=bearer(token))

        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"


class TestPublishedKeys:

    def test_es256_token_verified_by_kid(self, jwks_endpoint, signing_key):
        token = jwt.encode(claims(), signing_key[0], algorithm="ES256", headers={"kid": "key-1"})

        user = decode_token(token)

        assert str(user.id) == TEST_USER_ID

    def test_unknown_kid_rejected(self, jwks_endpoint, signing_key):
        token = jwt.encode(claims(), signing_key[0], algorithm="ES256", headers={"kid": "rotated-out"})

        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)

        assert exc_info.value.detail == "Invalid token: unknown signing key"

    def test_missing_kid_does_not_fall_back_to_secret(self, jwks_endpoint):
        token = jwt.encode(claims(), settings.SUPABASE_JWT_SECRET, algorithm="HS512")

        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)

        assert exc_info.value.detail == "Invalid token: unknown signing key"

    def test_keys_cached_for_an_hour(self, jwks_endpoint, signing_key):
        token = jwt.encode(claims(), signing_key[0], algorithm="ES256", headers={"kid": "key-1"})

        decode_token(token)
        decode_token(token)

        assert jwks_endpoint.requests == 1

    def test_expired_cache_refetched(self, jwks_endpoint, monkeypatch):
        fetch_jwks()
        monkeypatch.setattr(dependencies, "_jwks_fetched_at", time.time() - JWKS_CACHE_TTL - 1)

        fetch_jwks()

        assert jwks_endpoint.requests == 2

    def test_failed_refresh_keeps_last_keys(self, jwks_endpoint, signing_key, monkeypatch):
        fetch_jwks()
        monkeypatch.setattr(dependencies, "_jwks_fetched_at", time.time() - JWKS_CACHE_TTL - 1)
        jwks_endpoint.status = 500
        token = jwt.encode(claims(), signing_key[0], algorithm="ES256", headers={"kid": "key-1"})

        user = decode_token(token)

        assert jwks_endpoint.requests == 2
        assert str(user.id) == TEST_USER_ID

    def test_unreachable_endpoint_rejects(self, jwks_endpoint, signing_key):
        jwks_endpoint.status = 503
        token = jwt.encode(claims(), signing_key[0], algorithm="ES256", headers={"kid": "key-1"})

        with pytest.raises(HTTPException) as exc_info:
            decode_token(token)

        assert exc_info.value.status_code == 401


class TestAuthEndpoints:

    def test_missing_header(self, anonymous_client):
        response = anonymous_client.get("/api/v1/vehicles")

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Not authenticated", "code": "UNAUTHORIZED"}
        assert response.headers["www-authenticate"] == "Bearer"

    def test_bad_token(self, anonymous_client):
        response = anonymous_client.get("/api/v1/branches", headers=bearer("garbage"))

        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    def test_verify(self, anonymous_client):
        response = anonymous_client.get("/api/v1/auth/verify", headers=bearer(make_token()))

        assert response.json() == {"valid": True, "user_id": TEST_USER_ID, "email": "agent@rentaldesk.test"}

    def test_me_without_profile_uses_token(self, anonymous_client):
        response = anonymous_client.get("/api/v1/auth/me", headers=bearer(make_token()))

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == TEST_USER_ID
        assert body["email"] == "agent@rentaldesk.test"
        assert body["first_name"] is None

    def test_me_with_profile(self, anonymous_client, fake_db):
        fake_db.seed("profiles", {
            "id": TEST_USER_ID,
            "first_name": "Nora",
            "last_name": "Aziz",
            "roles": {"name": "Manager"},
            "branches": {"name": "Riyadh", "code": "RUH"},
        })

        body = anonymous_client.get("/api/v1/auth/me", headers=bearer(make_token())).json()

        assert body["first_name"] == "Nora"
        assert body["roles"] == {"name": "Manager"}
        assert body["email"] == "agent@rentaldesk.test"
