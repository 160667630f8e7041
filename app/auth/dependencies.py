# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Verifies the Supabase access token sent as `Authorization: Bearer <jwt>`.
#
# Two signing schemes are accepted:
# - HS256 with the project's JWT secret (legacy projects)
# - Asymmetric keys (ES256/RS256) published at the project's JWKS endpoint
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/vehicles")
#   async def list_vehicles(user: AuthUser = Depends(get_current_user)):
#       ...
# =============================================================================

import logging
import time
from typing import Any, Optional
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from app.auth.models import AuthUser
from app.config import settings

logger = logging.getLogger(__name__)

# Missing headers are reported by get_current_user itself, as 401
bearer_scheme = HTTPBearer(auto_error=False)

JWT_AUDIENCE = "authenticated"
JWKS_CACHE_TTL = 3600  # seconds

_jwks_cache: dict[str, Any] = {}
_jwks_fetched_at: float = 0.0


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _jwks_url() -> str:
    return f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"


def fetch_jwks() -> dict[str, Any]:
    """
    The project's public signing keys, cached for JWKS_CACHE_TTL.

    A failed refresh keeps serving the previous keys.
    """
    global _jwks_cache, _jwks_fetched_at

    now = time.time()
    if _jwks_cache and now - _jwks_fetched_at < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        response = httpx.get(_jwks_url(), timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_fetched_at = now
        logger.debug("Refreshed JWKS")
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch JWKS: {e}")

    return _jwks_cache or {"keys": []}


def _hs256_key() -> tuple[Any, str]:
    if not settings.SUPABASE_JWT_SECRET:
        raise _unauthorized("Invalid token: HS256 tokens are not accepted")
    return settings.SUPABASE_JWT_SECRET, "HS256"


def resolve_signing_key(token: str) -> tuple[Any, str]:
    """
    Pick the key and algorithm to verify a token with.

    Returns:
        Tuple of (key, algorithm). HS256 tokens and tokens with an
        unreadable header use the JWT secret.

    Raises:
        HTTPException: 401 when the token needs the JWT secret and none is
            configured, or names a kid the project doesn't publish
    """
    try:
        header = jwt.get_unverified_header(token)
    except JWTError:
        return _hs256_key()

    algorithm = header.get("alg", "HS256")
    if algorithm == "HS256":
        return _hs256_key()

    key_id = header.get("kid")
    for key in fetch_jwks().get("keys", []):
        if key_id and key.get("kid") == key_id:
            return key, algorithm

    logger.warning(f"No published key for kid={key_id}")
    raise _unauthorized("Invalid token: unknown signing key")


def decode_token(token: str) -> AuthUser:
    """
    Verify a token and build the AuthUser it identifies.

    Raises:
        HTTPException: 401 if the token is expired, invalid, or has no
            usable `sub` claim
    """
    key, algorithm = resolve_signing_key(token)

    try:
        payload = jwt.decode(token, key, algorithms=[algorithm], audience=JWT_AUDIENCE)
    except ExpiredSignatureError:
        logger.warning("Rejected expired token")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {e}")

    subject = payload.get("sub")
    if not subject:
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_id = UUID(subject)
    except ValueError:
        raise _unauthorized("Invalid token: malformed user ID")

    return AuthUser(id=user_id, email=payload.get("email"))


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthUser:
    """
    Authenticated user for the request.

    Raises:
        HTTPException: 401 when the header is missing or the token is bad
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Not authenticated")

    user = decode_token(credentials.credentials)
    logger.debug(f"Authenticated user: {user.id}")
    return user


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[AuthUser]:
    """Like get_current_user, but None instead of 401."""
    if credentials is None:
        return None
    try:
        return decode_token(credentials.credentials)
    except HTTPException:
        return None
