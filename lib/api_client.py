# =============================================================================
# lib/api_client.py - RentalDesk API Client
# =============================================================================
# Thin httpx client for scripts and services that talk to the RentalDesk API.
#
# Authentication:
# - Pass a Supabase access token as `token`, or
# - Pass a `token_provider` callable, invoked before every request
#
# A 401 response clears the stored token and calls `on_unauthorized`, which
# is where a UI signs the user out. Requests are never retried.
#
# Usage:
#   client = RentalDeskClient("http://localhost:8000", token=access_token)
#   vehicles = client.get("/api/v1/vehicles", params={"page": 1, "limit": 10})
#   branches = client.list_all("/api/v1/branches", "branches")
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import httpx

logger = logging.getLogger(__name__)


class RentalDeskApiError(Exception):
    """
    Non-2xx response from the API.

    Args:
        message: The `error` field of the response envelope when present.
        status_code: HTTP status of the response.
        details: Decoded response body (or raw text when it isn't JSON).
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class RentalDeskClient:
    """HTTP client for the RentalDesk REST API."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        """
        Args:
            base_url: Server root, e.g. ``http://localhost:8000``.
            token: Supabase access token (without the ``Bearer`` prefix).
            token_provider: Callable returning the current token before each request.
            on_unauthorized: Called once for every 401 response.
            timeout: Default timeout of the internal httpx client.
            client: Preconfigured ``httpx.Client`` to use instead.
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._token_provider = token_provider
        self._on_unauthorized = on_unauthorized
        self._client = client or httpx.Client(timeout=timeout)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        if self._token_provider is not None:
            self.token = self._token_provider()

        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _handle_unauthorized(self) -> None:
        self.token = None
        if self._on_unauthorized is not None:
            self._on_unauthorized()

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> Any:
        """
        Send one request and return the decoded JSON body.

        Raises:
            RentalDeskApiError: On any non-2xx status or transport failure.
        """
        try:
            response = self._client.request(
                method,
                self._url(path),
                params=params,
                json=json,
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            raise RentalDeskApiError(f"Request failed: {e}") from e

        body = self._decode(response)

        if response.status_code == 401:
            logger.info(f"{method} {path} returned 401, clearing token")
            self._handle_unauthorized()

        if response.is_error:
            message = f"Request failed with status {response.status_code}"
            if isinstance(body, dict) and body.get("error"):
                message = str(body["error"])
            raise RentalDeskApiError(message, status_code=response.status_code, details=body)

        return body

    # -------------------------------------------------------------------------
    # Verbs
    # -------------------------------------------------------------------------

    def get(self, path: str, params: Optional[dict[str, Any]] = None, json: Optional[Any] = None) -> Any:
        return self.request("GET", path, params=params, json=json)

    def post(self, path: str, params: Optional[dict[str, Any]] = None, json: Optional[Any] = None) -> Any:
        return self.request("POST", path, params=params, json=json)

    def put(self, path: str, params: Optional[dict[str, Any]] = None, json: Optional[Any] = None) -> Any:
        return self.request("PUT", path, params=params, json=json)

    def patch(self, path: str, params: Optional[dict[str, Any]] = None, json: Optional[Any] = None) -> Any:
        return self.request("PATCH", path, params=params, json=json)

    def delete(self, path: str, params: Optional[dict[str, Any]] = None, json: Optional[Any] = None) -> Any:
        return self.request("DELETE", path, params=params, json=json)

    def list_all(self, path: str, key: str, params: Optional[dict[str, Any]] = None) -> list[dict[str, Any]]:
        """
        Every row of a paginated list endpoint in one call.

        Args:
            path: List endpoint, e.g. ``/api/v1/vehicles``.
            key: Response key holding the rows, e.g. ``vehicles``.
            params: Extra filters sent with ``limit=-1``.
        """
        query = {**(params or {}), "limit": -1}
        body = self.get(path, params=query)
        if not isinstance(body, dict):
            return []
        return body.get(key) or []

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "RentalDeskClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
