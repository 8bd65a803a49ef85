"""Synchronous HTTP client for authenticated tenant API calls.

This module provides :class:`SyncClient`, the blocking client used by the
``jscsession request`` command and by library callers that already hold
:class:`~jscsession.models.SessionCredentials`. It wraps
:class:`httpx.Client` and layers on:

- **Auth injection** -- the :class:`~jscsession.auth.base.AuthResult` of a
  login is merged into every outgoing request as a ``Cookie`` header plus
  ``X-XSRF-TOKEN``.
- **Customer id substitution** -- the ``{customerid}`` placeholder used in
  tenant paths is replaced with the configured customer id.
- **Error mapping** -- HTTP error statuses and transport failures become
  typed :mod:`jscsession.exceptions`.

Requests are sent once; there is no retry.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx

from jscsession.auth.base import AuthResult
from jscsession.exceptions import (
    AuthError,
    ConnectionError_,
    InvalidUsageError,
    NotFoundError,
    ServerError,
)
from jscsession.models import RequestConfig, SessionCredentials
from jscsession.output import debug

CUSTOMER_ID_PLACEHOLDER = "{customerid}"
_NO_BODY: Any = object()


class SyncClient:
    """Synchronous HTTP client for tenant API calls.

    Must be used as a context manager so that the underlying transport is
    properly opened and closed.

    Args:
        domain: The tenant domain, e.g. ``"radar.wandera.com"``.
        credentials: Tokens from a completed login.
        customer_id: Value substituted for ``{customerid}`` in request paths.
        request: Timeout and TLS settings.
        scheme: URL scheme of the tenant.
        transport: Optional httpx transport override.

    Example::

        with SyncClient(domain, credentials) as client:
            response = client.get("/gate/identity-service/v1/connections")
    """

    def __init__(
        self,
        domain: str,
        credentials: SessionCredentials,
        customer_id: Optional[str] = None,
        request: Optional[RequestConfig] = None,
        scheme: str = "https",
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = f"{scheme}://{domain}"
        self._auth_result: AuthResult = credentials.to_auth_result()
        self._customer_id = customer_id
        self._request = request or RequestConfig()
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> SyncClient:
        self._client = httpx.Client(
            base_url=self._base_url,
            timeout=self._request.timeout,
            verify=self._request.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        json_body: Any = _NO_BODY,
    ) -> httpx.Response:
        """Make an authenticated HTTP request with error mapping.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE).
            path: URL path appended to the tenant origin. May contain
                ``{customerid}``.
            params: Query parameters.
            headers: Extra request headers.
            json_body: JSON-serialisable body. ``None`` is sent as ``null``;
                omit the argument to send no body.

        Returns:
            The :class:`httpx.Response` from the server.

        Raises:
            InvalidUsageError: If *path* needs a customer id and none is set.
            AuthError: On 401 / 403, typically an expired session.
            NotFoundError: On 404.
            ServerError: On any other error status.
            ConnectionError_: On network / timeout errors.
        """
        assert self._client is not None, "Client not initialised -- use as context manager"

        merged_headers = self._inject_auth({"Accept": "application/json", **(headers or {})})
        resolved_path = self._resolve_path(path)

        kwargs: dict[str, Any] = {"headers": merged_headers, "params": params}
        if json_body is not _NO_BODY:
            # httpx treats json=None as "no body", so encode here to keep null.
            kwargs["content"] = json.dumps(json_body).encode("utf-8")
            if not any(k.lower() == "content-type" for k in merged_headers):
                merged_headers["Content-Type"] = "application/json"

        try:
            response = self._client.request(method.upper(), resolved_path, **kwargs)
        except httpx.RequestError as exc:
            raise ConnectionError_(f"Request {method.upper()} {resolved_path} failed: {exc}") from exc

        debug(f"{method.upper()} {response.url} -> {response.status_code}")
        self._map_response_error(response)
        return response

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        """Send a GET request."""
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> httpx.Response:
        """Send a POST request."""
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> httpx.Response:
        """Send a PUT request."""
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        """Send a DELETE request."""
        return self.request("DELETE", path, **kwargs)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _inject_auth(self, headers: dict[str, str]) -> dict[str, str]:
        """Merge auth headers and cookies into *headers*."""
        # Auth headers first so that caller-supplied values can override them.
        merged = {**self._auth_result.headers, **headers}
        cookie_str = self._auth_result.cookie_header()
        if cookie_str:
            existing = merged.get("Cookie")
            merged["Cookie"] = f"{existing}; {cookie_str}" if existing else cookie_str
        return merged

    def _resolve_path(self, path: str) -> str:
        if CUSTOMER_ID_PLACEHOLDER not in path:
            return path
        if not self._customer_id:
            raise InvalidUsageError(
                f"Path '{path}' requires a customer id: pass --customer-id or set JSC_CUSTOMER_ID"
            )
        return path.replace(CUSTOMER_ID_PLACEHOLDER, self._customer_id)

    def _map_response_error(self, response: httpx.Response) -> None:
        """Raise a typed exception for error HTTP status codes."""
        status = response.status_code
        if status < 400:
            return

        try:
            detail = response.json()
            if isinstance(detail, dict):
                msg = detail.get("message") or detail.get("error") or detail.get("detail") or ""
            else:
                msg = str(detail)
        except ValueError:
            msg = response.text[:200] if response.text else ""

        prefix = f"HTTP {status}"
        full_msg = f"{prefix}: {msg}" if msg else prefix

        if status in (401, 403):
            raise AuthError(f"{full_msg} (session rejected -- log in again)")
        if status == 404:
            raise NotFoundError(full_msg)
        raise ServerError(full_msg)
