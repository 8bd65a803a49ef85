"""Request artifacts produced by authentication.

:class:`AuthResult` is the hand-off point between the login flow and every
consumer that makes authenticated API calls. It is a plain container for
the HTTP headers and cookies to attach to outgoing requests, built by
:meth:`~jscsession.models.SessionCredentials.to_auth_result` and merged
into requests by :class:`~jscsession.client.sync_client.SyncClient`.
"""

from __future__ import annotations


class AuthResult:
    """Container for authentication artifacts to inject into HTTP requests.

    Args:
        headers: HTTP headers to add (e.g. ``{"X-XSRF-TOKEN": "..."}``).
        cookies: Cookies to add (serialised into a ``Cookie`` header by the client).

    Example::

        result = AuthResult(cookies={"SESSION": "tok1"})
        assert result.cookie_header() == "SESSION=tok1"
    """

    def __init__(
        self,
        headers: dict[str, str] | None = None,
        cookies: dict[str, str] | None = None,
    ):
        self.headers = headers or {}
        self.cookies = cookies or {}

    def cookie_header(self) -> str:
        """Render :attr:`cookies` as a ``Cookie`` header value."""
        return "; ".join(f"{k}={v}" for k, v in self.cookies.items())
