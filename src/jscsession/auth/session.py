"""HTTP session context for one login attempt.

:class:`LoginSession` owns a single :class:`httpx.Client` with its own,
initially empty cookie jar and automatic redirect following. Every request
of a login attempt goes through the same instance, so cookies set by one
step are presented by the next. Attempts never share a session; two
tenants logging in from the same process cannot see each other's cookies.

No retries happen here. A transport failure is raised immediately as
:class:`~jscsession.exceptions.LoginTransportError` naming the step.
"""

from __future__ import annotations

from typing import Optional

import httpx

from jscsession import __version__
from jscsession.auth.forms import FormSnapshot
from jscsession.exceptions import LoginTransportError
from jscsession.models import RequestConfig
from jscsession.output import debug

_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    f"Chrome/126.0 Safari/537.36 jscsession/{__version__}"
)


class LoginSession:
    """Cookie-carrying, redirect-following HTTP client for a single login.

    Must be used as a context manager so that the underlying transport is
    opened and closed around the attempt.

    Args:
        request: Timeout and TLS settings. Defaults to :class:`RequestConfig`.
        transport: Optional transport override, e.g. an
            :class:`httpx.MockTransport` in tests.

    Example::

        with LoginSession() as session:
            response = session.get("initiate", authorize_url)
            cookies = session.cookies
    """

    def __init__(
        self,
        request: Optional[RequestConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._request = request or RequestConfig()
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> LoginSession:
        self._client = httpx.Client(
            timeout=self._request.timeout,
            verify=self._request.verify_ssl,
            follow_redirects=True,
            cookies=httpx.Cookies(),
            headers={
                "User-Agent": _USER_AGENT,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            },
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #

    @property
    def cookies(self) -> httpx.Cookies:
        """Every cookie collected so far, across all responses and redirect hops."""
        assert self._client is not None, "Session not open -- use as context manager"
        return self._client.cookies

    def get(self, step: str, url: str) -> httpx.Response:
        """Send a GET for *step*, following redirects to the final page."""
        return self._send(step, "GET", url)

    def submit_form(self, step: str, url: str, form: FormSnapshot) -> httpx.Response:
        """POST *form* URL-encoded to *url*, the way a browser submits a page's form."""
        return self._send(step, "POST", url, data=form.to_form_data())

    def _send(
        self,
        step: str,
        method: str,
        url: str,
        data: Optional[dict[str, list[str]]] = None,
    ) -> httpx.Response:
        assert self._client is not None, "Session not open -- use as context manager"
        try:
            response = self._client.request(method, url, data=data)
        except httpx.RequestError as exc:
            raise LoginTransportError(
                f"Login step '{step}' failed: {method} {url}: {exc}",
                step=step,
            ) from exc

        hops = len(response.history)
        debug(
            f"[{step}] {method} {url} -> {response.status_code} {response.url}"
            + (f" ({hops} redirect{'s' if hops != 1 else ''})" if hops else "")
        )
        return response
