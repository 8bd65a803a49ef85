"""Shared test fixtures for jscsession.

Provides an isolated configuration environment, output state management,
a CLI runner, and a scripted Jamf ID identity provider served through
:class:`httpx.MockTransport`. These fixtures are automatically discovered
by pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional, Union

import httpx
import pytest

from jscsession.models import LoginConfig
from jscsession.output import OutputFormat, OutputManager, reset_output, set_output


TENANT = "radar.example.com"
IDP = "id.example.com"

IDENTIFIER_PAGE = """<!doctype html>
<html><body>
<form method="POST" class="c-login">
  <input type="hidden" name="state" value="st-1">
  <input type="hidden" name="csrf" value="abc123">
  <input type="text" name="username" value="">
  <input type="submit" name="action" value="default">
  <button type="submit" name="action" value="default">Continue</button>
</form>
</body></html>
"""

PASSWORD_PAGE = """<!doctype html>
<html><body>
<form method="POST">
  <input type="hidden" name="state" value="st-2">
  <input type="hidden" name="csrf" value="def456">
  <input type="hidden" name="username" value="admin@example.com">
  <input type="password" name="password">
  <input type="submit" name="action" value="default">
</form>
</body></html>
"""


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless OutputManager as the global instance."""
    mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(mgr)
    return mgr


# ---------------------------------------------------------------------------
# Isolated configuration environment
# ---------------------------------------------------------------------------


@pytest.fixture
def tmp_config_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG dirs at tmp_path, clear JSC_* variables and chdir into tmp_path.

    Returns the temporary working directory, where a ``jscsession.json``
    project config may be written.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in (
        "JSC_DOMAIN",
        "JSC_USERNAME",
        "JSC_PASSWORD",
        "JSC_PASSWORD_SOURCE",
        "JSC_CUSTOMER_ID",
    ):
        monkeypatch.delenv(var, raising=False)
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return work


@pytest.fixture
def cli_runner():
    """Typer CliRunner for exercising CLI commands."""
    from typer.testing import CliRunner

    return CliRunner()


# ---------------------------------------------------------------------------
# Scripted identity provider
# ---------------------------------------------------------------------------


def _redirect(location: str, status: int = 302) -> httpx.Response:
    return httpx.Response(status, headers={"location": location})


def _html(body: Union[str, bytes], status: int = 200) -> httpx.Response:
    content = body.encode("utf-8") if isinstance(body, str) else body
    return httpx.Response(
        status,
        headers={"content-type": "text/html; charset=utf-8"},
        content=content,
    )


class MockIdentityProvider:
    """A scripted tenant plus Jamf ID provider behind one MockTransport.

    The default script is a successful login:

    1. ``GET https://radar.example.com/oauth2/authorization/jamf-auth0-us``
       redirects to ``https://id.example.com/u/login/identifier``.
    2. ``POST /u/login/identifier`` redirects to ``/u/login/password``.
    3. ``POST /u/login/password`` redirects to ``https://radar.example.com/dashboard``,
       which sets ``SESSION`` and ``XSRF-TOKEN``.

    Tests override individual pages through the ``on_*`` attributes.
    Cookie templates in :attr:`session_cookies` may use ``{user}``, filled
    from the landing URL's ``user`` query parameter.
    Every request is recorded in :attr:`requests`.
    """

    redirect = staticmethod(_redirect)
    html = staticmethod(_html)

    def __init__(self, tenant: str = TENANT) -> None:
        self.tenant = tenant
        self.requests: list[httpx.Request] = []
        self.identifier_page: Union[str, bytes] = IDENTIFIER_PAGE
        self.password_page: Union[str, bytes] = PASSWORD_PAGE
        self.landing_url = f"https://{tenant}/dashboard"
        self.session_cookies = [
            "SESSION=tok1; Path=/; Secure; HttpOnly",
            "XSRF-TOKEN=tok2; Path=/; Secure",
        ]
        self.on_authorize: Optional[Callable[[httpx.Request], httpx.Response]] = None
        self.on_identifier_post: Optional[Callable[[httpx.Request], httpx.Response]] = None
        self.on_password_post: Optional[Callable[[httpx.Request], httpx.Response]] = None

    # ------------------------------------------------------------------ #

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def posts_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST" and r.url.path == path]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        path = request.url.path

        if host == self.tenant and path.startswith("/oauth2/authorization/"):
            if self.on_authorize:
                return self.on_authorize(request)
            return _redirect(f"https://{IDP}/u/login/identifier?state=st-1")

        if host == IDP and path == "/u/login/identifier":
            if request.method == "GET":
                return _html(self.identifier_page)
            if self.on_identifier_post:
                return self.on_identifier_post(request)
            return _redirect("/u/login/password?state=st-2")

        if host == IDP and path == "/u/login/password":
            if request.method == "GET":
                return _html(self.password_page)
            if self.on_password_post:
                return self.on_password_post(request)
            return _redirect(self.landing_url)

        landing = httpx.URL(self.landing_url)
        if host == landing.host and path == landing.path:
            user = request.url.params.get("user", "")
            return httpx.Response(
                200,
                headers=[("content-type", "text/html")]
                + [("set-cookie", c.format(user=user)) for c in self.session_cookies],
                text="<html><body>Dashboard</body></html>",
            )

        return httpx.Response(404, text="not found")


@pytest.fixture
def mock_idp() -> MockIdentityProvider:
    """A fresh scripted identity provider for one test."""
    return MockIdentityProvider()


@pytest.fixture
def login_config() -> LoginConfig:
    """LoginConfig pointed at the scripted tenant."""
    return LoginConfig(
        domain=TENANT,
        username="admin@example.com",
        password="hunter2",
    )
