"""Canonical Pydantic models shared across all jscsession modules.

This is the single source of truth for data shapes in the project. The models
fall into two groups:

**Configuration models** -- built from CLI flags, environment variables and
the project-local ``jscsession.json``:
    :class:`RequestConfig`, :class:`LoginConfig`, and :class:`ProjectConfig`.

**Login outcome models** -- produced by the login flow and consumed by the
authenticated API client:
    :class:`SessionCredentials`, :class:`LoginWarning`, and
    :class:`LoginResult`.

All models use Pydantic v2.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from jscsession.auth.base import AuthResult


DEFAULT_DOMAIN = "radar.wandera.com"
"""Default JSC tenant domain."""

SESSION_COOKIE = "SESSION"
"""Name of the session cookie issued after a successful login."""

XSRF_COOKIE = "XSRF-TOKEN"
"""Name of the anti-forgery cookie issued alongside the session cookie."""

XSRF_HEADER = "X-XSRF-TOKEN"
"""Header that echoes the anti-forgery token on API requests."""


# --- Configuration ---


class RequestConfig(BaseModel):
    """HTTP transport settings shared by the login flow and the API client."""

    timeout: float = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class LoginConfig(BaseModel):
    """Everything one login attempt needs.

    A ``LoginConfig`` is passed explicitly into the flow and lives only as
    long as the caller keeps it. Nothing in the package stores credentials
    in module-level state.

    Example::

        LoginConfig(
            domain="radar.wandera.com",
            username="admin@example.com",
            password="hunter2",
        )
    """

    domain: str = Field(default=DEFAULT_DOMAIN, description="The JSC tenant domain")
    username: str = Field(description="Local Jamf ID account; SSO/SAML accounts are not supported")
    password: str = Field(repr=False, description="Password for the local account")
    registration: str = Field(
        default="jamf-auth0-us",
        description="OAuth2 client registration that starts the login",
    )
    connection: str = Field(
        default="jamf-id-db",
        description="Identity-provider connection selecting local-account login",
    )
    scheme: str = Field(default="https", description="URL scheme of the tenant")
    request: RequestConfig = Field(default_factory=RequestConfig)

    @property
    def base_url(self) -> str:
        """Origin of the tenant, e.g. ``https://radar.wandera.com``."""
        return f"{self.scheme}://{self.domain}"


class ProjectConfig(BaseModel):
    """Project-local defaults loaded from ``./jscsession.json``.

    Only non-secret settings belong here; the password is referenced through
    ``password_source`` (``env:VAR``, ``file:/path`` or ``prompt``).
    """

    model_config = ConfigDict(extra="ignore")

    domain: Optional[str] = None
    username: Optional[str] = None
    password_source: Optional[str] = None
    customer_id: Optional[str] = None
    request: RequestConfig = Field(default_factory=RequestConfig)


# --- Login outcome ---


class SessionCredentials(BaseModel):
    """The two tokens a completed login yields.

    ``session_token`` is always non-empty. ``xsrf_token`` may be empty on
    deployments that do not issue an anti-forgery cookie.
    """

    session_token: str = Field(repr=False)
    xsrf_token: str = Field(default="", repr=False)

    def to_auth_result(self) -> AuthResult:
        """Convert the tokens into request artifacts for the API client.

        The session and anti-forgery tokens travel as cookies; the
        anti-forgery token is echoed in the ``X-XSRF-TOKEN`` header as the
        tenant's CSRF protection expects.
        """
        from jscsession.auth.base import AuthResult

        cookies = {SESSION_COOKIE: self.session_token}
        headers: dict[str, str] = {}
        if self.xsrf_token:
            cookies[XSRF_COOKIE] = self.xsrf_token
            headers[XSRF_HEADER] = self.xsrf_token
        return AuthResult(headers=headers, cookies=cookies)


class LoginWarning(BaseModel):
    """A non-fatal anomaly observed during login.

    Attributes:
        code: Machine-readable identifier, e.g. ``"domain_mismatch"``.
        message: Human-readable description.
        url: The URL the anomaly was observed on, if any.
    """

    code: str
    message: str
    url: Optional[str] = None


class LoginResult(BaseModel):
    """Outcome of a successful login attempt."""

    credentials: SessionCredentials
    final_url: str
    warnings: list[LoginWarning] = Field(default_factory=list)

    @property
    def tokens(self) -> tuple[str, str]:
        """The ``(session_token, xsrf_token)`` pair."""
        return self.credentials.session_token, self.credentials.xsrf_token
