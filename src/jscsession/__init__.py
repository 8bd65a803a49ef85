"""jscsession -- log into Jamf Security Cloud the way a browser does.

The JSC (Radar) tenant APIs are authorised by a ``SESSION`` cookie and an
``XSRF-TOKEN`` anti-forgery token that the tenant only hands out at the end
of an interactive Jamf ID login. This package drives that login over plain
HTTP -- following redirects, replaying hidden form fields, submitting the
username and then the password -- and returns the two tokens, or a typed
error naming the step that failed.

Typical usage::

    from jscsession import LoginConfig, authenticate

    result = authenticate(LoginConfig(username="admin@example.com", password="..."))
    session_token, xsrf_token = result.tokens

Modules:
    auth: The login flow, form extraction, and credential extraction.
    client: Authenticated HTTP client for the tenant's REST APIs.
    app: Typer CLI entry point.
    models: Pydantic models shared across the package.
    config: Config precedence and credential-source resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"

from jscsession.auth.flow import JamfIdLoginFlow, authenticate  # noqa: E402
from jscsession.models import LoginConfig, LoginResult, SessionCredentials  # noqa: E402

__all__ = [
    "JamfIdLoginFlow",
    "LoginConfig",
    "LoginResult",
    "SessionCredentials",
    "authenticate",
]
