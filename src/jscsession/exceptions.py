"""Exception hierarchy for jscsession.

All exceptions inherit from :class:`JscSessionError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`jscsession.exit_codes`.
The top-level error handler in :func:`jscsession.app.main` catches
``JscSessionError``, prints the message verbatim and exits with the
appropriate code.

Failures of the browser login flow derive from :class:`LoginError`, which
records the step that failed so an operator can tell a bad password from a
provider outage without a network trace.

Subclass hierarchy::

    JscSessionError (exit 1)
    +-- InvalidUsageError            (exit 2)
    +-- ConfigError                  (exit 1)
    +-- AuthError                    (exit 3)
    |   +-- LoginError               (exit 3)
    |       +-- LoginTransportError      (exit 6)
    |       |   +-- UnexpectedStatusError (exit 6)
    |       +-- UnexpectedLocationError  (exit 5)
    |       +-- InvalidUsernameError     (exit 3)
    |       +-- InvalidCredentialsError  (exit 3)
    |       +-- MalformedDocumentError   (exit 5)
    |       +-- MissingSessionCookieError (exit 3)
    +-- NotFoundError                (exit 4)
    +-- ServerError                  (exit 5)
    +-- ConnectionError_             (exit 6)
"""

from __future__ import annotations

from jscsession.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)


class JscSessionError(Exception):
    """Base exception for all jscsession errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`jscsession.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(JscSessionError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(JscSessionError):
    """Raised for configuration problems (missing username, bad credential source, invalid JSON)."""

    exit_code = EXIT_GENERIC_FAILURE


class AuthError(JscSessionError):
    """Raised when authentication or authorisation fails (e.g. rejected session, HTTP 401/403)."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(JscSessionError):
    """Raised when the API returns HTTP 404 (resource not found)."""

    exit_code = EXIT_NOT_FOUND


class ServerError(JscSessionError):
    """Raised when the API returns an HTTP error status other than 401/403/404."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(JscSessionError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


# --- Login flow failures ---


class LoginError(AuthError):
    """Base class for failures of the browser login flow.

    Args:
        message: Human-readable error description.
        step: Name of the login step that failed (``"initiate"``,
            ``"identifier"``, ``"password"``, ``"credentials"``).
    """

    def __init__(self, message: str, step: str | None = None):
        super().__init__(message)
        self.step = step


class LoginTransportError(LoginError):
    """Raised when a request of the login flow fails at the network level."""

    exit_code = EXIT_CONNECTION_ERROR


class UnexpectedStatusError(LoginTransportError):
    """Raised when a login step answers with a non-2xx status before any location check.

    Args:
        message: Human-readable error description.
        step: The step that received the response.
        status_code: The HTTP status of the final (post-redirect) response.
        url: The URL the response was served from.
    """

    def __init__(self, message: str, step: str, status_code: int, url: str):
        super().__init__(message, step=step)
        self.status_code = status_code
        self.url = url


class UnexpectedLocationError(LoginError):
    """Raised when a login step resolves to a URL other than the one it expects.

    Args:
        message: Human-readable error description.
        step: The step whose landing page did not match.
        expected: The path fragment the step expected to find in the URL.
        actual: The resolved URL that was observed.
    """

    exit_code = EXIT_SERVER_ERROR

    def __init__(self, message: str, step: str, expected: str, actual: str):
        super().__init__(message, step=step)
        self.expected = expected
        self.actual = actual


class InvalidUsernameError(LoginError):
    """Raised when the identifier page is served again after submitting the username."""


class InvalidCredentialsError(LoginError):
    """Raised when the password page is served again after submitting the password."""


class MalformedDocumentError(LoginError):
    """Raised when a page that must carry a login form cannot be parsed as HTML."""

    exit_code = EXIT_SERVER_ERROR


class MissingSessionCookieError(LoginError):
    """Raised when the login flow completed but no session cookie was issued."""
