"""Jamf ID browser login -- drive the identifier/password pages like a browser.

The JSC tenant has no API for exchanging a username and password for a
session. A browser gets one by following the tenant's OAuth2 redirect to
the Jamf ID identity provider, filling in the username page, then the
password page, and following the redirect chain back to the tenant, which
sets the ``SESSION`` and ``XSRF-TOKEN`` cookies.

:class:`JamfIdLoginFlow` replays exactly that sequence:

1. **initiate** -- GET the tenant's authorize URL; the redirect chain must
   land on ``/u/login/identifier``.
2. **identifier** -- replay the page's form with ``username`` and
   ``action=default``; the provider must move on to ``/u/login/password``.
3. **password** -- replay the page's form with ``password`` and
   ``action=default``; the provider must leave the password page with a
   2xx response.
4. **landing** -- read the final URL and collect the tokens from the
   cookie jar.

What each page must look like is declared once in a :class:`LoginContract`
of :class:`LoginStep` descriptors. A change to the provider's routing means
editing :data:`JAMF_ID_CONTRACT`, not :meth:`JamfIdLoginFlow.run`.

Every deviation is terminal; nothing is retried.

See Also:
    :mod:`jscsession.auth.forms` -- hidden-field extraction.
    :mod:`jscsession.auth.credentials` -- token selection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx

from jscsession.auth.credentials import extract_credentials
from jscsession.auth.forms import FormSnapshot, extract_form
from jscsession.auth.session import LoginSession
from jscsession.exceptions import (
    InvalidCredentialsError,
    InvalidUsernameError,
    LoginError,
    MalformedDocumentError,
    UnexpectedLocationError,
    UnexpectedStatusError,
)
from jscsession.models import LoginConfig, LoginResult, LoginWarning
from jscsession.output import debug, warning

IDENTIFIER_PATH = "/u/login/identifier"
PASSWORD_PATH = "/u/login/password"


@dataclass(frozen=True)
class LoginStep:
    """What one page of the login must look like after the step's request.

    Attributes:
        name: Step name reported in errors and debug output.
        expected_path: Fragment the resolved URL path must contain, or
            ``None`` when any location is acceptable.
        stall_path: Fragment whose presence means the provider served the
            same page again, i.e. rejected the submission.
        field: Form field the step fills in (``None`` for the initial GET).
        source: :class:`~jscsession.models.LoginConfig` attribute that
            supplies the field's value.
        stall_error: Exception raised when the step stalls.
        stall_message: Message for *stall_error*.
        stall_overrides_status: When ``True`` a stall is reported as such
            even for a non-2xx response; otherwise the status is checked
            first.
    """

    name: str
    expected_path: Optional[str] = None
    stall_path: Optional[str] = None
    field: Optional[str] = None
    source: Optional[str] = None
    stall_error: type[LoginError] = LoginError
    stall_message: str = ""
    stall_overrides_status: bool = False


@dataclass(frozen=True)
class LoginContract:
    """The full page contract of an identity provider's login.

    Attributes:
        authorize_path: Tenant path that starts the OAuth2 redirect;
            ``{registration}`` is filled from the config.
        action_field: Name of the field carrying the submit action.
        action_value: Value a browser sends for the default submit button.
        initiate: Descriptor of the initial GET.
        submissions: Form submissions, in order.
    """

    authorize_path: str
    action_field: str
    action_value: str
    initiate: LoginStep
    submissions: tuple[LoginStep, ...]


JAMF_ID_CONTRACT = LoginContract(
    authorize_path="/oauth2/authorization/{registration}",
    action_field="action",
    action_value="default",
    initiate=LoginStep(name="initiate", expected_path=IDENTIFIER_PATH),
    submissions=(
        LoginStep(
            name="identifier",
            expected_path=PASSWORD_PATH,
            stall_path=IDENTIFIER_PATH,
            field="username",
            source="username",
            stall_error=InvalidUsernameError,
            stall_message="Stuck at identifier step, possibly invalid username",
        ),
        LoginStep(
            name="password",
            stall_path=PASSWORD_PATH,
            field="password",
            source="password",
            stall_error=InvalidCredentialsError,
            stall_message="Login failed: invalid password or stuck at password step",
            stall_overrides_status=True,
        ),
    ),
)
"""Page contract of the Jamf ID (Auth0 universal login) identifier-first flow."""


class JamfIdLoginFlow:
    """One browser-emulating login attempt against a JSC tenant.

    Each call to :meth:`run` opens its own :class:`LoginSession`, so a
    flow object can be reused and separate flows can run concurrently
    without sharing cookies.

    Args:
        config: Tenant domain, credentials, and transport settings.
        contract: Page contract to follow. Defaults to
            :data:`JAMF_ID_CONTRACT`.
        transport: Optional httpx transport override (tests pass an
            :class:`httpx.MockTransport`).

    Example::

        flow = JamfIdLoginFlow(LoginConfig(username="me@example.com", password="..."))
        session_token, xsrf_token = flow.run().tokens
    """

    def __init__(
        self,
        config: LoginConfig,
        contract: LoginContract = JAMF_ID_CONTRACT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._contract = contract
        self._transport = transport

    def authorize_url(self) -> str:
        """Return the tenant URL that starts the login redirect chain."""
        path = self._contract.authorize_path.format(registration=self._config.registration)
        url = httpx.URL(
            f"{self._config.base_url}{path}",
            params={"connection": self._config.connection},
        )
        return str(url)

    def run(self) -> LoginResult:
        """Perform the login and return the session credentials.

        Returns:
            A :class:`~jscsession.models.LoginResult` with the tokens, the
            final URL, and any non-fatal warnings.

        Raises:
            LoginTransportError: On a network failure at any step.
            UnexpectedStatusError: When a step answers with a non-2xx status.
            UnexpectedLocationError: When a step lands on an unexpected page.
            InvalidUsernameError: When the identifier page is served again.
            InvalidCredentialsError: When the password page is served again.
            MalformedDocumentError: When a login page cannot be parsed.
            MissingSessionCookieError: When no ``SESSION`` cookie was issued.
        """
        contract = self._contract
        debug(f"Starting Jamf ID login for {self._config.username} on {self._config.domain}")

        with LoginSession(self._config.request, transport=self._transport) as session:
            response = session.get(contract.initiate.name, self.authorize_url())
            self._check(contract.initiate, response)

            for step in contract.submissions:
                form = self._read_form(step, response)
                assert step.field is not None and step.source is not None
                form.set(step.field, getattr(self._config, step.source))
                form.set(contract.action_field, contract.action_value)
                response = session.submit_form(step.name, str(response.url), form)
                self._check(step, response)

            final_url = str(response.url)
            warnings = self._landing_warnings(response.url)
            credentials = extract_credentials(session.cookies, self._config.domain)

        for item in warnings:
            warning(item.message)
        debug(f"Login complete, landed on {final_url}")
        return LoginResult(credentials=credentials, final_url=final_url, warnings=warnings)

    # ------------------------------------------------------------------ #
    # Step checks
    # ------------------------------------------------------------------ #

    def _check(self, step: LoginStep, response: httpx.Response) -> None:
        """Raise the appropriate :class:`LoginError` if *response* breaks *step*'s contract."""
        url = str(response.url)
        path = response.url.path
        stalled = step.stall_path is not None and step.stall_path in path

        if stalled and step.stall_overrides_status:
            raise step.stall_error(step.stall_message, step=step.name)

        if not response.is_success:
            raise UnexpectedStatusError(
                f"{step.name.capitalize()} request returned status: "
                f"{response.status_code} {response.reason_phrase} ({url})",
                step=step.name,
                status_code=response.status_code,
                url=url,
            )

        if stalled:
            raise step.stall_error(step.stall_message, step=step.name)

        if step.expected_path is not None and step.expected_path not in path:
            raise UnexpectedLocationError(
                f"Unexpected URL after {step.name} step: {url} "
                f"(expected a path containing {step.expected_path})",
                step=step.name,
                expected=step.expected_path,
                actual=url,
            )

    def _read_form(self, step: LoginStep, response: httpx.Response) -> FormSnapshot:
        try:
            return extract_form(response.content, response.charset_encoding)
        except MalformedDocumentError as exc:
            raise MalformedDocumentError(
                f"Failed to parse {step.name} form at {response.url}: {exc}",
                step=step.name,
            ) from exc

    def _landing_warnings(self, final_url: httpx.URL) -> list[LoginWarning]:
        """Flag a final URL that is not on the tenant domain.

        Some deployments land on an intermediate relay host before a
        client-side redirect, so this is reported, not raised.
        """
        domain = self._config.domain.lower().split(":", 1)[0]
        host = final_url.host.lower()
        if host == domain or host.endswith(f".{domain}"):
            return []
        return [
            LoginWarning(
                code="domain_mismatch",
                message=f"Final URL {final_url} does not match domain {self._config.domain}",
                url=str(final_url),
            )
        ]


def authenticate(
    config: LoginConfig,
    transport: Optional[httpx.BaseTransport] = None,
) -> LoginResult:
    """Log into *config*'s tenant with the Jamf ID flow.

    Convenience wrapper around :meth:`JamfIdLoginFlow.run`.

    Args:
        config: Tenant domain, credentials, and transport settings.
        transport: Optional httpx transport override.

    Returns:
        The :class:`~jscsession.models.LoginResult` of the attempt.
    """
    return JamfIdLoginFlow(config, transport=transport).run()
