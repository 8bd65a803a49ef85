"""Browser-emulating Jamf ID login.

The package is split along the four stages of a login attempt:

- :class:`LoginSession` -- one cookie jar and redirect-following client per
  attempt (:mod:`jscsession.auth.session`).
- :func:`extract_form` / :class:`FormSnapshot` -- replay a page's input
  fields (:mod:`jscsession.auth.forms`).
- :class:`JamfIdLoginFlow` -- the identifier/password state machine driven
  by a :class:`LoginContract` (:mod:`jscsession.auth.flow`).
- :func:`extract_credentials` -- pick ``SESSION`` and ``XSRF-TOKEN`` out of
  the final jar (:mod:`jscsession.auth.credentials`).

Typical usage::

    from jscsession.auth import authenticate

    result = authenticate(login_config)
    auth_result = result.credentials.to_auth_result()
    # auth_result.headers / .cookies are ready to inject into requests.
"""

from jscsession.auth.base import AuthResult
from jscsession.auth.credentials import cookies_for_origin, extract_credentials
from jscsession.auth.flow import (
    JAMF_ID_CONTRACT,
    JamfIdLoginFlow,
    LoginContract,
    LoginStep,
    authenticate,
)
from jscsession.auth.forms import FormSnapshot, extract_form
from jscsession.auth.session import LoginSession

__all__ = [
    "AuthResult",
    "FormSnapshot",
    "JAMF_ID_CONTRACT",
    "JamfIdLoginFlow",
    "LoginContract",
    "LoginSession",
    "LoginStep",
    "authenticate",
    "cookies_for_origin",
    "extract_credentials",
    "extract_form",
]
