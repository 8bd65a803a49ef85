"""Pick the session and anti-forgery tokens out of a finished login's cookie jar."""

from __future__ import annotations

from http.cookiejar import Cookie

import httpx

from jscsession.exceptions import MissingSessionCookieError
from jscsession.models import SESSION_COOKIE, XSRF_COOKIE, SessionCredentials


def _jar_host(host: str) -> str:
    """Return the name ``http.cookiejar`` files host-only cookies under."""
    # Dotless hosts such as "localhost" are stored as "localhost.local".
    return host if "." in host else f"{host}.local"


def _domain_matches(cookie: Cookie, host: str) -> bool:
    """Return True when a browser would send *cookie* to *host*."""
    domain = cookie.domain.lower()
    if not domain.startswith("."):
        return domain in (host, _jar_host(host))
    return host == domain[1:] or host.endswith(domain)


def cookies_for_origin(cookies: httpx.Cookies, domain: str) -> dict[str, str]:
    """Return the cookies a browser would present to ``https://<domain>/``.

    A cookie qualifies when its domain is *domain* itself or a leading-dot
    parent of it, and its path is the root. Cookies scoped to the identity
    provider's host or to a sub-path are excluded.

    Args:
        cookies: The jar of a completed :class:`~jscsession.auth.session.LoginSession`.
        domain: The tenant domain, e.g. ``"radar.wandera.com"``.

    Returns:
        A ``name -> value`` mapping. When a name occurs more than once the
        most specific (exact-host) cookie wins.
    """
    host = domain.lower().split(":", 1)[0]
    selected: dict[str, str] = {}
    exact: set[str] = set()
    for cookie in cookies.jar:
        if cookie.value is None or cookie.path not in ("", "/"):
            continue
        if not _domain_matches(cookie, host):
            continue
        is_exact = not cookie.domain.startswith(".")
        if cookie.name in exact and not is_exact:
            continue
        selected[cookie.name] = cookie.value
        if is_exact:
            exact.add(cookie.name)
    return selected


def extract_credentials(cookies: httpx.Cookies, domain: str) -> SessionCredentials:
    """Return the ``SESSION`` and ``XSRF-TOKEN`` cookie values for *domain*.

    Args:
        cookies: The jar of a completed login session.
        domain: The tenant domain the tokens must be scoped to.

    Returns:
        :class:`~jscsession.models.SessionCredentials` with an empty
        ``xsrf_token`` when the deployment issued no anti-forgery cookie.

    Raises:
        MissingSessionCookieError: If no non-empty ``SESSION`` cookie is
            scoped to *domain*.
    """
    scoped = cookies_for_origin(cookies, domain)
    session_token = scoped.get(SESSION_COOKIE, "")
    if not session_token:
        seen = ", ".join(sorted(scoped)) or "(none)"
        raise MissingSessionCookieError(
            f"{SESSION_COOKIE} cookie not found for {domain} after login flow "
            f"(cookies present: {seen})",
            step="credentials",
        )
    return SessionCredentials(
        session_token=session_token,
        xsrf_token=scoped.get(XSRF_COOKIE, ""),
    )
