"""Tests for session-token selection from a login's cookie jar."""

from __future__ import annotations

import httpx
import pytest

from jscsession.auth.credentials import cookies_for_origin, extract_credentials
from jscsession.exceptions import MissingSessionCookieError


def _jar(*cookies: tuple[str, str, str, str]) -> httpx.Cookies:
    jar = httpx.Cookies()
    for name, value, domain, path in cookies:
        jar.set(name, value, domain=domain, path=path)
    return jar


class TestCookiesForOrigin:
    def test_exact_host(self):
        jar = _jar(("SESSION", "s", "radar.example.com", "/"))
        assert cookies_for_origin(jar, "radar.example.com") == {"SESSION": "s"}

    def test_parent_domain_cookie(self):
        jar = _jar(("SESSION", "s", ".example.com", "/"))
        assert cookies_for_origin(jar, "radar.example.com") == {"SESSION": "s"}

    def test_identity_provider_cookies_excluded(self):
        jar = _jar(
            ("SESSION", "idp", "id.example.com", "/"),
            ("auth0", "x", "id.example.com", "/"),
        )
        assert cookies_for_origin(jar, "radar.example.com") == {}

    def test_sibling_host_excluded(self):
        jar = _jar(("SESSION", "s", "evil-radar.example.com", "/"))
        assert cookies_for_origin(jar, "radar.example.com") == {}

    def test_sub_path_excluded(self):
        jar = _jar(("SESSION", "s", "radar.example.com", "/api"))
        assert cookies_for_origin(jar, "radar.example.com") == {}

    def test_exact_host_wins_over_parent_domain(self):
        jar = _jar(
            ("SESSION", "exact", "radar.example.com", "/"),
            ("SESSION", "parent", ".example.com", "/"),
        )
        assert cookies_for_origin(jar, "radar.example.com")["SESSION"] == "exact"

    def test_case_insensitive_domain(self):
        jar = _jar(("SESSION", "s", "Radar.Example.com", "/"))
        assert cookies_for_origin(jar, "radar.example.COM") == {"SESSION": "s"}


class TestExtractCredentials:
    def test_both_tokens(self):
        jar = _jar(
            ("SESSION", "tok1", "radar.example.com", "/"),
            ("XSRF-TOKEN", "tok2", "radar.example.com", "/"),
        )
        creds = extract_credentials(jar, "radar.example.com")
        assert creds.session_token == "tok1"
        assert creds.xsrf_token == "tok2"

    def test_missing_xsrf_is_empty(self):
        jar = _jar(("SESSION", "tok1", "radar.example.com", "/"))
        assert extract_credentials(jar, "radar.example.com").xsrf_token == ""

    def test_missing_session_raises(self):
        jar = _jar(("XSRF-TOKEN", "tok2", "radar.example.com", "/"))
        with pytest.raises(MissingSessionCookieError) as exc_info:
            extract_credentials(jar, "radar.example.com")
        assert exc_info.value.step == "credentials"
        assert "cookies present: XSRF-TOKEN" in str(exc_info.value)

    def test_empty_session_raises(self):
        jar = _jar(("SESSION", "", "radar.example.com", "/"))
        with pytest.raises(MissingSessionCookieError):
            extract_credentials(jar, "radar.example.com")

    def test_empty_jar(self):
        with pytest.raises(MissingSessionCookieError, match=r"\(none\)"):
            extract_credentials(httpx.Cookies(), "radar.example.com")

    def test_session_on_other_domain_raises(self):
        jar = _jar(("SESSION", "tok1", "id.example.com", "/"))
        with pytest.raises(MissingSessionCookieError):
            extract_credentials(jar, "radar.example.com")


class TestDotlessTenantHost:
    def _received(self, url: str, *set_cookies: str) -> httpx.Cookies:
        response = httpx.Response(
            200,
            headers=[("set-cookie", c) for c in set_cookies],
            request=httpx.Request("GET", url),
        )
        jar = httpx.Cookies()
        jar.extract_cookies(response)
        return jar

    def test_host_only_cookie_on_dotless_host(self):
        jar = self._received(
            "https://localhost/dashboard",
            "SESSION=tok1; Path=/",
            "XSRF-TOKEN=tok2; Path=/",
        )
        creds = extract_credentials(jar, "localhost")
        assert (creds.session_token, creds.xsrf_token) == ("tok1", "tok2")

    def test_other_dotless_host_excluded(self):
        jar = self._received("https://intranet/dashboard", "SESSION=tok1; Path=/")
        assert cookies_for_origin(jar, "localhost") == {}
