"""Tests for the authenticated tenant API client."""

from __future__ import annotations

import json

import httpx
import pytest

from jscsession.client.sync_client import SyncClient
from jscsession.exceptions import (
    AuthError,
    ConnectionError_,
    InvalidUsageError,
    NotFoundError,
    ServerError,
)
from jscsession.models import SessionCredentials
from jscsession.output import OutputFormat, OutputManager, set_output


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_client(handler, customer_id: str | None = None, xsrf: str = "x1") -> SyncClient:
    return SyncClient(
        "radar.example.com",
        SessionCredentials(session_token="s1", xsrf_token=xsrf),
        customer_id=customer_id,
        transport=httpx.MockTransport(handler),
    )


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"ok": True})


@pytest.fixture(autouse=True)
def _quiet(quiet_output):
    yield


# ---------------------------------------------------------------------------
# Context manager
# ---------------------------------------------------------------------------


class TestContextManager:
    def test_enter_creates_and_exit_closes(self) -> None:
        client = _make_client(_ok)
        assert client._client is None
        with client:
            assert client._client is not None
        assert client._client is None

    def test_request_outside_context_fails(self) -> None:
        with pytest.raises(AssertionError, match="context manager"):
            _make_client(_ok).get("/x")


# ---------------------------------------------------------------------------
# Auth injection
# ---------------------------------------------------------------------------


class TestAuthInjection:
    def test_session_cookie_and_xsrf_header(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return _ok(request)

        with _make_client(handler) as client:
            client.get("/gate/identity-service/v1/connections")

        request = seen[0]
        assert request.url == "https://radar.example.com/gate/identity-service/v1/connections"
        assert request.headers["cookie"] == "SESSION=s1; XSRF-TOKEN=x1"
        assert request.headers["x-xsrf-token"] == "x1"
        assert request.headers["accept"] == "application/json"

    def test_no_xsrf_header_without_token(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return _ok(request)

        with _make_client(handler, xsrf="") as client:
            client.get("/x")

        assert seen[0].headers["cookie"] == "SESSION=s1"
        assert "x-xsrf-token" not in seen[0].headers

    def test_caller_cookie_is_merged(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return _ok(request)

        with _make_client(handler) as client:
            client.get("/x", headers={"Cookie": "locale=en"})

        assert seen[0].headers["cookie"] == "locale=en; SESSION=s1; XSRF-TOKEN=x1"


# ---------------------------------------------------------------------------
# Paths and bodies
# ---------------------------------------------------------------------------


class TestRequests:
    def test_customer_id_substituted(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return _ok(request)

        with _make_client(handler, customer_id="cust-42") as client:
            client.get("/api/v2/customers/{customerid}/devices", params={"page": "2"})

        assert seen[0].url.path == "/api/v2/customers/cust-42/devices"
        assert seen[0].url.params["page"] == "2"

    def test_customer_id_required_for_placeholder(self) -> None:
        with _make_client(_ok) as client:
            with pytest.raises(InvalidUsageError, match="customer id"):
                client.get("/api/v2/customers/{customerid}/devices")

    def test_post_json_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert json.loads(request.content) == {"name": "lab"}
            return httpx.Response(201, json={"id": "g1"})

        with _make_client(handler) as client:
            response = client.post("/groups", json_body={"name": "lab"})
        assert response.status_code == 201
        assert response.json() == {"id": "g1"}

    def test_none_body_is_sent_as_null(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return _ok(request)

        with _make_client(handler) as client:
            client.put("/groups/g1/owner", json_body=None)
            client.get("/groups")

        assert seen[0].content == b"null"
        assert seen[0].headers["content-type"] == "application/json"
        assert seen[1].content == b""
        assert "content-type" not in seen[1].headers

    def test_caller_content_type_is_kept(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return _ok(request)

        with _make_client(handler) as client:
            client.post(
                "/groups",
                json_body={"name": "lab"},
                headers={"content-type": "application/merge-patch+json"},
            )

        assert seen[0].headers["content-type"] == "application/merge-patch+json"
        assert json.loads(seen[0].content) == {"name": "lab"}

    def test_method_is_upper_cased(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.method)
            return httpx.Response(204)

        with _make_client(handler) as client:
            client.request("delete", "/groups/g1")
            client.put("/groups/g1", json_body={})
        assert seen == ["DELETE", "PUT"]


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


class TestErrorMapping:
    @pytest.mark.parametrize("status", [401, 403])
    def test_rejected_session(self, status: int) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json={"message": "expired"})

        with _make_client(handler) as client:
            with pytest.raises(AuthError, match="log in again") as exc_info:
                client.get("/x")
        assert f"HTTP {status}: expired" in str(exc_info.value)

    def test_not_found(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"error": "no such group"})

        with _make_client(handler) as client:
            with pytest.raises(NotFoundError, match="HTTP 404: no such group"):
                client.get("/groups/nope")

    def test_server_error_with_text_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        with _make_client(handler) as client:
            with pytest.raises(ServerError, match="HTTP 502: Bad Gateway"):
                client.get("/x")

    def test_client_error_without_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(409)

        with _make_client(handler) as client:
            with pytest.raises(ServerError) as exc_info:
                client.get("/x")
        assert str(exc_info.value) == "HTTP 409"

    def test_connection_error(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectTimeout("timed out", request=request)

        with _make_client(handler) as client:
            with pytest.raises(ConnectionError_, match="timed out"):
                client.get("/x")
        assert len(calls) == 1


class TestTracing:
    def test_verbose_traces_each_request(self, capfd) -> None:
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True))
        with _make_client(_ok) as client:
            client.get("/groups")
        assert "[debug] GET https://radar.example.com/groups -> 200" in capfd.readouterr().err
