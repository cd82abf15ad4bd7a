"""Tests for the OpenWhisk HTTP client."""

from __future__ import annotations

import base64
import json
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from wskauth.client.openwhisk import OpenWhiskClient
from wskauth.exceptions import AuthError, ConfigError, ConnectionError_, NotFoundError, ServerError
from wskauth.models import ClientOptions


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _options(**kwargs: Any) -> ClientOptions:
    defaults: dict[str, Any] = {"api": "https://ow.example.com/api/v1/", "api_key": "user:pass"}
    defaults.update(kwargs)
    return ClientOptions(**defaults)


def _recording_client(
    responses: list[httpx.Response] | None = None, **option_kwargs: Any
) -> tuple[OpenWhiskClient, list[httpx.Request]]:
    """Client whose transport records requests and replays *responses*."""
    seen: list[httpx.Request] = []
    queue = list(responses or [])

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if queue:
            return queue.pop(0)
        return httpx.Response(200, json=[])

    client = OpenWhiskClient(_options(**option_kwargs), transport=httpx.MockTransport(handler))
    return client, seen


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    def test_no_transport_until_first_request(self) -> None:
        client, _ = _recording_client()
        assert client._http is None
        client.actions.list()
        assert client._http is not None

    def test_context_manager_closes(self) -> None:
        client, _ = _recording_client()
        with client:
            client.actions.list()
        assert client._http is None

    def test_sub_resources_reference_client(self) -> None:
        client, _ = _recording_client()
        for resource in (client.actions, client.triggers, client.rules, client.packages,
                         client.activations, client.namespaces):
            assert resource.client is client


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------


class TestAuthorization:
    def test_static_key_sent_as_basic(self) -> None:
        client, seen = _recording_client()
        client.actions.list()
        expected = "Basic " + base64.b64encode(b"user:pass").decode("ascii")
        assert seen[0].headers["Authorization"] == expected

    def test_handler_header_fetched_per_request(self) -> None:
        handler = MagicMock()
        handler.get_auth_header.side_effect = ["Bearer one", "Bearer two"]
        client, seen = _recording_client(api_key=None, auth_handler=handler)
        client.actions.list()
        client.actions.list()
        assert [r.headers["Authorization"] for r in seen] == ["Bearer one", "Bearer two"]

    def test_handler_failure_propagates(self) -> None:
        handler = MagicMock()
        handler.get_auth_header.side_effect = AuthError("stale")
        client, seen = _recording_client(api_key=None, auth_handler=handler)
        with pytest.raises(AuthError, match="stale"):
            client.actions.list()
        assert seen == []

    def test_user_agent(self) -> None:
        client, seen = _recording_client()
        client.namespaces.list()
        assert seen[0].headers["User-Agent"].startswith("wskauth/")

    def test_no_user_agent(self) -> None:
        client, seen = _recording_client(no_user_agent=True)
        client.namespaces.list()
        assert not seen[0].headers.get("User-Agent", "").startswith("wskauth/")


# ---------------------------------------------------------------------------
# Paths and bodies
# ---------------------------------------------------------------------------


class TestRequests:
    def test_default_namespace(self) -> None:
        client, seen = _recording_client()
        client.actions.list(limit=5)
        assert seen[0].url.path == "/api/v1/namespaces/_/actions"
        assert seen[0].url.params["limit"] == "5"

    def test_explicit_namespace(self) -> None:
        client, seen = _recording_client(namespace="my ns")
        client.actions.get("hello")
        assert seen[0].url.raw_path.decode().startswith("/api/v1/namespaces/my%20ns/actions/hello")

    def test_create_action(self) -> None:
        client, seen = _recording_client([httpx.Response(200, json={"name": "hello"})])
        result = client.actions.create("hello", {"exec": {"kind": "nodejs:20"}}, overwrite=True)
        assert result == {"name": "hello"}
        assert seen[0].method == "PUT"
        assert seen[0].url.params["overwrite"] == "true"
        assert json.loads(seen[0].content) == {"exec": {"kind": "nodejs:20"}}

    def test_invoke_result(self) -> None:
        client, seen = _recording_client([httpx.Response(200, json={"ok": True})])
        assert client.actions.invoke("hello", {"a": 1}, result=True) == {"ok": True}
        assert seen[0].method == "POST"
        assert seen[0].url.params["blocking"] == "true"

    def test_rule_enable(self) -> None:
        client, seen = _recording_client([httpx.Response(200, json={})])
        client.rules.enable("r")
        assert json.loads(seen[0].content) == {"status": "active"}

    def test_activation_logs(self) -> None:
        client, seen = _recording_client([httpx.Response(200, json={"logs": []})])
        client.activations.logs("abc123")
        assert seen[0].url.path == "/api/v1/namespaces/_/activations/abc123/logs"

    def test_namespaces_list(self) -> None:
        client, seen = _recording_client([httpx.Response(200, json=["guest"])])
        assert client.namespaces.list() == ["guest"]
        assert seen[0].url.path == "/api/v1/namespaces"

    def test_empty_body(self) -> None:
        client, _ = _recording_client([httpx.Response(204)])
        assert client.actions.delete("hello") is None


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------


class TestErrors:
    @pytest.mark.parametrize(
        ("status", "exc_type"),
        [(401, AuthError), (403, AuthError), (404, NotFoundError), (409, ServerError), (502, ServerError)],
    )
    def test_status_mapping(self, status: int, exc_type: type) -> None:
        client, _ = _recording_client([httpx.Response(status, json={"error": "boom"})])
        with pytest.raises(exc_type, match="boom"):
            client.actions.get("hello")

    def test_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = OpenWhiskClient(_options(), transport=httpx.MockTransport(handler))
        with pytest.raises(ConnectionError_):
            client.actions.list()

    @pytest.mark.parametrize(
        "error",
        [httpx.RemoteProtocolError("peer closed connection"), httpx.ProxyError("proxy refused")],
    )
    def test_protocol_and_proxy_errors(self, error: httpx.TransportError) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise error

        client = OpenWhiskClient(_options(), transport=httpx.MockTransport(handler))
        with pytest.raises(ConnectionError_, match="failed"):
            client.actions.list()


# ---------------------------------------------------------------------------
# TLS
# ---------------------------------------------------------------------------


class TestVerify:
    def test_verify_by_default(self) -> None:
        assert OpenWhiskClient(_options())._verify() is True

    def test_ignore_certs(self) -> None:
        assert OpenWhiskClient(_options(ignore_certs=True))._verify() is False

    def test_missing_client_cert(self, tmp_path) -> None:
        client = OpenWhiskClient(_options(cert=str(tmp_path / "missing.pem")))
        with pytest.raises(ConfigError, match="client certificate"):
            client._verify()

    def test_invalid_client_cert_on_request(self, tmp_path) -> None:
        cert = tmp_path / "cert.pem"
        cert.write_text("not a certificate")
        client, seen = _recording_client(cert=str(cert))
        with pytest.raises(ConfigError):
            client.actions.list()
        assert seen == []
