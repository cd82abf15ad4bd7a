"""Authenticated HTTP client for the OpenWhisk control-plane API.

:class:`OpenWhiskClient` wraps :class:`httpx.Client` and owns one
:class:`~wskauth.models.ClientOptions`. Every request asks the configured
credential source for an ``Authorization`` header at the point of use, so a
bearer token that expired since the last call is refreshed transparently by
its :class:`~wskauth.auth.base.TokenManager`:

- ``options.auth_handler`` set -> ``Bearer <token>`` from the token manager;
- ``options.api_key`` set -> HTTP Basic via
  :class:`~wskauth.auth.static.StaticAuthHandler`.

Entities are reached through sub-resources that mirror the REST API
(``client.actions``, ``client.triggers``, ...). Each sub-resource keeps a
back-reference to its client, so ``client.actions.client.options`` is the
options the client was built with.

The underlying :class:`httpx.Client` is created on the first request, never
at construction time. Requests are not retried.
"""

from __future__ import annotations

import ssl
import threading
from typing import Any, Optional
from urllib.parse import quote

import httpx

from wskauth.auth.static import StaticAuthHandler
from wskauth.exceptions import (
    AuthError,
    ConfigError,
    ConnectionError_,
    NotFoundError,
    ServerError,
)
from wskauth.models import ClientOptions
from wskauth.output import debug

DEFAULT_NAMESPACE = "_"


class OpenWhiskClient:
    """OpenWhisk REST client configured from :class:`~wskauth.models.ClientOptions`.

    Args:
        options: Fully derived client options.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests pass
            :class:`httpx.MockTransport`).

    Example::

        with OpenWhiskClient(options) as client:
            for action in client.actions.list():
                print(action["name"])
    """

    def __init__(
        self,
        options: ClientOptions,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.options = options
        self._timeout = timeout
        self._transport = transport
        self._http: Optional[httpx.Client] = None
        self._lock = threading.Lock()

        self.actions = Actions(self)
        self.triggers = Triggers(self)
        self.rules = Rules(self)
        self.packages = Packages(self)
        self.activations = Activations(self)
        self.namespaces = Namespaces(self)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def __enter__(self) -> OpenWhiskClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying transport if it was opened."""
        with self._lock:
            if self._http is not None:
                self._http.close()
                self._http = None

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #

    def namespace_path(self, *segments: str) -> str:
        """Build ``namespaces/<ns>/<segments...>`` relative to ``options.api``."""
        namespace = quote(self.options.namespace or DEFAULT_NAMESPACE, safe="")
        rest = "/".join(quote(s, safe="/") for s in segments if s)
        return f"namespaces/{namespace}/{rest}" if rest else f"namespaces/{namespace}"

    def auth_header(self) -> Optional[str]:
        """Return the ``Authorization`` value for the next request, or ``None``.

        Raises:
            AuthError: If the token manager cannot produce a token.
        """
        if self.options.auth_handler is not None:
            return self.options.auth_handler.get_auth_header()
        if self.options.api_key:
            return StaticAuthHandler(self.options.api_key).get_auth_header()
        return None

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[Any] = None,
    ) -> Any:
        """Send an authenticated request and return the decoded JSON body.

        Args:
            method: HTTP method.
            path: Path relative to ``options.api`` (e.g. from
                :meth:`namespace_path`).
            params: Query parameters.
            json_body: JSON-serialisable request body.

        Returns:
            The decoded JSON body, or ``None`` for an empty response.

        Raises:
            AuthError: On 401 / 403, or if no token can be obtained.
            NotFoundError: On 404.
            ServerError: On any other error status.
            ConnectionError_: On network, timeout or protocol errors.
            ConfigError: If the client certificate cannot be loaded.
        """
        headers: dict[str, str] = {"Accept": "application/json"}
        authorization = self.auth_header()
        if authorization:
            headers["Authorization"] = authorization
        if not self.options.no_user_agent:
            headers["User-Agent"] = _user_agent()

        kwargs: dict[str, Any] = {"headers": headers}
        if params:
            kwargs["params"] = params
        if json_body is not None:
            kwargs["json"] = json_body

        debug(f"{method.upper()} {self.options.api}{path}")
        try:
            response = self._http_client().request(method.upper(), path, **kwargs)
        except httpx.TransportError as exc:
            raise ConnectionError_(f"Request to {self.options.api} failed: {exc}") from exc

        _map_response_error(response)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _http_client(self) -> httpx.Client:
        with self._lock:
            if self._http is None:
                kwargs: dict[str, Any] = {
                    "base_url": self.options.api,
                    "timeout": self._timeout,
                    "verify": self._verify(),
                }
                if self._transport is not None:
                    kwargs["transport"] = self._transport
                self._http = httpx.Client(**kwargs)
            return self._http

    def _verify(self) -> ssl.SSLContext | bool:
        """TLS policy: plain bool, or an SSL context carrying the client cert."""
        if not self.options.cert:
            return not self.options.ignore_certs
        context = ssl.create_default_context()
        if self.options.ignore_certs:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        try:
            context.load_cert_chain(self.options.cert, self.options.key)
        except (OSError, ssl.SSLError) as exc:
            raise ConfigError(
                f"Cannot load client certificate {self.options.cert}: {exc}"
            ) from exc
        return context


def _user_agent() -> str:
    from wskauth import __version__

    return f"wskauth/{__version__}"


def _map_response_error(response: httpx.Response) -> None:
    """Raise a typed exception for error HTTP status codes."""
    status = response.status_code
    if status < 400:
        return

    try:
        detail = response.json()
        if isinstance(detail, dict):
            msg = detail.get("error") or detail.get("message") or ""
        else:
            msg = str(detail)
    except ValueError:
        msg = response.text[:200] if response.text else ""

    full_msg = f"HTTP {status}: {msg}" if msg else f"HTTP {status}"
    if status in (401, 403):
        raise AuthError(full_msg)
    if status == 404:
        raise NotFoundError(full_msg)
    raise ServerError(full_msg)


# ---------------------------------------------------------------------- #
# Sub-resources
# ---------------------------------------------------------------------- #


class _ReadOnlyResource:
    """A namespaced entity collection supporting ``list`` and ``get``."""

    collection = ""

    def __init__(self, client: OpenWhiskClient) -> None:
        self.client = client

    def _path(self, name: Optional[str] = None, *extra: str) -> str:
        return self.client.namespace_path(self.collection, name or "", *extra)

    def list(self, limit: Optional[int] = None, skip: Optional[int] = None) -> list[Any]:
        params: dict[str, Any] = {}
        if limit is not None:
            params["limit"] = limit
        if skip is not None:
            params["skip"] = skip
        return self.client.request("GET", self._path(), params=params) or []

    def get(self, name: str) -> Any:
        return self.client.request("GET", self._path(name))


class _Resource(_ReadOnlyResource):
    """A collection that also supports ``create``, ``update`` and ``delete``."""

    def create(self, name: str, body: dict[str, Any], overwrite: bool = False) -> Any:
        params = {"overwrite": "true" if overwrite else "false"}
        return self.client.request("PUT", self._path(name), params=params, json_body=body)

    def update(self, name: str, body: dict[str, Any]) -> Any:
        return self.create(name, body, overwrite=True)

    def delete(self, name: str) -> Any:
        return self.client.request("DELETE", self._path(name))


class Actions(_Resource):
    collection = "actions"

    def invoke(
        self,
        name: str,
        params: Optional[dict[str, Any]] = None,
        blocking: bool = False,
        result: bool = False,
    ) -> Any:
        """Invoke an action. ``result=True`` returns only the action's result (implies blocking)."""
        query = {
            "blocking": "true" if blocking or result else "false",
            "result": "true" if result else "false",
        }
        return self.client.request("POST", self._path(name), params=query, json_body=params or {})


class Triggers(_Resource):
    collection = "triggers"

    def fire(self, name: str, params: Optional[dict[str, Any]] = None) -> Any:
        return self.client.request("POST", self._path(name), json_body=params or {})


class Rules(_Resource):
    collection = "rules"

    def enable(self, name: str) -> Any:
        return self.client.request("POST", self._path(name), json_body={"status": "active"})

    def disable(self, name: str) -> Any:
        return self.client.request("POST", self._path(name), json_body={"status": "inactive"})


class Packages(_Resource):
    collection = "packages"


class Activations(_ReadOnlyResource):
    collection = "activations"

    def logs(self, activation_id: str) -> Any:
        return self.client.request("GET", self._path(activation_id, "logs"))

    def result(self, activation_id: str) -> Any:
        return self.client.request("GET", self._path(activation_id, "result"))


class Namespaces:
    """Namespaces visible to the current credentials."""

    def __init__(self, client: OpenWhiskClient) -> None:
        self.client = client

    def list(self) -> list[Any]:
        return self.client.request("GET", "namespaces") or []
