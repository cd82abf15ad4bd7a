"""Provider facade -- the public entry point of wskauth.

:class:`WhiskProvider` combines the resolver, the validator and the client
factory behind two memoized calls:

* :meth:`~WhiskProvider.props` -- the resolved
  :class:`~wskauth.models.CredentialRecord`;
* :meth:`~WhiskProvider.client` -- the configured
  :class:`~wskauth.client.OpenWhiskClient`.

Both caches live on the provider instance and are filled only by a
successful call, so a failed resolution is retried on the next call.
They are plain memoization with no time-to-live; an expiring bearer token
is refreshed inside its token manager, not by rebuilding the client.
:meth:`~WhiskProvider.invalidate` clears both.

The host tool (a deployment framework plugin, the bundled CLI) passes its
``provider:`` settings as a :class:`~wskauth.models.ProviderConfig` and
reads diagnostics through :mod:`wskauth.output`.
"""

from __future__ import annotations

import threading
from typing import Optional, Pattern

from wskauth.auth.strategy import MANAGED_HOST_PATTERN
from wskauth.client.factory import ClientFactory
from wskauth.client.openwhisk import OpenWhiskClient
from wskauth.credentials import CredentialResolver, validate_credentials
from wskauth.models import CredentialRecord, ProviderConfig
from wskauth.output import debug

PROVIDER_NAME = "openwhisk"


class WhiskProvider:
    """Resolve credentials once and hand out one configured client.

    Args:
        config: Explicit provider configuration. Defaults to an empty
            :class:`~wskauth.models.ProviderConfig`.
        resolver: Credential resolver (injectable for tests).
        factory: Client factory (injectable for tests).
        pattern: Managed-cloud host pattern for validation.

    Example::

        provider = WhiskProvider(ProviderConfig(ignore_certs=True))
        provider.has_valid_creds(provider.props())
        client = provider.client()
    """

    def __init__(
        self,
        config: Optional[ProviderConfig] = None,
        resolver: Optional[CredentialResolver] = None,
        factory: Optional[ClientFactory] = None,
        pattern: Pattern[str] = MANAGED_HOST_PATTERN,
    ) -> None:
        self.config = config or ProviderConfig()
        self.resolver = resolver or CredentialResolver(pattern)
        self.factory = factory or ClientFactory(pattern)
        self._pattern = pattern
        self._props: Optional[CredentialRecord] = None
        self._client: Optional[OpenWhiskClient] = None
        # Re-entrant: client() calls props() while holding it.
        self._lock = threading.RLock()

    @staticmethod
    def get_provider_name() -> str:
        """Return the wire protocol this provider speaks (always ``"openwhisk"``)."""
        return PROVIDER_NAME

    def props(self) -> CredentialRecord:
        """Return the resolved credentials, resolving them on first use.

        Raises:
            ConfigError: If resolution fails. Nothing is cached in that case.
        """
        with self._lock:
            if self._props is not None:
                return self._props
            debug("Resolving openwhisk credentials")
            record = self.resolver.resolve(self.config)
            self._props = record
            return record

    def client(self) -> OpenWhiskClient:
        """Return the configured client, building it on first use.

        Raises:
            ConfigError: If credentials cannot be resolved or validated.
                Nothing is cached in that case.
        """
        with self._lock:
            if self._client is not None:
                return self._client
            record = self.has_valid_creds(self.props())
            client = self.factory.build(record, self.config)
            self._client = client
            return client

    def has_valid_creds(self, creds: CredentialRecord) -> CredentialRecord:
        """Validate *creds* without I/O and return them unchanged.

        Raises:
            MissingHostError: Message names ``OW_APIHOST``.
            MissingAuthError: Message names ``OW_AUTH``.
            MissingNamespaceError: Message names ``OW_NAMESPACE``.
        """
        return validate_credentials(creds, self._pattern)

    def invalidate(self) -> None:
        """Drop the cached credentials and client, closing the client first."""
        with self._lock:
            if isinstance(self._client, OpenWhiskClient):
                self._client.close()
            self._client = None
            self._props = None
