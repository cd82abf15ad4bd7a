"""Client factory -- turn a credential record into a configured client.

:class:`ClientFactory` derives :class:`~wskauth.models.ClientOptions` from a
validated :class:`~wskauth.models.CredentialRecord` plus the provider flags
in :class:`~wskauth.models.ProviderConfig`, attaches the token manager chosen
by :func:`~wskauth.auth.strategy.select_strategy`, and returns an
:class:`~wskauth.client.openwhisk.OpenWhiskClient`.

Building is side-effect free: token managers fetch lazily on first use and
the HTTP transport opens on the first request.
"""

from __future__ import annotations

import re
from typing import Optional, Pattern

from wskauth.auth.base import TokenManager
from wskauth.auth.cli import CliTokenManager
from wskauth.auth.iam import IamTokenManager
from wskauth.auth.strategy import MANAGED_HOST_PATTERN, AuthStrategy, select_strategy
from wskauth.client.openwhisk import OpenWhiskClient
from wskauth.exceptions import MissingHostError
from wskauth.models import API_VERSION, ClientOptions, CredentialRecord, ProviderConfig
from wskauth.output import debug


def api_url(apihost: str) -> str:
    """Return the API base URL ``https://<apihost>/api/v1/``.

    A host that already carries an ``http://`` or ``https://`` scheme keeps it.
    """
    host = apihost.strip().rstrip("/")
    if not re.match(r"^https?://", host, re.IGNORECASE):
        host = f"https://{host}"
    return f"{host}/api/{API_VERSION}/"


class ClientFactory:
    """Build :class:`~wskauth.client.openwhisk.OpenWhiskClient` instances.

    Args:
        pattern: Managed-cloud host pattern used for strategy selection.
    """

    def __init__(self, pattern: Pattern[str] = MANAGED_HOST_PATTERN) -> None:
        self._pattern = pattern

    def build(
        self, record: CredentialRecord, config: Optional[ProviderConfig] = None
    ) -> OpenWhiskClient:
        """Build a client for *record* using the flags in *config*."""
        return OpenWhiskClient(self.build_options(record, config))

    def build_options(
        self, record: CredentialRecord, config: Optional[ProviderConfig] = None
    ) -> ClientOptions:
        """Derive :class:`~wskauth.models.ClientOptions` for *record*.

        Raises:
            MissingHostError: If the record has no ``apihost``.
            MissingAuthError: If the record has no usable credential.
        """
        config = config or ProviderConfig()
        if not record.apihost:
            raise MissingHostError()

        strategy = select_strategy(record, self._pattern)
        debug(f"Using {strategy.value} authentication for {record.apihost}")

        options = ClientOptions(
            api=api_url(record.apihost),
            namespace=record.namespace,
            ignore_certs=config.ignore_certs,
            cert=config.cert,
            key=config.key,
        )
        if strategy is AuthStrategy.STATIC:
            options.api_key = record.auth
        else:
            options.auth_handler = self._token_manager(strategy, record, config)

        if record.apigw_access_token:
            options.apigw_token = record.apigw_access_token
            # Without IAM the gateway space is the user part of the static key.
            if strategy is not AuthStrategy.IAM and record.auth:
                options.apigw_space_guid = record.auth.split(":", 1)[0]

        return options

    @staticmethod
    def _token_manager(
        strategy: AuthStrategy, record: CredentialRecord, config: ProviderConfig
    ) -> TokenManager:
        if strategy is AuthStrategy.IAM:
            assert record.iam_namespace_api_key is not None
            return IamTokenManager(
                record.iam_namespace_api_key,
                namespace=record.namespace,
                iam_url=config.iam_url,
            )
        if strategy is AuthStrategy.CLI:
            return CliTokenManager(
                config_path=config.cli_config_path,
                apihost=record.apihost,
                namespace=record.namespace,
            )
        raise ValueError(f"No token manager for strategy {strategy.value!r}")
