"""Layered credential resolution and validation.

:class:`CredentialResolver` merges three configuration layers into one
:class:`~wskauth.models.CredentialRecord`. Fields are merged independently:
for each field the first layer that supplies a non-empty value wins.

Precedence (high to low):
    1. Explicit provider configuration (:class:`~wskauth.models.ProviderConfig`)
    2. Environment variables (``OW_APIHOST``, ``OW_AUTH``, ``OW_NAMESPACE``,
       ``OW_IAM_NAMESPACE_API_KEY``, ``OW_APIGW_ACCESS_TOKEN``)
    3. The ``.wskprops`` profile file

:func:`validate_credentials` is the pure check applied to a merged record. It
performs no I/O and raises synchronously, naming the environment variable
the user has to set.
"""

from __future__ import annotations

from typing import Optional, Pattern

from wskauth.auth.strategy import MANAGED_HOST_PATTERN, is_managed_host
from wskauth.config import load_env_credentials, load_wskprops
from wskauth.exceptions import MissingAuthError, MissingHostError, MissingNamespaceError
from wskauth.models import CredentialRecord, ProviderConfig
from wskauth.output import debug

CREDENTIAL_FIELDS: tuple[str, ...] = tuple(CredentialRecord.model_fields)


def validate_credentials(
    record: CredentialRecord, pattern: Pattern[str] = MANAGED_HOST_PATTERN
) -> CredentialRecord:
    """Check that *record* can be used to build a client.

    Managed-cloud hosts are accepted without ``auth`` because their token
    comes from the cloud CLI login.

    Args:
        record: The merged credentials.
        pattern: Managed-cloud host pattern.

    Returns:
        *record*, unchanged.

    Raises:
        MissingHostError: No ``apihost`` (``OW_APIHOST``).
        MissingAuthError: No ``auth``, no IAM key, and not a managed-cloud
            host (``OW_AUTH``).
        MissingNamespaceError: An IAM key is the only credential and no
            ``namespace`` is set (``OW_NAMESPACE``).
    """
    if not record.apihost:
        raise MissingHostError()
    if not (record.auth or record.iam_namespace_api_key or is_managed_host(record.apihost, pattern)):
        raise MissingAuthError()
    if record.iam_namespace_api_key and not record.auth and not record.namespace:
        raise MissingNamespaceError()
    return record


class CredentialResolver:
    """Merge provider config, environment and ``.wskprops`` into a record.

    The resolver holds no state between calls; caching is the job of
    :class:`~wskauth.provider.WhiskProvider`.

    Args:
        pattern: Managed-cloud host pattern passed to
            :func:`validate_credentials`.
    """

    def __init__(self, pattern: Pattern[str] = MANAGED_HOST_PATTERN) -> None:
        self._pattern = pattern

    def layers(self, explicit: Optional[ProviderConfig] = None) -> list[tuple[str, dict[str, str]]]:
        """Return ``(name, fields)`` for every layer, highest precedence first.

        Raises:
            ConfigError: If ``.wskprops`` is malformed or an explicit
                ``WSK_CONFIG_FILE`` is missing.
        """
        explicit_fields: dict[str, str] = {}
        if explicit is not None:
            for name in CREDENTIAL_FIELDS:
                value = getattr(explicit, name, None)
                if value:
                    explicit_fields[name] = value
        return [
            ("provider config", explicit_fields),
            ("environment", load_env_credentials()),
            (".wskprops", load_wskprops()),
        ]

    def resolve(self, explicit: Optional[ProviderConfig] = None) -> CredentialRecord:
        """Merge all layers and validate the result.

        Args:
            explicit: Explicit provider configuration, if any.

        Returns:
            The validated :class:`~wskauth.models.CredentialRecord`.

        Raises:
            ConfigError: If a layer is malformed, or (as one of the
                :class:`~wskauth.exceptions.MissingCredentialError`
                subclasses) if a mandatory field is absent.
        """
        merged: dict[str, str] = {}
        for layer_name, fields in self.layers(explicit):
            for name, value in fields.items():
                if name not in merged:
                    merged[name] = value
                    debug(f"Credential '{name}' resolved from {layer_name}")
        record = CredentialRecord(**merged)
        return validate_credentials(record, self._pattern)
