"""Authentication strategy selection.

Which token manager a client gets is decided by a pure predicate over the
resolved :class:`~wskauth.models.CredentialRecord`. The set of strategies is
closed: :class:`AuthStrategy` enumerates them and
:class:`~wskauth.client.factory.ClientFactory` handles each member
explicitly.

Precedence:

1. an IAM API key -> :attr:`AuthStrategy.IAM`;
2. a static ``auth`` key -> :attr:`AuthStrategy.STATIC`;
3. a managed-cloud API host -> :attr:`AuthStrategy.CLI`.

A record matching none of these has no usable credential and fails
validation with :class:`~wskauth.exceptions.MissingAuthError` before a
strategy is ever selected.
"""

from __future__ import annotations

import enum
import re
from typing import Optional, Pattern

from wskauth.exceptions import MissingAuthError
from wskauth.models import CredentialRecord

MANAGED_HOST_PATTERN: Pattern[str] = re.compile(
    r"(^|\.)functions\.(test\.)?(cloud\.ibm\.com|appdomain\.cloud)$",
    re.IGNORECASE,
)
"""API hosts whose users authenticate through the cloud CLI login."""


class AuthStrategy(str, enum.Enum):
    """How a client authenticates with the control plane."""

    STATIC = "static"
    IAM = "iam"
    CLI = "cli"


def _bare_host(apihost: str) -> str:
    host = re.sub(r"^https?://", "", apihost.strip(), flags=re.IGNORECASE)
    return host.split("/", 1)[0].split(":", 1)[0]


def is_managed_host(
    apihost: Optional[str], pattern: Pattern[str] = MANAGED_HOST_PATTERN
) -> bool:
    """Return ``True`` if *apihost* belongs to the managed cloud.

    Scheme, port and path are ignored, so ``https://eu-de.functions.cloud.ibm.com``
    and ``eu-de.functions.cloud.ibm.com:443`` both match.
    """
    if not apihost:
        return False
    return pattern.search(_bare_host(apihost)) is not None


def select_strategy(
    record: CredentialRecord, pattern: Pattern[str] = MANAGED_HOST_PATTERN
) -> AuthStrategy:
    """Choose the :class:`AuthStrategy` for *record*.

    Raises:
        MissingAuthError: If the record carries no usable credential.
    """
    if record.iam_namespace_api_key:
        return AuthStrategy.IAM
    if record.auth:
        return AuthStrategy.STATIC
    if is_managed_host(record.apihost, pattern):
        return AuthStrategy.CLI
    raise MissingAuthError()
