"""Token managers and strategy selection.

Three interchangeable ways to authenticate with the control plane:

- :class:`StaticAuthHandler` -- a fixed ``key:secret`` sent as HTTP Basic.
- :class:`IamTokenManager` -- an IAM API key exchanged for bearer tokens.
- :class:`CliTokenManager` -- bearer tokens from an external cloud CLI login.

All of them implement :class:`TokenManager`. :func:`select_strategy` picks
one for a resolved :class:`~wskauth.models.CredentialRecord`.

Typical usage::

    from wskauth.auth import IamTokenManager

    manager = IamTokenManager("my-iam-key", namespace="a34dd39e-...")
    headers = {"Authorization": manager.get_auth_header()}
"""

from wskauth.auth.base import EXPIRY_MARGIN_SECONDS, TokenManager
from wskauth.auth.cli import CliTokenManager
from wskauth.auth.iam import IamTokenManager
from wskauth.auth.static import StaticAuthHandler
from wskauth.auth.strategy import (
    MANAGED_HOST_PATTERN,
    AuthStrategy,
    is_managed_host,
    select_strategy,
)

__all__ = [
    "EXPIRY_MARGIN_SECONDS",
    "MANAGED_HOST_PATTERN",
    "AuthStrategy",
    "CliTokenManager",
    "IamTokenManager",
    "StaticAuthHandler",
    "TokenManager",
    "is_managed_host",
    "select_strategy",
]
