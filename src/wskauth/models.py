"""Canonical Pydantic models shared across all wskauth modules.

This is the single source of truth for data shapes in the project:

* :class:`ProviderConfig` -- explicit per-service configuration supplied by
  the host tool (the ``provider:`` block of a deployment manifest).
* :class:`CredentialRecord` -- the merged, validated credential set produced
  by :class:`~wskauth.credentials.CredentialResolver`.
* :class:`Token` -- a bearer token with optional expiry, returned by every
  :class:`~wskauth.auth.base.TokenManager`.
* :class:`ClientOptions` -- the fully derived configuration owned by one
  :class:`~wskauth.client.OpenWhiskClient`.

All models use Pydantic v2.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


API_VERSION = "v1"


class ProviderConfig(BaseModel):
    """Explicit provider configuration -- highest-precedence credential layer.

    Credential fields left as ``None`` fall through to the environment and
    ``.wskprops`` layers. The remaining fields are client flags consumed by
    :class:`~wskauth.client.factory.ClientFactory`.

    Extra keys are preserved in ``model_extra`` so host tools can keep their
    own settings in the same block.

    Example::

        ProviderConfig(apihost="openwhisk.example.com", ignore_certs=True)
    """

    model_config = ConfigDict(extra="allow")

    apihost: Optional[str] = Field(default=None, description="Control-plane host")
    auth: Optional[str] = Field(default=None, description="Static key:secret")
    namespace: Optional[str] = Field(default=None, description="Tenant namespace")
    iam_namespace_api_key: Optional[str] = Field(
        default=None, description="IAM API key exchanged for bearer tokens"
    )
    apigw_access_token: Optional[str] = Field(
        default=None, description="API gateway access token"
    )
    ignore_certs: bool = Field(
        default=False, description="Skip TLS certificate verification"
    )
    cert: Optional[str] = Field(default=None, description="Client TLS certificate path")
    key: Optional[str] = Field(default=None, description="Client TLS private key path")
    iam_url: Optional[str] = Field(
        default=None, description="Override for the IAM token endpoint"
    )
    cli_config_path: Optional[str] = Field(
        default=None, description="Override for the cloud CLI profile file"
    )


class CredentialRecord(BaseModel):
    """The merged credential set for one provider instance.

    Immutable once resolved. After validation ``apihost`` is set and at least
    one auth route is available: ``auth``, ``iam_namespace_api_key`` with a
    ``namespace``, or a managed-cloud ``apihost`` backed by a CLI login.
    """

    model_config = ConfigDict(frozen=True)

    apihost: Optional[str] = None
    auth: Optional[str] = None
    namespace: Optional[str] = None
    iam_namespace_api_key: Optional[str] = None
    apigw_access_token: Optional[str] = None


class Token(BaseModel):
    """A bearer token and its expiry as epoch seconds (``None`` = never expires)."""

    model_config = ConfigDict(frozen=True)

    value: str
    expires_at: Optional[float] = None


class ClientOptions(BaseModel):
    """Configuration derived from a :class:`CredentialRecord` for one client.

    ``auth_handler`` holds a :class:`~wskauth.auth.base.TokenManager` for
    bearer-token strategies and is ``None`` when a static ``api_key`` is used.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    api: str
    api_key: Optional[str] = None
    namespace: Optional[str] = None
    ignore_certs: bool = False
    api_version: str = API_VERSION
    cert: Optional[str] = None
    key: Optional[str] = None
    auth_handler: Any = None
    apigw_token: Optional[str] = None
    apigw_space_guid: Optional[str] = None
    no_user_agent: bool = False
