"""wskauth -- credential resolution and authenticated clients for OpenWhisk.

This package turns a layered set of credential sources into a single
validated :class:`~wskauth.models.CredentialRecord` and builds a ready-to-use
:class:`~wskauth.client.OpenWhiskClient` for an OpenWhisk-compatible control
plane. Three authentication strategies are supported transparently: a static
``key:secret`` API key, an IAM API key exchanged for short-lived bearer
tokens, and a bearer token cached on disk by an external cloud CLI login.

Typical usage::

    from wskauth import WhiskProvider
    from wskauth.models import ProviderConfig

    provider = WhiskProvider(ProviderConfig(ignore_certs=False))
    client = provider.client()
    client.actions.list()

Modules:
    provider: Memoizing facade -- the public entry point.
    credentials: Layered credential resolution and validation.
    auth: Token managers (static key, IAM exchange, CLI profile).
    client: Client factory and the OpenWhisk HTTP client.
    config: Paths, ``.wskprops`` parsing, provider config files.
    models: Pydantic models shared across the package.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stderr diagnostics with Rich support.
"""

__version__ = "0.1.0"

from wskauth.provider import WhiskProvider  # noqa: E402

__all__ = ["WhiskProvider", "__version__"]
