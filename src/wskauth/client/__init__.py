"""OpenWhisk client construction.

Classes:
    :class:`ClientFactory` -- derives :class:`~wskauth.models.ClientOptions`
    from a credential record and builds a client.
    :class:`OpenWhiskClient` -- httpx-backed client with ``actions``,
    ``triggers``, ``rules``, ``packages``, ``activations`` and
    ``namespaces`` sub-resources.

Example::

    from wskauth.client import ClientFactory
    from wskauth.models import CredentialRecord

    client = ClientFactory().build(CredentialRecord(apihost="h", auth="user:pass"))
    client.actions.list()
"""

from wskauth.client.factory import ClientFactory, api_url
from wskauth.client.openwhisk import OpenWhiskClient

__all__ = ["ClientFactory", "OpenWhiskClient", "api_url"]
