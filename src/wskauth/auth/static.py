"""Static ``key:secret`` authentication -- the OpenWhisk namespace API key.

The key never expires and never touches the network. OpenWhisk expects it
as HTTP Basic credentials, with the part before the colon as the user name.
"""

from __future__ import annotations

import base64

from wskauth.auth.base import TokenManager
from wskauth.models import Token


class StaticAuthHandler(TokenManager):
    """Wrap a fixed ``key:secret`` value.

    :class:`~wskauth.client.OpenWhiskClient` builds one of these from
    ``ClientOptions.api_key``; it is never attached as ``auth_handler``.

    Args:
        auth: The ``key:secret`` string.
    """

    def __init__(self, auth: str) -> None:
        self._token = Token(value=auth)

    def get_token(self) -> Token:
        return self._token

    def is_expired(self, token: Token) -> bool:
        return False

    def get_auth_header(self) -> str:
        encoded = base64.b64encode(self._token.value.encode("utf-8")).decode("ascii")
        return f"Basic {encoded}"
