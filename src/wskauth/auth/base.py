"""Abstract base class for token managers.

A token manager answers one question -- "what credential do I send right
now?" -- and owns whatever caching and refresh that requires. Every variant
returns a :class:`~wskauth.models.Token` from :meth:`TokenManager.get_token`
and renders it as an ``Authorization`` header value in
:meth:`TokenManager.get_auth_header`.

Refresh happens on demand at the point of use: callers ask for a token
immediately before issuing a request, and an expired token is replaced
synchronously inside :meth:`~TokenManager.get_token`. There is no
background timer.

See Also:
    :mod:`wskauth.auth.strategy` for how a variant is chosen.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod

from wskauth.models import Token

EXPIRY_MARGIN_SECONDS = 60
"""Tokens are treated as expired this many seconds before their real expiry."""


class TokenManager(ABC):
    """Abstract base class for bearer-token sources.

    Subclasses implement :meth:`get_token`. The default :meth:`is_expired`
    applies :data:`EXPIRY_MARGIN_SECONDS` to ``token.expires_at`` and treats
    tokens without an expiry as permanent.
    """

    expiry_margin: float = EXPIRY_MARGIN_SECONDS

    @abstractmethod
    def get_token(self) -> Token:
        """Return a currently valid token, refreshing it first if needed.

        Raises:
            AuthError: If no valid token can be produced.
        """
        ...

    def is_expired(self, token: Token) -> bool:
        """Return ``True`` when *token* is within the safety margin of expiry."""
        if token.expires_at is None:
            return False
        return time.time() >= token.expires_at - self.expiry_margin

    def get_auth_header(self) -> str:
        """Return the ``Authorization`` header value for the current token."""
        return f"Bearer {self.get_token().value}"
