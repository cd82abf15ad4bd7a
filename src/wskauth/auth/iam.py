"""IAM API-key exchange for short-lived bearer tokens.

:class:`IamTokenManager` trades a long-lived IAM API key for an access token
at the IAM token endpoint (``grant_type=urn:ibm:params:oauth:grant-type:apikey``)
and caches the result in memory. The cached token is reused until it comes
within :data:`~wskauth.auth.base.EXPIRY_MARGIN_SECONDS` of expiry, at which
point the next :meth:`~IamTokenManager.get_token` call performs one fresh
exchange before returning.

No exchange happens at construction time, so building a client never
touches the network.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Optional

import httpx

from wskauth.auth.base import TokenManager
from wskauth.exceptions import AuthExchangeError
from wskauth.models import Token
from wskauth.output import debug

DEFAULT_IAM_URL = "https://iam.cloud.ibm.com/identity/token"
IAM_GRANT_TYPE = "urn:ibm:params:oauth:grant-type:apikey"

# Public client credentials ("bx:bx") expected by the IAM endpoint.
_IAM_CLIENT_AUTH = ("bx", "bx")


class IamTokenManager(TokenManager):
    """Bearer tokens obtained by exchanging an IAM API key.

    Args:
        iam_apikey: The IAM namespace API key.
        namespace: Namespace the key belongs to (used in diagnostics only).
        iam_url: Token endpoint; defaults to :data:`DEFAULT_IAM_URL`.
        timeout: Request timeout in seconds for the exchange.
    """

    def __init__(
        self,
        iam_apikey: str,
        namespace: Optional[str] = None,
        iam_url: Optional[str] = None,
        timeout: float = 30.0,
    ) -> None:
        self.iam_apikey = iam_apikey
        self.namespace = namespace
        self.iam_url = iam_url or DEFAULT_IAM_URL
        self._timeout = timeout
        self._token: Optional[Token] = None
        self._lock = threading.Lock()

    def get_token(self) -> Token:
        """Return the cached token, exchanging the API key when absent or expired.

        Raises:
            AuthExchangeError: If the exchange fails.
        """
        with self._lock:
            if self._token is not None and not self.is_expired(self._token):
                return self._token
            if self._token is not None:
                debug(f"IAM token for namespace {self.namespace or '-'} expired, re-exchanging")
            self._token = self._exchange()
            return self._token

    def _exchange(self) -> Token:
        """POST the API key to the IAM endpoint and build a :class:`Token`."""
        debug(f"Exchanging IAM API key at {self.iam_url}")
        try:
            response = httpx.post(
                self.iam_url,
                data={"grant_type": IAM_GRANT_TYPE, "apikey": self.iam_apikey},
                headers={"Accept": "application/json"},
                auth=_IAM_CLIENT_AUTH,
                timeout=self._timeout,
            )
            response.raise_for_status()
            body: Any = response.json()
        except httpx.HTTPStatusError as exc:
            raise AuthExchangeError(
                f"IAM token exchange was rejected with status "
                f"{exc.response.status_code}: {exc.response.text}"
            ) from exc
        except httpx.HTTPError as exc:
            raise AuthExchangeError(f"IAM token exchange failed: {exc}") from exc
        except ValueError as exc:
            raise AuthExchangeError("IAM token response was not valid JSON") from exc

        if not isinstance(body, dict):
            raise AuthExchangeError("IAM token response was not a JSON object")

        access_token = body.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise AuthExchangeError("IAM token response missing 'access_token' field")

        now = time.time()
        expiration = body.get("expiration")
        expires_in = body.get("expires_in")
        if isinstance(expiration, (int, float)):
            expires_at = float(expiration)
        elif isinstance(expires_in, (int, float)):
            expires_at = now + float(expires_in)
        else:
            raise AuthExchangeError("IAM token response missing expiry information")

        return Token(value=access_token, expires_at=expires_at)
