"""Bearer tokens borrowed from an external cloud CLI login.

When the user has logged in with the cloud CLI (``ibmcloud login``), the CLI
keeps an IAM token in its profile file (``~/.bluemix/config.json`` under the
``IAMToken`` key, stored as ``"Bearer <jwt>"``). :class:`CliTokenManager`
reads that token, decodes its JWT ``exp`` claim to learn the expiry, and when
the token is missing or expired asks the CLI to refresh it by running
``ibmcloud iam oauth-tokens``.

The profile file belongs to the CLI. This module only ever reads it; it is
never created, rewritten, or deleted here.
"""

from __future__ import annotations

import json
import re
import subprocess
import threading
from pathlib import Path
from typing import Optional, Sequence

import jwt

from wskauth.auth.base import TokenManager
from wskauth.config import cli_config_path
from wskauth.exceptions import StaleCredentialError
from wskauth.models import Token
from wskauth.output import debug

DEFAULT_REFRESH_COMMAND: tuple[str, ...] = ("ibmcloud", "iam", "oauth-tokens")
LOGIN_HINT = "ibmcloud login"

_PROFILE_TOKEN_KEY = "IAMToken"
_OUTPUT_TOKEN_RE = re.compile(r"IAM token:\s+Bearer\s+(\S+)", re.IGNORECASE)


def _strip_bearer(value: str) -> str:
    value = value.strip()
    if value.lower().startswith("bearer "):
        return value[7:].strip()
    return value


def decode_jwt_expiry(token: str) -> Optional[float]:
    """Return the ``exp`` claim of *token* as epoch seconds, or ``None``.

    The signature is not verified; the claim is only used to decide when to
    refresh.
    """
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return None
    exp = claims.get("exp")
    if isinstance(exp, (int, float)):
        return float(exp)
    return None


class CliTokenManager(TokenManager):
    """Tokens read from (and refreshed through) the cloud CLI profile.

    Args:
        config_path: Profile file to read. Defaults to
            :func:`~wskauth.config.cli_config_path`.
        refresh_command: argv of the CLI command that issues a fresh token.
        apihost: Control-plane host the token is used for (diagnostics).
        namespace: Namespace the token is used for (diagnostics).
        timeout: Seconds to wait for the refresh command.
    """

    def __init__(
        self,
        config_path: Optional[str | Path] = None,
        refresh_command: Sequence[str] = DEFAULT_REFRESH_COMMAND,
        apihost: Optional[str] = None,
        namespace: Optional[str] = None,
        timeout: float = 60.0,
    ) -> None:
        self.config_path = Path(config_path) if config_path else cli_config_path()
        self.refresh_command = tuple(refresh_command)
        self.apihost = apihost
        self.namespace = namespace
        self._timeout = timeout
        self._token: Optional[Token] = None
        self._lock = threading.Lock()

    def get_token(self) -> Token:
        """Return a fresh CLI token, refreshing through the CLI when needed.

        Raises:
            StaleCredentialError: If neither the profile file nor the refresh
                command yields an unexpired token.
        """
        with self._lock:
            if self._token is not None and not self.is_expired(self._token):
                return self._token

            token = self.read_token_from_config()
            if token is None or self.is_expired(token):
                debug(f"CLI token in {self.config_path} missing or expired, refreshing")
                token = self._refresh()

            if token is None or self.is_expired(token):
                raise StaleCredentialError(
                    f"The cloud CLI token for {self.apihost or 'the API host'} is missing "
                    f"or expired and could not be refreshed. Run '{LOGIN_HINT}' and retry."
                )
            self._token = token
            return token

    def read_token_from_config(self) -> Optional[Token]:
        """Read the ``IAMToken`` entry from the profile file.

        Returns:
            The token, or ``None`` when the file is missing or unreadable, has
            no token, or the token carries no decodable ``exp`` claim.
        """
        if not self.config_path.is_file():
            return None
        try:
            data = json.loads(self.config_path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None
        raw = data.get(_PROFILE_TOKEN_KEY) if isinstance(data, dict) else None
        if not isinstance(raw, str) or not raw.strip():
            return None
        return self._to_token(_strip_bearer(raw))

    def _refresh(self) -> Optional[Token]:
        """Run the CLI refresh command and pick up the token it issues."""
        debug(f"Running {' '.join(self.refresh_command)}")
        try:
            result = subprocess.run(
                list(self.refresh_command),
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=True,
            )
        except FileNotFoundError as exc:
            raise StaleCredentialError(
                f"Cannot refresh the CLI token: '{self.refresh_command[0]}' is not "
                f"installed. Install it and run '{LOGIN_HINT}'."
            ) from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or exc.stdout or "").strip()
            raise StaleCredentialError(
                f"Refreshing the CLI token failed ({detail or f'exit {exc.returncode}'}). "
                f"Run '{LOGIN_HINT}' and retry."
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise StaleCredentialError(
                f"Refreshing the CLI token timed out after {self._timeout:.0f}s. "
                f"Run '{LOGIN_HINT}' and retry."
            ) from exc

        match = _OUTPUT_TOKEN_RE.search(result.stdout or "")
        if match:
            return self._to_token(match.group(1))
        # The CLI also rewrites its profile file on refresh.
        return self.read_token_from_config()

    @staticmethod
    def _to_token(value: str) -> Optional[Token]:
        expires_at = decode_jwt_expiry(value)
        if expires_at is None:
            return None
        return Token(value=value, expires_at=expires_at)
