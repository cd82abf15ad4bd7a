"""Exception hierarchy for wskauth.

All exceptions inherit from :class:`WskAuthError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`wskauth.exit_codes`.
The CLI entry point :func:`wskauth.app.main` catches ``WskAuthError`` and
exits with the matching code; library callers (a deploy command, a plugin
host) can catch the narrower classes below.

Subclass hierarchy::

    WskAuthError (exit 1)
    +-- ConfigError                 (exit 1)
    |   +-- MissingCredentialError  (exit 2)
    |       +-- MissingAuthError       -- OW_AUTH
    |       +-- MissingHostError       -- OW_APIHOST
    |       +-- MissingNamespaceError  -- OW_NAMESPACE
    +-- AuthError                   (exit 3)
    |   +-- AuthExchangeError
    |   +-- StaleCredentialError
    +-- NotFoundError               (exit 4)
    +-- ServerError                 (exit 5)
    +-- ConnectionError_            (exit 6)
"""

from wskauth.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_MISSING_CREDENTIAL,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)


class WskAuthError(Exception):
    """Base exception for all wskauth errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(WskAuthError):
    """Raised for a malformed or unreadable configuration layer (``.wskprops``, config JSON)."""

    exit_code = EXIT_GENERIC_FAILURE


class MissingCredentialError(ConfigError):
    """A mandatory credential field could not be resolved from any layer.

    The message always names the environment variable the user should set,
    and the same name is kept on :attr:`key` for programmatic checks.

    Subclasses set :attr:`key` (e.g. ``"OW_AUTH"``) and :attr:`label`.

    Args:
        message: Optional override for the default message.
    """

    exit_code = EXIT_MISSING_CREDENTIAL
    key: str = ""
    label: str = ""

    def __init__(self, message: str | None = None):
        if message is None:
            message = (
                f"Missing mandatory openwhisk configuration property: {self.key}. "
                f"Set the {self.label} in the provider config, the {self.key} "
                "environment variable, or ~/.wskprops."
            )
        super().__init__(message)


class MissingAuthError(MissingCredentialError):
    """Neither an auth key nor an IAM API key was resolved."""

    key = "OW_AUTH"
    label = "auth key"


class MissingHostError(MissingCredentialError):
    """No control-plane host was resolved."""

    key = "OW_APIHOST"
    label = "API host"


class MissingNamespaceError(MissingCredentialError):
    """An IAM API key was resolved without the namespace it belongs to."""

    key = "OW_NAMESPACE"
    label = "namespace (required with an IAM API key)"


class AuthError(WskAuthError):
    """Raised when authentication fails (rejected key, HTTP 401/403)."""

    exit_code = EXIT_AUTH_FAILURE


class AuthExchangeError(AuthError):
    """The IAM API-key exchange failed: network error, rejection, or bad payload."""


class StaleCredentialError(AuthError):
    """The CLI-profile token is expired and could not be refreshed.

    Recovery requires an interactive login with the external cloud CLI.
    """


class NotFoundError(WskAuthError):
    """Raised when the control plane returns HTTP 404."""

    exit_code = EXIT_NOT_FOUND


class ServerError(WskAuthError):
    """Raised when the control plane returns any other error status."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(WskAuthError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR
