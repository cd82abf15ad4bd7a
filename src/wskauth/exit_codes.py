"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to an error category and is referenced by the
corresponding :class:`~wskauth.exceptions.WskAuthError` subclass, so shell
wrappers around a deploy command can tell a missing ``OW_AUTH`` apart from a
rejected IAM key without parsing stderr.

Example::

    $ wskauth creds check
    $ echo $?
    2   # EXIT_MISSING_CREDENTIAL -- set OW_APIHOST / OW_AUTH
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred, including malformed configuration."""

EXIT_MISSING_CREDENTIAL = 2
"""A mandatory credential field (host, auth, namespace) could not be resolved."""

EXIT_AUTH_FAILURE = 3
"""Authentication failed: rejected key, failed IAM exchange, or stale CLI login."""

EXIT_NOT_FOUND = 4
"""The requested entity was not found on the control plane (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The control plane returned an error status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
