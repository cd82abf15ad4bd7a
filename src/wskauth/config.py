"""Configuration sources: XDG paths, ``.wskprops``, environment, provider config files.

This module owns every read of configuration from outside the process:

* **Directory layout** -- XDG Base Directory compliant data directory on
  Linux/BSD, ``~/.wskauth/`` on macOS and Windows. Used for crash logs.
  See :func:`get_data_dir`.
* **Profile file** -- the ``.wskprops`` file shared with the ``wsk`` CLI
  (``$WSK_CONFIG_FILE``, default ``~/.wskprops``). See :func:`load_wskprops`.
* **Environment** -- ``OW_*`` variables. See :func:`load_env_credentials`.
* **CLI profile** -- the JSON file written by the cloud CLI login flow. Only
  its location lives here; :class:`~wskauth.auth.cli.CliTokenManager` reads it.
* **Provider config** -- an explicit JSON file deserialised into a
  :class:`~wskauth.models.ProviderConfig`. See :func:`load_provider_config`.

Precedence between these layers is applied by
:class:`~wskauth.credentials.CredentialResolver`, not here.
"""

from __future__ import annotations

import json
import os
import platform
from pathlib import Path
from typing import Optional

from wskauth.exceptions import ConfigError
from wskauth.models import ProviderConfig

_APP_NAME = "wskauth"
_WSKPROPS_FILENAME = ".wskprops"
_ENV_PREFIX = "OW_"

# .wskprops key -> CredentialRecord field. Other keys (APIVERSION, ...) are ignored.
WSKPROPS_FIELDS: dict[str, str] = {
    "APIHOST": "apihost",
    "AUTH": "auth",
    "NAMESPACE": "namespace",
    "IAM_NAMESPACE_API_KEY": "iam_namespace_api_key",
    "APIGW_ACCESS_TOKEN": "apigw_access_token",
}


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/wskauth/`` (default ``~/.local/share/wskauth/``).
    On macOS/Windows: ``~/.wskauth/``.

    Returns:
        Absolute path to the data directory (guaranteed to exist).
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def wskprops_path() -> tuple[Path, bool]:
    """Locate the ``.wskprops`` profile file.

    Returns:
        ``(path, explicit)`` where *explicit* is ``True`` when the path came
        from ``$WSK_CONFIG_FILE`` rather than the ``~/.wskprops`` default.
    """
    env_value = os.environ.get("WSK_CONFIG_FILE", "")
    if env_value:
        return Path(env_value).expanduser(), True
    return Path.home() / _WSKPROPS_FILENAME, False


def cli_config_path() -> Path:
    """Return the cloud CLI profile file (``$IBMCLOUD_HOME/.bluemix/config.json``).

    ``IBMCLOUD_HOME`` defaults to the user's home directory.
    """
    env_value = os.environ.get("IBMCLOUD_HOME", "")
    home = Path(env_value).expanduser() if env_value else Path.home()
    return home / ".bluemix" / "config.json"


# --- .wskprops ---


def parse_wskprops(text: str, source: str = "<string>") -> dict[str, str]:
    """Parse ``KEY=value`` lines into credential fields.

    Blank lines and ``#`` comments are skipped, keys are matched
    case-insensitively against :data:`WSKPROPS_FIELDS`, and empty values are
    dropped so that they do not shadow lower layers.

    Args:
        text: File contents.
        source: Name used in error messages.

    Returns:
        A dict keyed by :class:`~wskauth.models.CredentialRecord` field name.

    Raises:
        ConfigError: If a non-comment line has no ``=``.
    """
    props: dict[str, str] = {}
    for lineno, raw_line in enumerate(text.splitlines(), 1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            raise ConfigError(
                f"Invalid line {lineno} in {source}: expected KEY=value, got {line!r}"
            )
        name, value = line.split("=", 1)
        field = WSKPROPS_FIELDS.get(name.strip().upper())
        value = value.strip()
        if field and value:
            props[field] = value
    return props


def load_wskprops() -> dict[str, str]:
    """Load credential fields from the ``.wskprops`` profile file.

    A missing default ``~/.wskprops`` is an empty layer. A file named
    explicitly through ``$WSK_CONFIG_FILE`` must exist.

    Returns:
        Parsed credential fields (possibly empty).

    Raises:
        ConfigError: If an explicit file is missing, the file cannot be read,
            or it contains a malformed line.
    """
    path, explicit = wskprops_path()
    if not path.is_file():
        if explicit:
            raise ConfigError(f"WSK_CONFIG_FILE points to a missing file: {path}")
        return {}
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc
    return parse_wskprops(text, source=str(path))


# --- Environment ---


def load_env_credentials() -> dict[str, str]:
    """Read ``OW_APIHOST``, ``OW_AUTH``, ``OW_NAMESPACE`` and friends.

    Returns:
        Non-empty values keyed by credential field name.
    """
    props: dict[str, str] = {}
    for name, field in WSKPROPS_FIELDS.items():
        value = os.environ.get(f"{_ENV_PREFIX}{name}", "").strip()
        if value:
            props[field] = value
    return props


# --- Provider config files ---


def load_provider_config(path: Optional[str | Path] = None) -> ProviderConfig:
    """Load the explicit provider configuration from a JSON file.

    Args:
        path: File to read. ``None`` returns an empty
            :class:`~wskauth.models.ProviderConfig` (all fields fall through
            to the environment and ``.wskprops``).

    Returns:
        The validated :class:`~wskauth.models.ProviderConfig`.

    Raises:
        ConfigError: If the file is missing, contains invalid JSON, or fails
            Pydantic validation.
    """
    if path is None:
        return ProviderConfig()
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise ConfigError(f"Provider config not found: {file_path}")
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
        # Accept either a bare block or a manifest-style {"provider": {...}}.
        if isinstance(data, dict) and isinstance(data.get("provider"), dict):
            data = data["provider"]
        return ProviderConfig.model_validate(data)
    except OSError as exc:
        raise ConfigError(f"Cannot read provider config {file_path}: {exc}") from exc
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid provider config at {file_path}: {exc}") from exc
