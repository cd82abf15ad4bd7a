"""Shared test fixtures for wskauth.

Provides an isolated credential environment (no real ``~/.wskprops``, no
``OW_*`` variables, no cloud CLI profile), output-state management, JWT and
profile-file builders, and a CLI runner. Fixtures are discovered by pytest
automatically.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import jwt
import pytest

from wskauth.output import OutputFormat, OutputManager, reset_output, set_output


JWT_TEST_KEY = "wskauth-test-signing-key-0123456789abcdef"


CREDENTIAL_ENV_VARS = [
    "OW_APIHOST",
    "OW_AUTH",
    "OW_NAMESPACE",
    "OW_IAM_NAMESPACE_API_KEY",
    "OW_APIGW_ACCESS_TOKEN",
    "WSK_CONFIG_FILE",
    "IBMCLOUD_HOME",
]


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    CliRunner swaps sys.stdout/sys.stderr; a manager created inside one test
    would otherwise keep references to closed streams.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME and XDG_DATA_HOME at tmp_path and clear credential variables.

    Every test starts with no ``.wskprops``, no ``OW_*`` variables and no
    cloud CLI profile, so nothing from the developer's machine leaks in.

    Returns:
        The fake home directory.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in CREDENTIAL_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def write_wskprops(isolated_env: Path):
    """Return a helper that writes ``~/.wskprops`` with the given lines."""

    def _write(*lines: str, path: Optional[Path] = None) -> Path:
        target = path or isolated_env / ".wskprops"
        target.write_text("\n".join(lines) + "\n")
        return target

    return _write


# ---------------------------------------------------------------------------
# Cloud CLI profile helpers
# ---------------------------------------------------------------------------


def make_jwt(exp: Optional[float], **claims: object) -> str:
    """Build a signed JWT whose payload carries *exp* and *claims*."""
    payload: dict[str, object] = dict(claims)
    if exp is not None:
        payload["exp"] = exp
    return jwt.encode(payload, JWT_TEST_KEY, algorithm="HS256")


@pytest.fixture
def cli_profile(isolated_env: Path):
    """Return a helper that writes the cloud CLI profile with a given JWT."""

    def _write(jwt: Optional[str]) -> Path:
        path = isolated_env / ".bluemix" / "config.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        data: dict[str, object] = {"Region": "eu-de"}
        if jwt is not None:
            data["IAMToken"] = f"Bearer {jwt}"
        path.write_text(json.dumps(data))
        return path

    return _write


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def verbose_output() -> OutputManager:
    """Install a verbose, colourless OutputManager so debug lines reach stderr."""
    output = OutputManager(format=OutputFormat.PLAIN, verbose=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()


@pytest.fixture
def jwt_factory():
    """Expose :func:`make_jwt` to test modules."""
    return make_jwt
