"""Credential commands -- inspect and check what the provider resolves.

Provides the ``wskauth creds`` sub-command group plus the ``token`` and
``actions`` commands registered by :mod:`wskauth.app`. Every command builds
one :class:`~wskauth.provider.WhiskProvider` from the global ``--config``
option and reports :class:`~wskauth.exceptions.WskAuthError` failures on
stderr, exiting with the error's code.

Typical workflow::

    wskauth creds show           # which layer supplied what (secrets masked)
    wskauth creds check          # fail fast if OW_APIHOST / OW_AUTH are missing
    wskauth token                # print the Authorization header value
    wskauth actions list         # smoke-test the credentials against the API
    wskauth actions get hello    # one action as JSON
"""

from __future__ import annotations

from typing import NoReturn, Optional

import typer

from wskauth.exceptions import WskAuthError
from wskauth.exit_codes import EXIT_AUTH_FAILURE
from wskauth.output import error, format_response, get_output, success, suggest, warning


creds_app = typer.Typer(no_args_is_help=True)
actions_app = typer.Typer(no_args_is_help=True)


def mask(value: Optional[str], keep: int = 4) -> str:
    """Mask a secret for display, keeping the first *keep* characters.

    ``key:secret`` values keep the key visible and mask only the secret.
    """
    if not value:
        return "-"
    if ":" in value:
        user, _, secret = value.partition(":")
        return f"{user}:{mask(secret, keep)}"
    if len(value) <= keep:
        return "*" * len(value)
    return value[:keep] + "*" * 8


def _provider(ctx: typer.Context):  # noqa: ANN202
    """Build the provider from the global ``--config`` option."""
    from wskauth.config import load_provider_config
    from wskauth.provider import WhiskProvider

    config_path = ctx.obj.get("config_path") if ctx.obj else None
    return WhiskProvider(load_provider_config(config_path))


def _fail(exc: WskAuthError) -> NoReturn:
    error(str(exc))
    raise typer.Exit(code=exc.exit_code)


def _warn_insecure(provider) -> None:  # noqa: ANN001
    if provider.config.ignore_certs:
        warning("TLS certificate verification is disabled (ignore_certs).")


@creds_app.command("show")
def creds_show(ctx: typer.Context) -> None:
    """Show the resolved credentials with secrets masked.

    Example::

        wskauth creds show
        wskauth --json creds show
    """
    from wskauth.auth.strategy import select_strategy

    try:
        provider = _provider(ctx)
        record = provider.props()
        strategy = select_strategy(record)
    except WskAuthError as exc:
        _fail(exc)

    rows = [
        ["Provider", provider.get_provider_name()],
        ["API Host", record.apihost or "-"],
        ["Namespace", record.namespace or "-"],
        ["Auth", mask(record.auth)],
        ["IAM API Key", mask(record.iam_namespace_api_key)],
        ["API Gateway Token", mask(record.apigw_access_token)],
        ["Strategy", strategy.value],
    ]
    get_output().print_table(["Field", "Value"], rows, title="Resolved Credentials")


@creds_app.command("check")
def creds_check(ctx: typer.Context) -> None:
    """Validate the credentials without contacting the API.

    Exits with code 2 and names the missing variable (``OW_APIHOST``,
    ``OW_AUTH`` or ``OW_NAMESPACE``) when validation fails.
    """
    try:
        provider = _provider(ctx)
        record = provider.has_valid_creds(provider.props())
    except WskAuthError as exc:
        _fail(exc)
    success(f"Credentials for {record.apihost} are complete.")
    suggest("Verify them against the API: wskauth actions list")


def token_command(ctx: typer.Context) -> None:
    """Print the Authorization header value the client would send.

    Exchanges the IAM key or refreshes the CLI token if needed.
    """
    from wskauth.output import print_data

    try:
        client = _provider(ctx).client()
        header = client.auth_header()
    except WskAuthError as exc:
        _fail(exc)
    if header is None:
        error("No credential is configured for this client.")
        raise typer.Exit(code=EXIT_AUTH_FAILURE)
    print_data(header)


@actions_app.command("list")
def actions_list(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Maximum number of actions."),
) -> None:
    """List actions in the resolved namespace."""
    try:
        provider = _provider(ctx)
        _warn_insecure(provider)
        with provider.client() as client:
            actions = client.actions.list(limit=limit)
    except WskAuthError as exc:
        _fail(exc)

    rows = [
        [str(a.get("namespace", "")), str(a.get("name", "")), str(a.get("version", ""))]
        for a in actions
        if isinstance(a, dict)
    ]
    get_output().print_table(["Namespace", "Name", "Version"], rows, title="Actions")


@actions_app.command("get")
def actions_get(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Action name, optionally package/action."),
) -> None:
    """Show one action as JSON."""
    try:
        provider = _provider(ctx)
        _warn_insecure(provider)
        with provider.client() as client:
            action = client.actions.get(name)
    except WskAuthError as exc:
        _fail(exc)
    format_response(action)
