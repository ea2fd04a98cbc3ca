"""Main entry point for the seaplane CLI.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import typer
from typing_extensions import Annotated

# --- Core Layer ---
from seaplanecli.core.command_handler import CommandHandler

# --- Domain Layer ---
from seaplanecli.domain.models.restrict import RestrictionDetails

# --- Infrastructure Layer ---
from seaplanecli.infrastructure.cli.display import ConsoleDisplay
from seaplanecli.infrastructure.config.settings import SeaplaneSettings, load_settings
from seaplanecli.infrastructure.http.transport import HttpRequestSender
from seaplanecli.infrastructure.identity.token_client import CredentialProvider
from seaplanecli.infrastructure.monitoring.logger_setup import (
    DEFAULT_LOG_FORMAT,
    level_for_verbosity,
    setup_logging,
)
from seaplanecli.infrastructure.resilience.api_retry import AuthRetryExecutor

logger = logging.getLogger(__name__)


class OutputFormat(str, Enum):
    table = "table"
    json = "json"


# --- Dependency Injection Container (Manual) ---

def create_dependencies(
    settings: SeaplaneSettings,
    output_format: OutputFormat = OutputFormat.table,
    quiet: bool = False,
    http_transport: Optional[httpx.BaseTransport] = None,
) -> Dict[str, Any]:
    """Creates and wires up all dependencies for one invocation.

    This acts as the Composition Root. ``http_transport`` replaces the
    network for every client that is created (tests pass a MockTransport).
    """
    dependencies: Dict[str, Any] = {}
    dependencies['settings'] = settings
    dependencies['ui'] = ConsoleDisplay(quiet=quiet)
    dependencies['credential_provider'] = CredentialProvider(
        settings.identity_url,
        settings.transport_options(),
        http_transport=http_transport,
    )
    dependencies['sender'] = HttpRequestSender(transport=http_transport)
    dependencies['executor'] = AuthRetryExecutor()
    dependencies['command_handler'] = CommandHandler(
        ui=dependencies['ui'],
        settings=settings,
        credential_provider=dependencies['credential_provider'],
        sender=dependencies['sender'],
        executor=dependencies['executor'],
        output_format=output_format.value,
    )
    logger.debug("All dependencies initialized successfully.")
    return dependencies


# --- Typer App Definition ---
app = typer.Typer(
    name="seaplane",
    help="Seaplane CLI: manage metadata, locks and API-key restrictions.",
    add_completion=False,
    no_args_is_help=True,
)
account_app = typer.Typer(help="Access tokens and the stored API key.", no_args_is_help=True)
metadata_app = typer.Typer(help="The metadata key-value store.", no_args_is_help=True)
restrict_app = typer.Typer(help="API-key restrictions per API and directory.", no_args_is_help=True)
locks_app = typer.Typer(help="Distributed locks.", no_args_is_help=True)
app.add_typer(account_app, name="account")
app.add_typer(metadata_app, name="metadata")
app.add_typer(restrict_app, name="restrict")
app.add_typer(locks_app, name="locks")


def _handler(ctx: typer.Context) -> CommandHandler:
    return ctx.find_root().obj['command_handler']


def _finish(ctx: typer.Context, exit_code: int) -> None:
    ctx.find_root().obj['sender'].close()
    raise typer.Exit(code=exit_code)


# --- Shared options ---

Base64Option = Annotated[
    bool,
    typer.Option("--base64", "-B", help="Keys, names and directories are already URL-safe base64 encoded."),
]
SinglePageOption = Annotated[
    bool,
    typer.Option("--single-page", help="Only fetch the first page instead of following every cursor."),
]


@app.callback()
def main_callback(
    ctx: typer.Context,
    api_key: Annotated[
        Optional[str],
        typer.Option("--api-key", "-A", help="API key to use, overrides the configuration.", show_default=False),
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", help="Path to the YAML configuration file.", dir_okay=False),
    ] = None,
    stateless: Annotated[
        bool,
        typer.Option("--stateless", help="Ignore configuration files; use only flags and environment variables."),
    ] = False,
    verbose: Annotated[int, typer.Option("--verbose", "-v", count=True, help="More logging, -vv includes HTTP traffic.")] = 0,
    quiet: Annotated[int, typer.Option("--quiet", "-q", count=True, help="Less output, -qq for errors only.")] = 0,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", case_sensitive=False, help="Output format."),
    ] = OutputFormat.table,
):
    """Seaplane CLI."""
    overrides: Dict[str, Any] = ctx.obj or {}
    settings = load_settings(config_file=config, stateless=stateless, api_key=api_key)

    log_level = level_for_verbosity(verbose, quiet)
    if not verbose and not quiet and settings.log_level:
        log_level = getattr(logging, settings.log_level.upper(), log_level)
    setup_logging(
        log_level=log_level,
        log_format=settings.log_format or DEFAULT_LOG_FORMAT,
        log_file=settings.log_file,
        wire_logs=verbose >= 2,
    )

    ctx.obj = create_dependencies(
        settings,
        output_format=output_format,
        quiet=quiet > 0,
        http_transport=overrides.get('http_transport'),
    )


# --- account ---

@account_app.command("token")
def account_token(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Include tenant and subdomain, as JSON.")] = False,
):
    """Print a short lived access token."""
    _finish(ctx, _handler(ctx).handle_account_token(json_output=json_output))


@account_app.command("login")
def account_login(
    ctx: typer.Context,
    force: Annotated[bool, typer.Option("--force", help="Overwrite an API key that is already stored.")] = False,
):
    """Store an API key (read from stdin) in the configuration file."""
    _finish(ctx, _handler(ctx).handle_account_login(force=force))


# --- metadata ---

@metadata_app.command("get")
def metadata_get(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="The key to read.")],
    base64: Base64Option = False,
):
    """Print the value stored under KEY."""
    _finish(ctx, _handler(ctx).handle_metadata_get(key, base64=base64))


@metadata_app.command("set")
def metadata_set(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="The key to write.")],
    value: Annotated[str, typer.Argument(help="The value; '@path' reads a file, '@-' reads stdin.")],
    base64: Base64Option = False,
):
    """Store VALUE under KEY."""
    _finish(ctx, _handler(ctx).handle_metadata_set(key, value, base64=base64))


@metadata_app.command("delete")
def metadata_delete(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="The key to delete.")],
    base64: Base64Option = False,
):
    """Delete KEY."""
    _finish(ctx, _handler(ctx).handle_metadata_delete(key, base64=base64))


@metadata_app.command("list")
def metadata_list(
    ctx: typer.Context,
    directory: Annotated[Optional[str], typer.Argument(help="Only list keys in this directory.")] = None,
    from_key: Annotated[Optional[str], typer.Option("--from", help="Start listing at this key.")] = None,
    single_page: SinglePageOption = False,
    base64: Base64Option = False,
):
    """List key-value pairs."""
    _finish(ctx, _handler(ctx).handle_metadata_list(directory, from_key, single_page=single_page, base64=base64))


# --- restrict ---

@restrict_app.command("get")
def restrict_get(
    ctx: typer.Context,
    api: Annotated[str, typer.Argument(help="The restricted API, e.g. 'config' or 'locks'.")],
    directory: Annotated[str, typer.Argument(help="The restricted directory.")],
    base64: Base64Option = False,
):
    """Show the restriction on DIRECTORY of API."""
    _finish(ctx, _handler(ctx).handle_restrict_get(api, directory, base64=base64))


@restrict_app.command("set")
def restrict_set(
    ctx: typer.Context,
    api: Annotated[str, typer.Argument(help="The API to restrict.")],
    directory: Annotated[str, typer.Argument(help="The directory to restrict.")],
    region_allowed: Annotated[Optional[List[str]], typer.Option("--region-allowed", help="Allowed region, repeatable.")] = None,
    region_denied: Annotated[Optional[List[str]], typer.Option("--region-denied", help="Denied region, repeatable.")] = None,
    provider_allowed: Annotated[Optional[List[str]], typer.Option("--provider-allowed", help="Allowed provider, repeatable.")] = None,
    provider_denied: Annotated[Optional[List[str]], typer.Option("--provider-denied", help="Denied provider, repeatable.")] = None,
    base64: Base64Option = False,
):
    """Restrict where DIRECTORY of API may be served from."""
    details = RestrictionDetails(
        regions_allowed=list(region_allowed or []),
        regions_denied=list(region_denied or []),
        providers_allowed=list(provider_allowed or []),
        providers_denied=list(provider_denied or []),
    )
    _finish(ctx, _handler(ctx).handle_restrict_set(api, directory, details, base64=base64))


@restrict_app.command("delete")
def restrict_delete(
    ctx: typer.Context,
    api: Annotated[str, typer.Argument(help="The restricted API.")],
    directory: Annotated[str, typer.Argument(help="The restricted directory.")],
    base64: Base64Option = False,
):
    """Remove the restriction on DIRECTORY of API."""
    _finish(ctx, _handler(ctx).handle_restrict_delete(api, directory, base64=base64))


@restrict_app.command("list")
def restrict_list(
    ctx: typer.Context,
    api: Annotated[Optional[str], typer.Argument(help="Only list restrictions of this API.")] = None,
    from_api: Annotated[Optional[str], typer.Option("--from-api", help="Start listing at this API.")] = None,
    from_dir: Annotated[Optional[str], typer.Option("--from-dir", help="Start listing at this directory.")] = None,
    single_page: SinglePageOption = False,
    base64: Base64Option = False,
):
    """List restrictions."""
    _finish(ctx, _handler(ctx).handle_restrict_list(api, from_api, from_dir, single_page=single_page, base64=base64))


# --- locks ---

@locks_app.command("status")
def locks_status(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="The lock name.")],
    base64: Base64Option = False,
):
    """Show who holds lock NAME."""
    _finish(ctx, _handler(ctx).handle_locks_status(name, base64=base64))


@locks_app.command("acquire")
def locks_acquire(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="The lock name.")],
    ttl: Annotated[int, typer.Option("--ttl", min=1, help="Seconds until the lock lapses.")],
    client_id: Annotated[str, typer.Option("--client-id", help="Identifies the holder.")],
    base64: Base64Option = False,
):
    """Acquire lock NAME."""
    _finish(ctx, _handler(ctx).handle_locks_acquire(name, ttl, client_id, base64=base64))


@locks_app.command("release")
def locks_release(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="The lock name.")],
    lock_id: Annotated[str, typer.Option("--lock-id", help="The ID returned by 'acquire'.")],
    base64: Base64Option = False,
):
    """Release lock NAME."""
    _finish(ctx, _handler(ctx).handle_locks_release(name, lock_id, base64=base64))


@locks_app.command("renew")
def locks_renew(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="The lock name.")],
    lock_id: Annotated[str, typer.Option("--lock-id", help="The ID returned by 'acquire'.")],
    ttl: Annotated[int, typer.Option("--ttl", min=1, help="New number of seconds until the lock lapses.")],
    base64: Base64Option = False,
):
    """Extend the lifetime of lock NAME."""
    _finish(ctx, _handler(ctx).handle_locks_renew(name, lock_id, ttl, base64=base64))


@locks_app.command("list")
def locks_list(
    ctx: typer.Context,
    directory: Annotated[Optional[str], typer.Argument(help="Only list locks in this directory.")] = None,
    from_name: Annotated[Optional[str], typer.Option("--from", help="Start listing at this lock name.")] = None,
    single_page: SinglePageOption = False,
    base64: Base64Option = False,
):
    """List held locks."""
    _finish(ctx, _handler(ctx).handle_locks_list(directory, from_name, single_page=single_page, base64=base64))


# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
