"""Click-based CLI for Playlink - active-player sync and account linking."""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Optional

import click
import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from playlink import __version__
from playlink.commands import LinkCommands
from playlink.config import (
    PlaylinkConfig,
    ensure_config_exists,
    get_config_path,
    load_config_or_default,
    validate_config_file,
)
from playlink.errors import ConfigurationError
from playlink.hooks import PRE_CYCLE, PRE_LINK, PRE_PLAYER, load_hooks
from playlink.host import FileHost
from playlink.http import HttpClient
from playlink.logger import PlaylinkLogger
from playlink.resource import PlaylinkResource
from playlink.sync import CycleOutcome, OutcomeKind, SyncScheduler, format_delay

console = Console()
logger = PlaylinkLogger(console)


def resource_options(func: Callable) -> Callable:
    """Options shared by every command that runs the resource."""
    func = click.option("--verbose", "-v", is_flag=True, help="Show debug output")(func)
    func = click.option("--server-id", default=None, help="Server ID (overrides host.convars)")(func)
    func = click.option(
        "--sessions",
        type=click.Path(path_type=Path),
        default=None,
        help="YAML file listing connected sessions",
    )(func)
    func = click.option(
        "--config",
        "config_path",
        type=click.Path(path_type=Path),
        default=None,
        help="Configuration file (default: ~/.config/playlink/config.yaml)",
    )(func)
    return func


def _load(config_path: Optional[Path]) -> PlaylinkConfig:
    try:
        return load_config_or_default(config_path)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        logger.error(str(e))
        sys.exit(1)


def _build(
    config_path: Optional[Path],
    sessions: Optional[Path],
    server_id: Optional[str],
    verbose: bool,
) -> tuple[PlaylinkResource, FileHost]:
    """Create a resource running on a file-backed host."""
    config = _load(config_path)
    run_console = console if config.output.colored else Console(no_color=True)
    run_logger = PlaylinkLogger(run_console, verbose=verbose or config.output.verbose)

    convars = dict(config.host.convars)
    if server_id:
        convars[config.server.convar_name] = server_id

    host = FileHost(sessions or config.host.sessions_file, convars=convars, logger=run_logger)
    return PlaylinkResource(host, config, logger=run_logger), host


def _prepare(resource: PlaylinkResource) -> tuple[SyncScheduler, LinkCommands]:
    try:
        return resource.prepare()
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="playlink")
def cli() -> None:
    """Playlink - active-player sync and account linking.

    Keeps the account service informed of which players are connected and
    lets players link their game license to an account.

    \b
    Sessions are read from a YAML file:
        sessions:
          - id: "1"
            name: Alice
            identifiers: {license: "license:0123"}
    """
    pass


@cli.command()
@resource_options
def run(config_path: Optional[Path], sessions: Optional[Path], server_id: Optional[str], verbose: bool) -> None:
    """Run the sync loop until interrupted."""
    resource, host = _build(config_path, sessions, server_id, verbose)

    async def serve() -> bool:
        if not resource.start():
            return False
        try:
            await asyncio.Event().wait()
        finally:
            await host.fire_stop()
        return True

    try:
        started = asyncio.run(serve())
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        return

    if not started:
        sys.exit(1)


@cli.command()
@resource_options
def ping(config_path: Optional[Path], sessions: Optional[Path], server_id: Optional[str], verbose: bool) -> None:
    """Run a single sync cycle and show the scheduling decision."""
    resource, _ = _build(config_path, sessions, server_id, verbose)
    scheduler, _ = _prepare(resource)

    async def once() -> tuple[CycleOutcome, Optional[float]]:
        outcome = await scheduler.run_cycle()
        delay = scheduler.state.next_delay
        await resource.stop()
        return outcome, delay

    outcome, delay = asyncio.run(once())

    table = Table(title="Sync Cycle", show_header=True, header_style="bold")
    table.add_column("Outcome", style="cyan")
    table.add_column("Next cycle in")
    table.add_column("Consecutive failures", justify="right")
    table.add_row(
        outcome.kind.value,
        format_delay(delay) if delay is not None else "-",
        str(scheduler.state.consecutive_failures),
    )
    console.print(table)

    if outcome.kind in (OutcomeKind.TRANSIENT_FAILURE, OutcomeKind.NETWORK_ERROR):
        sys.exit(1)


def _invoke(resource: PlaylinkResource, session: str, args: list[str]) -> None:
    _, commands = _prepare(resource)

    async def invoke() -> None:
        try:
            await commands.handle(session, args)
        finally:
            await resource.stop()

    asyncio.run(invoke())


@cli.command()
@click.argument("session")
@click.argument("token")
@resource_options
def connect(
    session: str,
    token: str,
    config_path: Optional[Path],
    sessions: Optional[Path],
    server_id: Optional[str],
    verbose: bool,
) -> None:
    """Link SESSION's licenses to the account owning TOKEN."""
    resource, _ = _build(config_path, sessions, server_id, verbose)
    _invoke(resource, session, ["connect", token])


@cli.command()
@click.argument("session")
@resource_options
def info(
    session: str,
    config_path: Optional[Path],
    sessions: Optional[Path],
    server_id: Optional[str],
    verbose: bool,
) -> None:
    """Show the account link status of SESSION."""
    resource, _ = _build(config_path, sessions, server_id, verbose)
    _invoke(resource, session, ["info"])


@cli.group()
def config() -> None:
    """Manage the Playlink configuration file."""
    pass


@config.command("init")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None, help="Where to create it")
def config_init(config_path: Optional[Path]) -> None:
    """Create a default configuration file if none exists."""
    path, created = ensure_config_exists(config_path)
    if created:
        logger.info(f"Created configuration: {path}")
    else:
        logger.warning(f"Configuration already exists: {path}")


@config.command("show")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None, help="Configuration file")
def config_show(config_path: Optional[Path]) -> None:
    """Show the effective configuration, defaults included."""
    loaded = _load(config_path)
    text = yaml.dump(loaded.model_dump(mode="json"), default_flow_style=False, sort_keys=False)
    console.print(Syntax(text, "yaml"))


@config.command("validate")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None, help="Configuration file")
def config_validate(config_path: Optional[Path]) -> None:
    """Validate a configuration file."""
    valid, errors = validate_config_file(config_path)
    if valid:
        logger.info("Configuration is valid")
        return

    for error in errors:
        logger.error(error)
    sys.exit(1)


@config.command("path")
def config_path_cmd() -> None:
    """Print the configuration file location."""
    click.echo(str(get_config_path()))


@cli.group()
def hooks() -> None:
    """Inspect operator hooks."""
    pass


@hooks.command("check")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None, help="Configuration file")
@click.option("--module", "module_path", type=click.Path(path_type=Path), default=None, help="Hooks file to check")
def hooks_check(config_path: Optional[Path], module_path: Optional[Path]) -> None:
    """Load the hooks file and report what each checkpoint will run."""
    loaded = _load(config_path)
    path = module_path or loaded.hooks.module
    if path is None:
        logger.info("No hooks module configured, every checkpoint allows")
        return

    if not Path(path).expanduser().exists():
        logger.error(f"Hooks file not found: {path}")
        sys.exit(1)

    host = FileHost(loaded.host.sessions_file, convars=loaded.host.convars, logger=logger)
    pipeline = load_hooks(
        path,
        host=host,
        http=HttpClient(timeout=loaded.remote.timeout, user_agent=loaded.remote.user_agent),
        logger=logger,
        malformed_policy=loaded.hooks.malformed_policy,
    )

    table = Table(title="Hooks", show_header=True, header_style="bold")
    table.add_column("Checkpoint", style="cyan")
    table.add_column("Hooks", justify="right")
    table.add_column("Status")
    for checkpoint in (PRE_LINK, PRE_PLAYER, PRE_CYCLE):
        if pipeline.is_malformed(checkpoint):
            status = f"[yellow]malformed ({pipeline.malformed_policy.value})[/yellow]"
        else:
            status = "[green]ok[/green]"
        table.add_row(checkpoint, str(pipeline.count(checkpoint)), status)
    console.print(table)


if __name__ == "__main__":
    cli()
