"""CLI entry point for findip."""

import asyncio
from pathlib import Path

import aiohttp
import click
from dotenv import find_dotenv, load_dotenv

from findip import __version__
from findip.checker import IpChecker, TickOutcome
from findip.config import Config, get_config_path, load_config
from findip.errors import InvalidInputError
from findip.ip_query import IpQuery
from findip.logging import setup_logging, shutdown_logging
from findip.notifiers import create_notifier


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False, path_type=Path),
    default=None,
    envvar="FINDIP_CONFIG",
    help="Path to config file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug information.")
@click.pass_context
def main(ctx: click.Context, config: Path | None, verbose: bool) -> None:
    """findip - find and report the public IP address of this machine."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose


def cli() -> None:
    """Console script: load .env before click reads the environment."""
    load_dotenv(find_dotenv(usecwd=True))
    main()


def _load(ctx: click.Context) -> Config:
    """Load config and set up logging, exiting on invalid config."""
    try:
        config = load_config(ctx.obj["config_path"])
    except InvalidInputError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    setup_logging(config.logging, verbose=ctx.obj["verbose"])
    return config


def _build_checker(config: Config, session: aiohttp.ClientSession) -> IpChecker:
    return IpChecker(
        query=IpQuery(http_session=session),
        notifier=create_notifier(config.notifier, http_session=session),
        services=config.services,
        notify_on_change_only=config.notify_on_change_only,
    )


@main.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Check the IP on the configured cron schedule until interrupted."""
    from findip.scheduler import CronScheduler

    config = _load(ctx)

    async def _run():
        async with aiohttp.ClientSession() as session:
            checker = _build_checker(config, session)
            scheduler = CronScheduler(config.cron, checker.tick)
            try:
                click.echo(f"Checking public IP on schedule {config.cron!r}")
                click.echo("Press Ctrl+C to stop")
                await scheduler.run_forever()
            finally:
                await scheduler.stop()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        click.echo("\nShutting down...")
    finally:
        shutdown_logging()


@main.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Run a single check now."""
    config = _load(ctx)

    async def _check() -> TickOutcome:
        async with aiohttp.ClientSession() as session:
            return await _build_checker(config, session).tick()

    try:
        outcome = asyncio.run(_check())
    finally:
        shutdown_logging()

    if outcome is TickOutcome.QUERY_FAILED:
        raise SystemExit(1)
    if outcome is TickOutcome.DELIVERY_FAILED:
        raise SystemExit(2)


@main.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Validate the config file and print a summary."""
    path = get_config_path(ctx.obj["config_path"])
    try:
        config = load_config(path)
    except InvalidInputError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    click.echo(f"Config OK: {path}")
    click.echo(f"  cron: {config.cron}")
    click.echo(f"  notifier: {config.notifier.notifier_type.value}")
    click.echo(f"  notify on change only: {config.notify_on_change_only}")
    click.echo("  services:")
    for service in config.services:
        click.echo(f"    - {service}")


@main.command()
def version() -> None:
    """Show version."""
    click.echo(f"findip version {__version__}")
