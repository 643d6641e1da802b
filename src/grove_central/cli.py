"""CLI for the central directory client.

Provides read-only lookups against a central service from the command line.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import Any

import click

from .client import CentralClient
from .config import CentralConfig
from .errors import CentralError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


@click.group()
@click.option("--url", envvar="GROVE_CENTRAL_URL", required=True, help="Central service base URL")
@click.option(
    "--session-key",
    envvar="GROVE_CENTRAL_SESSION_KEY",
    default=None,
    help="Session token sent as the checkpoint.session cookie",
)
@click.option("--timeout", default=30.0, type=float, help="Request timeout in seconds (default: 30)")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(
    ctx: click.Context,
    url: str,
    session_key: str | None,
    timeout: float,
    verbose: bool,
) -> None:
    """Grove Central - read memberships, users and applications."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        ctx.obj = CentralConfig(base_url=url, session_key=session_key, timeout_seconds=timeout)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("identity_id", type=int)
@click.pass_obj
def memberships(config: CentralConfig, identity_id: int) -> None:
    """List the memberships of an identity."""
    result = _run(config, lambda client: client.get_memberships_by_identity(identity_id))
    _echo_json([m.model_dump(mode="json") for m in result])


@cli.command()
@click.argument("identity_id", type=int)
@click.pass_obj
def user(config: CentralConfig, identity_id: int) -> None:
    """Show the user bound to an identity."""
    result = _run(config, lambda client: client.get_user_by_identity(identity_id))
    _echo_json(result.model_dump(mode="json") if result is not None else None)


@cli.command()
@click.argument("key")
@click.pass_obj
def application(config: CentralConfig, key: str) -> None:
    """Show an application by key."""
    result = _run(config, lambda client: client.get_application_by_key(key))
    _echo_json(result.model_dump(mode="json") if result is not None else None)


def _run(config: CentralConfig, call: Callable[[CentralClient], Awaitable[Any]]) -> Any:
    """Open a client, run ``call`` with it, and exit 1 on client errors."""

    async def _run_async() -> Any:
        async with CentralClient(config) as client:
            return await call(client)

    try:
        return asyncio.run(_run_async())
    except CentralError as exc:
        logger.debug("Request failed", exc_info=True)
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2))


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
