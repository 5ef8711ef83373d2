import asyncio
from typing import Optional, Tuple

import click

from devnet_sdk.constants import (
    DEFAULT_MAX_STARTUP_SECONDS,
    LATEST_COMPATIBLE_DEVNET_VERSION,
)
from devnet_sdk.devnet import Devnet
from devnet_sdk.logging import get_devnet_logger, setup_logging
from devnet_sdk.types import DevnetConfig
from devnet_sdk.version_handler import VersionHandler

logger = get_devnet_logger()

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


async def fetch(version: str) -> str:
    return await VersionHandler.get_executable(version)


async def spawn(
    version: Optional[str],
    command: Optional[str],
    args: Tuple[str, ...],
    max_startup_seconds: float,
) -> None:
    config = DevnetConfig(args=args, max_startup_seconds=max_startup_seconds)
    if command is not None:
        devnet = await Devnet.spawn_command(command, config)
    elif version is not None:
        devnet = await Devnet.spawn_version(version, config)
    else:
        devnet = await Devnet.spawn_installed(config)

    logger.info(f"✅ Devnet pid={devnet.pid} listening on {devnet.url}")
    try:
        while devnet.is_running():
            await asyncio.sleep(1)
    finally:
        devnet.kill()
    logger.info(f"Devnet exited with code {devnet.process.returncode}")


@click.group()
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Logging level.",
)
def cli_entrypoint(log_level: str) -> None:
    """
    Devnet sdk command line.
    """
    setup_logging(logger, log_level)


@cli_entrypoint.command("fetch")
@click.argument("version", type=click.STRING)
def fetch_command(version: str) -> None:
    """
    Download the Devnet VERSION (e.g. v0.1.2 or latest) if needed and print its path.
    """
    if version == "latest":
        version = LATEST_COMPATIBLE_DEVNET_VERSION
    click.echo(asyncio.run(fetch(version)))


@cli_entrypoint.command(
    "spawn", context_settings={"ignore_unknown_options": True}
)
@click.option(
    "-v",
    "--version",
    type=click.STRING,
    required=False,
    help="Devnet version to spawn, e.g. v0.1.2 or latest.",
)
@click.option(
    "-c",
    "--command",
    type=click.STRING,
    required=False,
    help="Command or path of a Devnet executable. Takes precedence over --version.",
)
@click.option(
    "-t",
    "--max-startup-seconds",
    type=click.FloatRange(min=0),
    default=DEFAULT_MAX_STARTUP_SECONDS,
    help="Maximum time waited for Devnet to start.",
)
@click.argument("devnet_args", nargs=-1, type=click.UNPROCESSED)
def spawn_command(
    version: Optional[str],
    command: Optional[str],
    max_startup_seconds: float,
    devnet_args: Tuple[str, ...],
) -> None:
    """
    Spawn a Devnet and keep it running until interrupted.
    DEVNET_ARGS are passed to Devnet as they are.
    """
    asyncio.run(spawn(version, command, devnet_args, max_startup_seconds))


if __name__ == "__main__":
    cli_entrypoint()
