"""
Command line entry point: ``nbcmd upload`` and ``nbcmd delete``.

A thin shell over MediaClient. Each positional argument becomes one
call; the first failure is printed to stderr and ends the run with exit
status 1. stdout carries results only, logging goes to stderr.
"""

import json
import logging
import mimetypes
import sys
from pathlib import Path
from typing import List, NoReturn, Optional

import anyio
import typer

from nostrbuild.app.core.config import Settings, get_app_version, get_settings
from nostrbuild.app.core.errors import NostrBuildError
from nostrbuild.app.services.auth_event import Signer
from nostrbuild.app.services.key_signer import KeySigner
from nostrbuild.app.services.media_client import MediaClient, create_http_client

logger = logging.getLogger("nostrbuild.cli")

app = typer.Typer(
    help="A command line client for nostr.build",
    no_args_is_help=True,
)


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _load_settings() -> Settings:
    try:
        settings = get_settings()
    except ValueError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(1)
    _configure_logging(settings)
    return settings


def _signer(settings: Settings, anonymous: bool) -> Optional[Signer]:
    if anonymous:
        return None
    return KeySigner(settings.nsec)


def _print_result(result, verbose: bool, summary: str) -> None:
    if verbose:
        typer.echo(
            json.dumps(
                result.model_dump(mode="json", by_alias=True),
                ensure_ascii=False,
            )
        )
    else:
        typer.echo(summary)


def _fail(exc: Exception) -> NoReturn:
    logger.debug("command_failed", extra={"error_type": type(exc).__name__})
    typer.echo(str(exc), err=True)
    raise typer.Exit(1)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"nbcmd {get_app_version()}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """A command line client for nostr.build"""


@app.command()
def upload(
    files: List[Path] = typer.Argument(..., help="Media files to upload"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Print the full JSON result"),
    anonymous: bool = typer.Option(False, "--anonymous", help="Send without an auth event"),
) -> None:
    """Upload image files."""
    settings = _load_settings()
    signer = _signer(settings, anonymous)

    async def _run() -> None:
        async with create_http_client(settings) as http_client:
            client = MediaClient(http_client, settings)
            for path in files:
                try:
                    data = path.read_bytes()
                except OSError as exc:
                    _fail(exc)

                content_type = (
                    mimetypes.guess_type(path.name)[0]
                    or "application/octet-stream"
                )
                try:
                    result = await client.upload(
                        data,
                        signer=signer,
                        filename=path.name,
                        content_type=content_type,
                    )
                except NostrBuildError as exc:
                    _fail(exc)

                _print_result(result, verbose, result.primary_url)

    anyio.run(_run)


@app.command()
def delete(
    urls: List[str] = typer.Argument(..., help="URLs of uploaded media"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Print the full JSON result"),
    anonymous: bool = typer.Option(False, "--anonymous", help="Send without an auth event"),
) -> None:
    """Delete image files."""
    settings = _load_settings()
    signer = _signer(settings, anonymous)

    async def _run() -> None:
        async with create_http_client(settings) as http_client:
            client = MediaClient(http_client, settings)
            for url in urls:
                try:
                    result = await client.delete(url, signer=signer)
                except NostrBuildError as exc:
                    _fail(exc)

                _print_result(result, verbose, result.message)

    anyio.run(_run)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
