from __future__ import annotations

from pathlib import Path
from typing import Any

import anyio
import msgspec
import structlog
import typer
from rich.console import Console

from . import __version__
from .classify import classify as find_link
from .config import ConfigError
from .logging import setup_logging
from .resolver import Resolver
from .results import EnhancedBuffer, Failure
from .settings import MediafetchSettings, load_settings_if_exists

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Resolve links, tracks and images through public provider APIs.",
)

_state: dict[str, Any] = {"config": None}


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    debug: bool = typer.Option(
        False,
        "--debug/--no-debug",
        help="Log every provider request and skip reason.",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Path to mediafetch.toml (defaults to ~/.mediafetch/mediafetch.toml).",
    ),
) -> None:
    setup_logging(debug=debug)
    structlog.contextvars.bind_contextvars(command=ctx.invoked_subcommand)
    _state["config"] = config


def _load_settings() -> MediafetchSettings:
    try:
        loaded = load_settings_if_exists(_state["config"])
    except ConfigError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from None
    if loaded is None:
        return MediafetchSettings()
    settings, _ = loaded
    return settings


def _emit(result: Any) -> None:
    if isinstance(result, Failure):
        typer.echo(result.error, err=True)
        raise typer.Exit(code=1)
    Console().print_json(msgspec.json.encode(result).decode())


def _read_file(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        typer.echo(f"Failed to read {path}: {e}", err=True)
        raise typer.Exit(code=1) from None


@app.command()
def classify(text: str = typer.Argument(..., help="Message text with a link.")) -> None:
    """Show which service a link belongs to."""
    extraction = find_link(text)
    if extraction is None:
        typer.echo("No supported link found.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"{extraction.type} {extraction.url}")


@app.command()
def download(
    text: str = typer.Argument(..., help="Message text with a link."),
    video: bool = typer.Option(False, "--video", help="Prefer video for YouTube."),
) -> None:
    """Resolve a download link for a supported service."""
    settings = _load_settings()

    async def run() -> Any:
        async with Resolver(settings) as resolver:
            return await resolver.download(text, prefer_video=video)

    _emit(anyio.run(run))


@app.command()
def play(
    query: str = typer.Argument(..., help="Song title, artist or link."),
    spotify: bool = typer.Option(False, "--spotify", help="Search Spotify instead."),
) -> None:
    """Search a track and resolve its audio download link."""
    settings = _load_settings()

    async def run() -> Any:
        async with Resolver(settings) as resolver:
            if spotify:
                return await resolver.spotify_search(query)
            return await resolver.play(query)

    _emit(anyio.run(run))


@app.command()
def enhance(
    path: Path = typer.Argument(..., help="Image file."),
    remove_bg: bool = typer.Option(
        False, "--remove-bg", help="Remove the background instead of upscaling."
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Where to write a returned image."
    ),
) -> None:
    """Upscale an image or remove its background."""
    settings = _load_settings()
    content = _read_file(path)

    async def run() -> Any:
        async with Resolver(settings) as resolver:
            if remove_bg:
                return await resolver.remove_background(content)
            return await resolver.upscale(content)

    result = anyio.run(run)
    if isinstance(result, EnhancedBuffer):
        target = output or path.with_name(f"{path.stem}.enhanced{path.suffix}")
        target.write_bytes(result.result_buffer)
        typer.echo(str(target))
        return
    _emit(result)


@app.command()
def upload(
    path: Path = typer.Argument(..., help="File to upload."),
    video: bool = typer.Option(False, "--video", help="Use the video-only host."),
    image: bool = typer.Option(False, "--image", help="Use the image-only host."),
) -> None:
    """Upload a file and print its public URL."""
    settings = _load_settings()
    content = _read_file(path)

    async def run() -> Any:
        async with Resolver(settings) as resolver:
            if video:
                return await resolver.upload_video(content)
            if image:
                return await resolver.upload_image(content)
            return await resolver.upload(content)

    _emit(anyio.run(run))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
