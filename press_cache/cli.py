"""Thin CLI wrapper for press_cache.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from press_cache import __version__
from press_cache.config import Settings, get_settings, print_settings_json
from press_cache.types import ComponentFileInfo, StorageKind, component_info

app = typer.Typer(
    name="press",
    help="Press Cache - build compressed assets once and serve them from cache",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"press-cache version {__version__}")
        raise typer.Exit()


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Press Cache - build compressed assets once and serve them from cache."""
    _configure_logging(get_settings())


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        console.print(print_settings_json(settings), soft_wrap=True)
        return

    shared_display = (
        str(settings.shared_cache_dir)
        if settings.shared_cache_dir
        else "(in-process)"
    )
    console.print("[bold]Effective Configuration:[/bold]")
    console.print()
    console.print("[bold]Storage:[/bold]")
    console.print(f"  Backend:             {settings.storage.value}")
    console.print(f"  Gzip:                {settings.gzip}")
    console.print(f"  Compressed dir:      {settings.compressed_dir}")
    console.print(f"  Shared cache dir:    {shared_display}")
    console.print()
    console.print("[bold]Build coordination (ms):[/bold]")
    console.print(f"  Max build time:      {settings.max_build_time_ms}")
    console.print(f"  Poll interval:       {settings.poll_interval_ms}")
    console.print()
    console.print("[bold]Operational:[/bold]")
    console.print(f"  Log level:           {settings.log_level}")


def _warn_if_in_process(settings: Settings) -> None:
    if settings.storage == StorageKind.MEMORY and settings.shared_cache_dir is None:
        console.print(
            "[yellow]Note: memory storage without PRESS_SHARED_CACHE_DIR lasts only "
            "for this process; set it or use PRESS_STORAGE=disk to keep artifacts "
            "between runs.[/yellow]"
        )


def _component_infos(files: list[Path]) -> list[ComponentFileInfo]:
    missing = [str(f) for f in files if not f.is_file()]
    if missing:
        console.print(f"[red]File(s) not found: {', '.join(missing)}[/red]")
        raise typer.Exit(code=1)
    return [component_info(f) for f in files]


@app.command()
def key(
    files: Annotated[list[Path], typer.Argument(help="Component files, in order")],
    kind: Annotated[
        str | None,
        typer.Option("--kind", "-k", help="Artifact kind, e.g. js or css"),
    ] = None,
) -> None:
    """Print the artifact key for a list of component files."""
    from press_cache.artifacts.cache_key import derive_key

    console.print(derive_key(_component_infos(files), kind), soft_wrap=True)


@app.command("compile")
def compile_command(
    files: Annotated[list[Path], typer.Argument(help="Component files, in order")],
    kind: Annotated[
        str | None,
        typer.Option("--kind", "-k", help="Artifact kind, e.g. js or css"),
    ] = None,
    no_compress: Annotated[
        bool,
        typer.Option("--no-compress", help="Do not compress component content"),
    ] = False,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Also write the stored bytes to a file"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Compile component files into a cached artifact."""
    from press_cache.artifacts.base import ArtifactStoreError
    from press_cache.artifacts.service import compile_artifact, create_store
    from press_cache.transform import PassthroughTransformer

    components = _component_infos(files)
    settings = get_settings()
    store = create_store(settings)

    try:
        result = compile_artifact(
            store,
            components,
            PassthroughTransformer(),
            kind=kind,
            compress=not no_compress,
        )
    except ArtifactStoreError as e:
        if json_output:
            console.print(
                json.dumps({"code": e.code, "message": str(e)}), soft_wrap=True
            )
        else:
            console.print(f"[red]Compile failed ({e.code}): {e}[/red]")
        raise typer.Exit(code=1) from None

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(store.read_bytes(result.key))

    if json_output:
        data = {
            "key": result.key,
            "cache_hit": result.cache_hit,
            "length": result.length,
            "headers": result.delivery.headers() if result.delivery else {},
        }
        console.print(json.dumps(data, indent=2), soft_wrap=True)
        return

    _warn_if_in_process(settings)
    status = "cache hit" if result.cache_hit else "built"
    console.print(f"[green]{result.key}[/green] ({status}, {result.length} bytes)")
    if result.delivery and result.delivery.content_encoding:
        console.print(f"  Content-Encoding: {result.delivery.content_encoding}")
    if output is not None:
        console.print(f"  Written to: {output}")


@app.command("clear-cache")
def clear_cache(
    kind: Annotated[
        str | None,
        typer.Argument(help="Artifact kind to clear, e.g. js (default: all)"),
    ] = None,
) -> None:
    """Remove cached artifacts of a kind."""
    from press_cache.artifacts.service import clear_cache as clear_store
    from press_cache.artifacts.service import create_store

    settings = get_settings()
    removed = clear_store(create_store(settings), kind)
    console.print(f"Removed {removed} {kind or 'cached'} artifact(s)")
    _warn_if_in_process(settings)


if __name__ == "__main__":
    app()
