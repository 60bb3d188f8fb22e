"""CLI principal (Typer).

Comandos:
- `sync`: descarga la última release si es más nueva que el marker local.
- `check`: compara versiones sin tocar disco.
- `doctor`: diagnósticos de entorno.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from adapters.github_releases import GitHubReleaseSource
from cli import doctor
from cli.ui_components import build_check_table, make_event_printer, print_banner
from core.config import AppSettings
from core.domain.errors import SyncError
from core.interfaces.release_source import ReleaseSource
from core.services.sync_pipeline import PipelineHooks, SyncRequest, check_release, sync_release

app = typer.Typer(
    no_args_is_help=True,
    help="Keep a local copy of the latest Swagger UI dist bundle in sync.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def build_release_source(settings: AppSettings, releases_url: str | None = None) -> ReleaseSource:
    return GitHubReleaseSource(settings, releases_url=releases_url)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _fail(exc: SyncError) -> NoReturn:
    where = f" during {exc.stage}" if exc.stage else ""
    _err_console.print(f"[bold red]Error{where}:[/bold red] {escape(str(exc))}")
    raise typer.Exit(code=1)


@app.command()
def sync(
    out: Path = typer.Option(None, "--out", "-o", help="Directory to store output to (default: current directory)."),
    marker: str = typer.Option(None, "--marker", help="Version marker file name inside the output directory."),
    releases_url: str = typer.Option(None, "--releases-url", help="Override the 'latest release' endpoint."),
    payload_dir: str = typer.Option(None, "--payload-dir", help="Subdirectory of the release to copy ('' for all)."),
    work_dir: Path = typer.Option(None, "--work-dir", help="Where the temporary staging area is created."),
    force: bool = typer.Option(False, "--force", help="Re-download even if the local version is current."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print errors."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Download and install the latest release when it is newer than the local one."""

    _configure_logging(verbose)
    settings = AppSettings()
    request = SyncRequest(
        output_dir=out or settings.output_dir,
        work_dir=work_dir,
        marker_filename=marker,
        payload_subdir=payload_dir,
        force=force,
    )
    hooks = PipelineHooks(event=None if quiet else make_event_printer(_console))
    source = build_release_source(settings, releases_url)

    if not quiet:
        print_banner(_console)

    try:
        result = asyncio.run(sync_release(settings=settings, request=request, source=source, hooks=hooks))
    except SyncError as exc:
        _fail(exc)

    if not quiet:
        if result.updated:
            _console.print(f"\n[green]Updated {result.previous_version} -> {result.remote_version}[/green]\n")
        else:
            _console.print(f"\n[dim]Already up to date ({result.previous_version}).[/dim]\n")


@app.command()
def check(
    out: Path = typer.Option(None, "--out", "-o", help="Directory holding the version marker."),
    marker: str = typer.Option(None, "--marker", help="Version marker file name inside the output directory."),
    releases_url: str = typer.Option(None, "--releases-url", help="Override the 'latest release' endpoint."),
) -> None:
    """Show local and remote versions without downloading anything."""

    _configure_logging(False)
    settings = AppSettings()
    request = SyncRequest(output_dir=out or settings.output_dir, marker_filename=marker)
    source = build_release_source(settings, releases_url)

    try:
        result = asyncio.run(check_release(settings=settings, request=request, source=source))
    except SyncError as exc:
        _fail(exc)

    _console.print(build_check_table(result))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
