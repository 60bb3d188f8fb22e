"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from adapters.github_releases import GitHubReleaseSource
from core import version_marker
from core.config import AppSettings
from core.domain import semver
from core.domain.errors import MarkerError, SyncError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_release_endpoint(settings: AppSettings, releases_url: str | None = None) -> tuple[bool, str]:
    try:
        release = await GitHubReleaseSource(settings, releases_url=releases_url).fetch_latest()
    except SyncError as exc:
        return False, str(exc)
    if not semver.is_valid(release.tag_name):
        return False, f"Unparseable tag '{release.tag_name}'"
    return True, f"Latest tag {release.tag_name}"


def _check_writable(directory: Path) -> tuple[bool, str]:
    """Attempt to create and remove a scratch file in `directory`."""

    if not directory.exists():
        return True, "Does not exist yet (will be created)"
    try:
        fd, name = tempfile.mkstemp(prefix=".doctor-", dir=directory)
        os.close(fd)
        os.unlink(name)
        return True, "Writable"
    except OSError as exc:
        return False, str(exc)


def _check_marker(output_dir: Path, filename: str) -> tuple[str, str]:
    try:
        version = version_marker.load(output_dir, filename)
    except MarkerError as exc:
        return "BASELINE", f"{exc} -> 0.0.0"
    return "OK", str(version)


@app.command()
def run(
    out: Path = typer.Option(None, "--out", "-o", help="Output directory to inspect."),
    releases_url: str = typer.Option(None, "--releases-url", help="Override the 'latest release' endpoint."),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    output_dir = out or settings.output_dir
    work_dir = settings.work_dir or Path.cwd()

    table = Table(title="swagger-ui-sync Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white", no_wrap=True)
    table.add_column("Details", style="dim")

    # Config
    table.add_row("Releases URL", "OK", releases_url or settings.releases_url)
    table.add_row("Payload dir", "OK", settings.payload_subdir or "<whole archive>")

    # Connectivity (best-effort)
    ok_http, detail_http = asyncio.run(_check_release_endpoint(settings, releases_url))
    table.add_row("Release endpoint", "OK" if ok_http else "FAIL", detail_http)

    ok_out, detail_out = _check_writable(output_dir)
    table.add_row("Output dir", "OK" if ok_out else "FAIL", f"{output_dir}: {detail_out}")

    ok_work, detail_work = _check_writable(work_dir)
    table.add_row("Work dir", "OK" if ok_work else "FAIL", f"{work_dir}: {detail_work}")

    marker_status, marker_detail = _check_marker(output_dir, settings.marker_filename)
    table.add_row("Version marker", marker_status, marker_detail)

    _console.print(table)

    if not ok_http:
        _console.print(
            "\n[yellow]Note:[/yellow] Set SWAGGER_UI_SYNC_RELEASES_URL or pass `--releases-url` to use a mirror."
        )
