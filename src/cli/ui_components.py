"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- El orquestador emite `SyncEvent`s; aquí decidimos cómo se pintan.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import EventLevel, SyncEvent
from core.services.sync_pipeline import VersionCheck

_LEVEL_STYLES: dict[EventLevel, str] = {
    EventLevel.INFO: "white",
    EventLevel.WARNING: "yellow",
    EventLevel.ERROR: "bold red",
}


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("swagger-ui-sync", style="bold cyan")
    subtitle = Text("Latest Swagger UI release • Safe extraction • Version marker", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def make_event_printer(console: Console):
    """Devuelve un callback para `PipelineHooks.event` que pinta cada evento."""

    def _print(event: SyncEvent) -> None:
        style = _LEVEL_STYLES.get(event.level, "white")
        label = Text(f"[{event.stage.value}]", style="cyan")
        console.print(label, Text(event.message, style=style))

    return _print


def build_check_table(check: VersionCheck) -> Table:
    """Tabla con versión local vs remota."""

    table = Table(title="Version check")
    table.add_column("Item", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("Local version", str(check.current))
    if check.marker_problem:
        table.add_row("Marker", Text(check.marker_problem, style="yellow"))
    table.add_row("Remote tag", check.release.tag_name)
    table.add_row("Tarball", check.release.tarball_url)
    status = Text("update available", style="green") if check.update_available else Text("up to date", style="dim")
    table.add_row("Status", status)
    return table
