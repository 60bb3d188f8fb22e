"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Las respuestas del endpoint de releases se validan en el borde y el resto
  del flujo trabaja con objetos inmutables.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class ReleaseInfo(BaseModel):
    """Metadata de la última release publicada.

    Solo nos importan `tag_name` (versión remota, puede llevar prefijo `v`) y
    `tarball_url` (origen del DOWNLOAD). El resto del JSON se ignora.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    tag_name: str = Field(
        ...,
        min_length=1,
        description="Tag de la release (p.ej. 'v5.17.14').",
    )
    tarball_url: str = Field(
        ...,
        min_length=1,
        description="URL del tarball .tar.gz generado para el tag.",
    )


class VersionRecord(BaseModel):
    """Contenido serializado del marker de versión."""

    model_config = ConfigDict(extra="ignore")

    version: str = Field(
        ...,
        min_length=1,
        description="Última versión sincronizada completamente.",
    )


class EntryKind(str, Enum):
    DIRECTORY = "directory"
    FILE = "file"
    OTHER = "other"


class ArchiveEntry(BaseModel):
    """Una entrada del tarball tal y como aparece en el stream."""

    model_config = ConfigDict(frozen=True)

    path: str
    kind: EntryKind
    size: int = Field(default=0, ge=0)
    mode: int = Field(default=0o644, ge=0)


class SyncStage(str, Enum):
    START = "start"
    CHECK_MARKER = "check_marker"
    COMPARE_VERSIONS = "compare_versions"
    UP_TO_DATE = "up_to_date"
    DOWNLOAD = "download"
    EXTRACT = "extract"
    RELOCATE = "relocate"
    RECORD_VERSION = "record_version"
    CLEANUP = "cleanup"
    FAILED = "failed"


class EventLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class SyncEvent(BaseModel):
    """Evento estructurado emitido por el orquestador hacia la UI."""

    model_config = ConfigDict(frozen=True)

    stage: SyncStage
    message: str
    level: EventLevel = EventLevel.INFO
