"""Jerarquía de errores del sync.

Por qué una jerarquía propia:
- La CLI solo necesita capturar `SyncError` para decidir el exit code.
- Los adaptadores traducen excepciones de terceros (httpx, OSError) a estos
  tipos para que el Core no dependa de ellas.
"""

from __future__ import annotations


class SyncError(Exception):
    """Base de todos los errores del flujo de sincronización."""

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.stage = stage


class VersionParseError(SyncError):
    """Texto de versión mal formado (componente no numérico o negativo)."""

    def __init__(self, raw: str, reason: str) -> None:
        super().__init__(f"Invalid version '{raw}': {reason}")
        self.raw = raw
        self.reason = reason


class MarkerError(SyncError):
    """El marker local no se pudo usar. Nunca es fatal."""


class MarkerNotFoundError(MarkerError):
    pass


class MarkerCorruptError(MarkerError):
    pass


class NetworkError(SyncError):
    """Fallo al obtener metadata de la release o el tarball."""

    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ExtractError(SyncError):
    """Stream corrupto, path traversal o estructura inesperada del archivo."""

    def __init__(self, message: str, *, entry: str | None = None) -> None:
        if entry:
            message = f"{message} (entry: {entry})"
        super().__init__(message)
        self.entry = entry


class FilesystemError(SyncError):
    """Fallo al crear/escribir/borrar en disco."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path
