"""Extracción en streaming de tarballs .tar.gz.

Por qué no `TarFile.extractall`:
- `extractall` necesita la lista completa de miembros (no es streaming).
- Queremos validar cada ruta antes de escribir nada y cerrar cada fichero
  antes de pasar a la siguiente entrada.

El stream se abre en modo `r|gz`: filtro gzip + lector secuencial de
entradas. Nunca se descomprime el archivo entero en memoria.
"""

from __future__ import annotations

import io
import logging
import os
import tarfile
import zlib
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import BinaryIO, Iterator

from core.domain.errors import ExtractError
from core.domain.models import ArchiveEntry, EntryKind

logger = logging.getLogger(__name__)

_COPY_CHUNK_SIZE = 64 * 1024
_PERMISSION_BITS = 0o777

_STREAM_ERRORS = (tarfile.TarError, zlib.error, EOFError)


def to_entry(member: tarfile.TarInfo) -> ArchiveEntry:
    if member.isdir():
        kind = EntryKind.DIRECTORY
    elif member.isreg():
        kind = EntryKind.FILE
    else:
        kind = EntryKind.OTHER
    return ArchiveEntry(
        path=member.name,
        kind=kind,
        size=max(member.size, 0),
        mode=member.mode & _PERMISSION_BITS,
    )


def iter_entries(tar: tarfile.TarFile) -> Iterator[tuple[ArchiveEntry, tarfile.TarInfo]]:
    """Recorre el stream entrada a entrada.

    Las cabeceras vacías (`None`) se saltan. Un error de cabecera o de
    descompresión se propaga tal cual; `extract` lo traduce a `ExtractError`.
    """

    while True:
        member = tar.next()
        if member is None:
            return
        if not member.name:
            continue
        yield to_entry(member), member


def resolve_target(dest_dir: Path, relative: str) -> Path:
    """Devuelve `dest_dir / relative` garantizando que no se sale de `dest_dir`."""

    if not relative:
        raise ExtractError("Empty entry path")

    posix = PurePosixPath(relative)
    windows = PureWindowsPath(relative)
    if posix.is_absolute() or windows.is_absolute() or windows.drive:
        raise ExtractError("Absolute path in archive", entry=relative)
    if ".." in posix.parts or ".." in windows.parts:
        raise ExtractError("Path escapes destination", entry=relative)

    root = dest_dir.resolve()
    target = (root / posix).resolve()
    if target != root and root not in target.parents:
        raise ExtractError("Path escapes destination", entry=relative)
    return target


def _write_file(tar: tarfile.TarFile, member: tarfile.TarInfo, entry: ArchiveEntry, target: Path) -> None:
    source = tar.extractfile(member)
    if source is None:
        raise ExtractError("Cannot read file data", entry=entry.path)

    target.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, entry.mode or 0o644)
    written = 0
    # Un descriptor abierto como máximo: se cierra antes de la siguiente entrada.
    with os.fdopen(fd, "wb") as out:
        remaining = entry.size
        while remaining > 0:
            chunk = source.read(min(_COPY_CHUNK_SIZE, remaining))
            if not chunk:
                break
            out.write(chunk)
            written += len(chunk)
            remaining -= len(chunk)

    if written != entry.size:
        raise ExtractError(
            f"Truncated file data ({written} of {entry.size} bytes)",
            entry=entry.path,
        )


def _open_stream(source: bytes | BinaryIO | Path) -> tuple[BinaryIO, bool]:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(source)), True
    if isinstance(source, (str, Path)):
        try:
            return open(source, "rb"), True
        except OSError as exc:
            raise ExtractError(f"Cannot open archive {source}: {exc}") from exc
    return source, False


def extract(source: bytes | BinaryIO | Path, dest_dir: Path) -> int:
    """Extrae un .tar.gz en `dest_dir` y devuelve cuántas entradas se escribieron.

    Directorios y ficheros regulares se materializan; enlaces y dispositivos
    se ignoran. Cualquier error aborta con `ExtractError`.
    """

    dest_dir = Path(dest_dir)
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ExtractError(f"Cannot create destination {dest_dir}: {exc}") from exc

    stream, owned = _open_stream(source)
    written = 0
    current: str | None = None
    try:
        with tarfile.open(fileobj=stream, mode="r|gz") as tar:
            for entry, member in iter_entries(tar):
                current = entry.path
                target = resolve_target(dest_dir, entry.path)

                if entry.kind is EntryKind.DIRECTORY:
                    target.mkdir(parents=True, exist_ok=True)
                elif entry.kind is EntryKind.FILE:
                    _write_file(tar, member, entry, target)
                else:
                    logger.debug("Skipping non-regular entry %s", entry.path)
                    continue

                written += 1
                current = None
    except ExtractError:
        raise
    except _STREAM_ERRORS as exc:
        raise ExtractError(f"Corrupt archive stream: {exc}", entry=current) from exc
    except OSError as exc:
        # gzip.BadGzipFile es OSError: puede ser stream o escritura.
        raise ExtractError(f"Extraction failed: {exc}", entry=current) from exc
    finally:
        if owned:
            stream.close()

    logger.debug("Extracted %d entries into %s", written, dest_dir)
    return written
