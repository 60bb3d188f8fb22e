"""Marker de la última versión sincronizada.

Formato en disco (YAML, una sola clave):

    version: "5.17.14"

Reglas:
- Solo el orquestador lo escribe y siempre como último paso de un sync
  completo; el marker nunca refleja un sync parcial.
- Se sobrescribe entero (write a fichero temporal + `os.replace`).
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import yaml
from pydantic import ValidationError

from core.domain import semver
from core.domain.errors import (
    FilesystemError,
    MarkerCorruptError,
    MarkerError,
    MarkerNotFoundError,
    VersionParseError,
)
from core.domain.models import VersionRecord
from core.domain.semver import SemanticVersion

logger = logging.getLogger(__name__)

DEFAULT_MARKER_FILENAME = ".swagger-ui-version.yml"


def marker_path(output_dir: Path, filename: str = DEFAULT_MARKER_FILENAME) -> Path:
    return Path(output_dir) / filename


def exists(output_dir: Path, filename: str = DEFAULT_MARKER_FILENAME) -> bool:
    return marker_path(output_dir, filename).is_file()


def load(output_dir: Path, filename: str = DEFAULT_MARKER_FILENAME) -> SemanticVersion:
    """Lee el marker.

    Lanza `MarkerNotFoundError` si no existe y `MarkerCorruptError` si el
    contenido no es un mapping YAML con un `version` parseable.
    """

    path = marker_path(output_dir, filename)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise MarkerNotFoundError(f"No version marker at {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise MarkerCorruptError(f"Cannot read version marker {path}: {exc}") from exc

    try:
        # BaseLoader deja todos los escalares como texto (`1.10` no pasa a float).
        data = yaml.load(text, Loader=yaml.BaseLoader)
    except yaml.YAMLError as exc:
        raise MarkerCorruptError(f"Version marker {path} is not valid YAML") from exc

    if not isinstance(data, dict):
        raise MarkerCorruptError(f"Version marker {path} is not a key-value mapping")

    if data.get("version") is not None:
        data = {**data, "version": str(data["version"])}

    try:
        record = VersionRecord.model_validate(data)
        return semver.parse(record.version)
    except ValidationError as exc:
        raise MarkerCorruptError(f"Version marker {path} has no 'version' field") from exc
    except VersionParseError as exc:
        raise MarkerCorruptError(f"Version marker {path}: {exc}") from exc


def load_or_baseline(
    output_dir: Path,
    filename: str = DEFAULT_MARKER_FILENAME,
) -> tuple[SemanticVersion, MarkerError | None]:
    """Como `load`, pero sustituye la baseline 0.0.0 ante cualquier fallo."""

    try:
        return load(output_dir, filename), None
    except MarkerError as exc:
        return semver.BASELINE, exc


def save(output_dir: Path, version: SemanticVersion, filename: str = DEFAULT_MARKER_FILENAME) -> Path:
    """Escribe el marker de forma atómica, sobrescribiendo el anterior."""

    path = marker_path(output_dir, filename)
    record = VersionRecord(version=str(version))
    payload = yaml.safe_dump(record.model_dump(mode="json"), default_flow_style=False, sort_keys=True)

    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{filename}.", suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(payload)
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as exc:
        raise FilesystemError(f"Cannot write version marker {path}: {exc}", path=str(path)) from exc
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.warning("Could not remove temporary marker %s", tmp_name)

    logger.debug("Recorded version %s in %s", version, path)
    return path
