"""Staging area transitoria para un sync.

Vive bajo el directorio de trabajo (nunca dentro del destino) y se borra
siempre al salir del bloque `with`, haya ido bien o mal.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator

from core.domain.errors import FilesystemError

logger = logging.getLogger(__name__)

STAGING_PREFIX = ".swagger-ui-sync-"


@dataclass(frozen=True)
class StagingArea:
    root: Path

    @property
    def archive_path(self) -> Path:
        return self.root / "download.tar.gz"

    @property
    def extracted_dir(self) -> Path:
        return self.root / "extracted"


@contextmanager
def staging_area(
    work_dir: Path,
    *,
    on_cleanup_error: Callable[[str], None] | None = None,
) -> Iterator[StagingArea]:
    """Crea el staging area y garantiza su borrado.

    Un fallo al borrar se reporta por `on_cleanup_error` y en el log, pero no
    sustituye a la excepción original del bloque.
    """

    try:
        work_dir.mkdir(parents=True, exist_ok=True)
        root = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=work_dir))
    except OSError as exc:
        raise FilesystemError(f"Cannot create staging area in {work_dir}: {exc}", path=str(work_dir)) from exc

    try:
        yield StagingArea(root=root)
    finally:
        try:
            shutil.rmtree(root)
        except FileNotFoundError:
            pass
        except OSError as exc:
            message = f"Could not remove staging area {root}: {exc}"
            logger.warning(message)
            if on_cleanup_error:
                on_cleanup_error(message)
