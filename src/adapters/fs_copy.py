"""Copia de árboles de directorios (colaborador de RELOCATE)."""

from __future__ import annotations

import shutil
from pathlib import Path

from core.domain.errors import FilesystemError


def copy_tree(src_dir: Path, dst_dir: Path) -> Path:
    """Copia `src_dir` dentro de `dst_dir`, mezclando con lo que ya exista.

    Los ficheros existentes se sobrescriben; los que sobran en el destino se
    conservan (mismo comportamiento que un `cp -r src/. dst/`).
    """

    try:
        dst_dir.mkdir(parents=True, exist_ok=True)
        shutil.copytree(src_dir, dst_dir, dirs_exist_ok=True, symlinks=True)
    except (OSError, shutil.Error) as exc:
        raise FilesystemError(f"Cannot copy {src_dir} to {dst_dir}: {exc}", path=str(dst_dir)) from exc
    return dst_dir
