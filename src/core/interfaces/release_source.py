"""Contrato de la fuente de releases.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- El orquestador no sabe si habla con GitHub, con un mirror o con un fake
  de tests; solo necesita metadata y un tarball.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from core.domain.models import ReleaseInfo


@runtime_checkable
class ReleaseSource(Protocol):
    """Contrato mínimo para obtener releases.

    Reglas de diseño:
    - Ambos métodos son asíncronos porque hacen I/O de red.
    - Cualquier fallo se reporta como `NetworkError`.
    """

    async def fetch_latest(self) -> ReleaseInfo:
        """Devuelve `tag_name` y `tarball_url` de la última release."""

        ...

    async def download(self, url: str, destination: Path) -> int:
        """Descarga `url` en `destination` y devuelve los bytes escritos."""

        ...
