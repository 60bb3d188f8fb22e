"""Versiones semánticas (parseo, validación y orden).

Nota sobre el orden:
- `compare` compara el *texto* de cada componente, no su valor numérico.
  Así "9" > "10". Es el comportamiento histórico de la herramienta y los
  tests lo fijan; no lo "arregles" sin cambiar también el marker en disco.
"""

from __future__ import annotations

import re
from enum import Enum
from itertools import zip_longest

from pydantic import BaseModel, ConfigDict, Field

from core.domain.errors import VersionParseError

_COMPONENT_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)

# Posiciones que participan en la comparación (major, minor, patch).
_COMPARED_POSITIONS = 3


class Ordering(int, Enum):
    LESS = -1
    EQUAL = 0
    GREATER = 1


class SemanticVersion(BaseModel):
    """Versión ya validada; cada componente guarda su texto numérico."""

    model_config = ConfigDict(frozen=True)

    parts: tuple[str, ...] = Field(
        ...,
        min_length=1,
        description="Componentes numéricos en orden (major, minor, patch, ...).",
    )

    @property
    def major(self) -> str:
        return self._at(0)

    @property
    def minor(self) -> str:
        return self._at(1)

    @property
    def patch(self) -> str:
        return self._at(2)

    def _at(self, index: int) -> str:
        return self.parts[index] if index < len(self.parts) else "0"

    def __str__(self) -> str:
        return ".".join(self.parts)


BASELINE = SemanticVersion(parts=("0", "0", "0"))


def sanitize(raw: str) -> str:
    """Quita espacios y un único prefijo alfabético (p.ej. la `v` de `v1.2.3`).

    Un signo inicial no es un prefijo: `-1.2.3` sigue siendo inválido.
    """

    text = raw.strip()
    if text and text[0].isalpha():
        text = text[1:]
    return text


def parse(raw: str) -> SemanticVersion:
    """Parsea `raw` o lanza `VersionParseError`.

    La política es permisiva con la aridad: se valida que cada componente sea
    un entero no negativo, pero no se exige que haya exactamente tres.
    """

    if not isinstance(raw, str):
        raise VersionParseError(str(raw), "not a string")

    text = sanitize(raw)
    if not text:
        raise VersionParseError(raw, "empty version")

    parts = text.split(".")
    for part in parts:
        if not _COMPONENT_RE.fullmatch(part):
            raise VersionParseError(raw, f"component '{part}' is not an integer")
        if int(part) < 0:
            raise VersionParseError(raw, f"component '{part}' is negative")

    return SemanticVersion(parts=tuple(parts))


def is_valid(raw: str) -> bool:
    try:
        parse(raw)
    except VersionParseError:
        return False
    return True


def compare(a: SemanticVersion, b: SemanticVersion) -> Ordering:
    """Orden posicional de izquierda a derecha sobre el texto de cada componente."""

    pairs = zip_longest(a.parts, b.parts, fillvalue="0")
    for index, (left, right) in enumerate(pairs):
        if index >= _COMPARED_POSITIONS:
            break
        if left > right:
            return Ordering.GREATER
        if left < right:
            return Ordering.LESS
    return Ordering.EQUAL


def is_newer(current: SemanticVersion, candidate: SemanticVersion) -> bool:
    """True si `candidate` debe reemplazar a `current`."""

    return compare(current, candidate) is Ordering.LESS
