"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP) y el orquestador lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SWAGGER_UI_RELEASES_URL = "https://api.github.com/repos/swagger-api/swagger-ui/releases/latest"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "swagger-ui-sync"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "swagger-ui-sync"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "swagger-ui-sync"
    return Path.home() / ".config" / "swagger-ui-sync"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="SWAGGER_UI_SYNC_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    releases_url: str = Field(
        default=SWAGGER_UI_RELEASES_URL,
        min_length=8,
        description="Endpoint 'latest release' que devuelve tag_name y tarball_url.",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="swagger-ui-sync/0.1",
        min_length=1,
        description="User-Agent para las peticiones al endpoint de releases.",
    )

    output_dir: Path = Field(
        default=Path("."),
        description="Directorio destino del payload y del marker.",
    )
    work_dir: Path | None = Field(
        default=None,
        description="Directorio donde se crea el staging area (por defecto el cwd).",
    )
    marker_filename: str = Field(
        default=".swagger-ui-version.yml",
        min_length=1,
        description="Nombre del fichero marker dentro del directorio destino.",
    )
    payload_subdir: str = Field(
        default="dist",
        description="Subdirectorio del tarball que se copia al destino ('' = todo).",
    )
