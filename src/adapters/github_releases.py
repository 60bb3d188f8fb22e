"""Fuente de releases: endpoint `releases/latest` de GitHub.

- `fetch_latest` lee `tag_name` y `tarball_url` del JSON.
- `download` hace streaming del tarball a disco (no lo guarda en memoria).

Todos los fallos de red, HTTP o de formato se traducen a `NetworkError`.
"""

from __future__ import annotations

import logging
from pathlib import Path

import httpx
from pydantic import ValidationError

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.errors import FilesystemError, NetworkError
from core.domain.models import ReleaseInfo
from core.interfaces.release_source import ReleaseSource

logger = logging.getLogger(__name__)

_DOWNLOAD_CHUNK_SIZE = 64 * 1024


class GitHubReleaseSource(ReleaseSource):
    """Obtiene la última release de un repo de GitHub (o endpoint compatible)."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        releases_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._releases_url = releases_url or self._settings.releases_url
        self._transport = transport

    @property
    def releases_url(self) -> str:
        return self._releases_url

    def _client(self) -> httpx.AsyncClient:
        return build_async_client(self._settings, transport=self._transport)

    async def fetch_latest(self) -> ReleaseInfo:
        url = self._releases_url
        logger.debug("GET %s", url)
        try:
            async with self._client() as client:
                response = await client.get(url)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise NetworkError(
                f"Release endpoint returned HTTP {exc.response.status_code}",
                url=url,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Cannot reach release endpoint: {exc}", url=url) from exc
        except ValueError as exc:
            raise NetworkError("Release endpoint did not return JSON", url=url) from exc

        try:
            return ReleaseInfo.model_validate(payload)
        except ValidationError as exc:
            raise NetworkError("Release payload lacks tag_name/tarball_url", url=url) from exc

    async def download(self, url: str, destination: Path) -> int:
        logger.debug("Downloading %s -> %s", url, destination)
        written = 0
        try:
            async with self._client() as client:
                async with client.stream("GET", url) as response:
                    response.raise_for_status()
                    with open(destination, "wb") as fh:
                        async for chunk in response.aiter_bytes(_DOWNLOAD_CHUNK_SIZE):
                            fh.write(chunk)
                            written += len(chunk)
        except httpx.HTTPStatusError as exc:
            raise NetworkError(
                f"Tarball download returned HTTP {exc.response.status_code}",
                url=url,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Tarball download failed: {exc}", url=url) from exc
        except OSError as exc:
            raise FilesystemError(f"Cannot write {destination}: {exc}", path=str(destination)) from exc

        logger.debug("Downloaded %d bytes", written)
        return written
