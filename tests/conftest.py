import io
import tarfile
from pathlib import Path

import pytest

from core.config import AppSettings
from core.domain.errors import NetworkError
from core.domain.models import ReleaseInfo

TOP_DIR = "swagger-api-swagger-ui-abc1234"


def build_tarball(entries: dict[str, bytes | None], *, mode: int = 0o644) -> bytes:
    """Build a .tar.gz in memory. `None` values become directory entries."""

    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, data in entries.items():
            info = tarfile.TarInfo(name=name)
            if data is None:
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tar.addfile(info)
            else:
                info.size = len(data)
                info.mode = mode
                tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def release_tarball() -> bytes:
    return build_tarball(
        {
            f"{TOP_DIR}/": None,
            f"{TOP_DIR}/README.md": b"# swagger-ui\n",
            f"{TOP_DIR}/dist/": None,
            f"{TOP_DIR}/dist/index.html": b"<html></html>\n",
            f"{TOP_DIR}/dist/swagger-ui.css": b"body {}\n",
            f"{TOP_DIR}/dist/nested/": None,
            f"{TOP_DIR}/dist/nested/bundle.js": b"console.log('ok');\n",
        }
    )


class FakeReleaseSource:
    """In-memory release source implementing the ReleaseSource protocol."""

    def __init__(
        self,
        tag_name: str = "v1.2.3",
        archive: bytes | None = None,
        *,
        fail_fetch: bool = False,
        fail_download: bool = False,
    ) -> None:
        self.release = ReleaseInfo(tag_name=tag_name, tarball_url=f"https://example.test/tarball/{tag_name}")
        self.archive = archive if archive is not None else release_tarball()
        self.fail_fetch = fail_fetch
        self.fail_download = fail_download
        self.fetch_calls = 0
        self.download_calls = 0

    async def fetch_latest(self) -> ReleaseInfo:
        self.fetch_calls += 1
        if self.fail_fetch:
            raise NetworkError("connection refused", url="https://example.test/releases/latest")
        return self.release

    async def download(self, url: str, destination: Path) -> int:
        self.download_calls += 1
        if self.fail_download:
            raise NetworkError("connection reset", url=url)
        destination.write_bytes(self.archive)
        return len(self.archive)


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(_env_file=None)


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "out"
    path.mkdir()
    return path


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    path = tmp_path / "work"
    path.mkdir()
    return path
