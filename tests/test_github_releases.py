"""Tests for the GitHub release source using httpx.MockTransport."""

import asyncio
import json
from pathlib import Path

import httpx
import pytest

from adapters.github_releases import GitHubReleaseSource
from conftest import release_tarball
from core.domain.errors import NetworkError
from core.interfaces.release_source import ReleaseSource

RELEASES_URL = "https://api.example.test/repos/swagger-api/swagger-ui/releases/latest"
TARBALL_URL = "https://api.example.test/repos/swagger-api/swagger-ui/tarball/v5.17.14"


def _source(settings, handler) -> GitHubReleaseSource:
    return GitHubReleaseSource(
        settings,
        releases_url=RELEASES_URL,
        transport=httpx.MockTransport(handler),
    )


class TestFetchLatest:
    def test_parses_release(self, settings):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["ua"] = request.headers.get("user-agent")
            return httpx.Response(
                200,
                json={"url": "x", "tag_name": "v5.17.14", "tarball_url": TARBALL_URL, "draft": False},
            )

        release = asyncio.run(_source(settings, handler).fetch_latest())

        assert release.tag_name == "v5.17.14"
        assert release.tarball_url == TARBALL_URL
        assert seen["url"] == RELEASES_URL
        assert seen["ua"] == settings.user_agent

    def test_http_error_status(self, settings):
        source = _source(settings, lambda request: httpx.Response(404, json={"message": "Not Found"}))
        with pytest.raises(NetworkError) as info:
            asyncio.run(source.fetch_latest())
        assert info.value.status_code == 404
        assert info.value.url == RELEASES_URL

    def test_connection_error(self, settings):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        with pytest.raises(NetworkError):
            asyncio.run(_source(settings, handler).fetch_latest())

    def test_invalid_json(self, settings):
        source = _source(settings, lambda request: httpx.Response(200, content=b"<html>rate limited</html>"))
        with pytest.raises(NetworkError):
            asyncio.run(source.fetch_latest())

    def test_missing_fields(self, settings):
        source = _source(settings, lambda request: httpx.Response(200, content=json.dumps({"tag_name": "v1"})))
        with pytest.raises(NetworkError):
            asyncio.run(source.fetch_latest())

    def test_uses_settings_url_by_default(self, settings):
        assert GitHubReleaseSource(settings).releases_url == settings.releases_url


class TestDownload:
    def test_streams_to_disk_following_redirects(self, settings, tmp_path: Path):
        payload = release_tarball()

        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == TARBALL_URL:
                return httpx.Response(302, headers={"Location": "https://codeload.example.test/legacy.tar.gz"})
            return httpx.Response(200, content=payload)

        dest = tmp_path / "download.tar.gz"
        written = asyncio.run(_source(settings, handler).download(TARBALL_URL, dest))

        assert written == len(payload)
        assert dest.read_bytes() == payload

    def test_download_error_status(self, settings, tmp_path: Path):
        source = _source(settings, lambda request: httpx.Response(500))
        with pytest.raises(NetworkError) as info:
            asyncio.run(source.download(TARBALL_URL, tmp_path / "x.tar.gz"))
        assert info.value.status_code == 500


def test_satisfies_protocol(settings):
    assert isinstance(GitHubReleaseSource(settings), ReleaseSource)
