"""Tests for the persisted version marker."""

from pathlib import Path

import pytest
import yaml

from core import version_marker
from core.domain import semver
from core.domain.errors import FilesystemError, MarkerCorruptError, MarkerNotFoundError


class TestLoad:
    def test_missing_marker(self, output_dir: Path):
        assert version_marker.exists(output_dir) is False
        with pytest.raises(MarkerNotFoundError):
            version_marker.load(output_dir)

    @pytest.mark.parametrize(
        "content",
        [
            "",
            "just some text",
            "- a\n- list\n",
            "other: 1.2.3\n",
            "version: [1, 2]\n",
            "version: one.two.three\n",
            "version: {unterminated\n",
        ],
    )
    def test_corrupt_marker(self, output_dir: Path, content: str):
        version_marker.marker_path(output_dir).write_text(content, encoding="utf-8")
        with pytest.raises(MarkerCorruptError):
            version_marker.load(output_dir)

    def test_reads_hand_written_marker(self, output_dir: Path):
        version_marker.marker_path(output_dir).write_text("version: v2.0.0\n", encoding="utf-8")
        assert str(version_marker.load(output_dir)) == "2.0.0"

    def test_custom_filename(self, output_dir: Path):
        (output_dir / "swagger.yml").write_text("version: '3.1.4'\n", encoding="utf-8")
        assert str(version_marker.load(output_dir, "swagger.yml")) == "3.1.4"

    @pytest.mark.parametrize("raw,expected", [("1.10", "1.10"), ("1.10.0", "1.10.0"), ("2.0", "2.0"), ("7", "7")])
    def test_unquoted_numbers_keep_their_text(self, output_dir: Path, raw: str, expected: str):
        version_marker.marker_path(output_dir).write_text(f"version: {raw}\n", encoding="utf-8")
        assert str(version_marker.load(output_dir)) == expected

    def test_load_or_baseline(self, output_dir: Path):
        version, problem = version_marker.load_or_baseline(output_dir)
        assert version == semver.BASELINE
        assert isinstance(problem, MarkerNotFoundError)

        version_marker.marker_path(output_dir).write_text("garbage: [", encoding="utf-8")
        version, problem = version_marker.load_or_baseline(output_dir)
        assert version == semver.BASELINE
        assert isinstance(problem, MarkerCorruptError)


class TestSave:
    def test_round_trip(self, output_dir: Path):
        for raw in ("1.2.3", "0.0.1", "10.20.30", "4.5"):
            v = semver.parse(raw)
            version_marker.save(output_dir, v)
            assert version_marker.load(output_dir) == v

    def test_overwrites_previous_marker(self, output_dir: Path):
        version_marker.save(output_dir, semver.parse("1.0.0"))
        path = version_marker.save(output_dir, semver.parse("2.0.0"))
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data == {"version": "2.0.0"}

    def test_leaves_no_temporary_files(self, output_dir: Path):
        version_marker.save(output_dir, semver.parse("1.0.0"))
        assert [p.name for p in output_dir.iterdir()] == [version_marker.DEFAULT_MARKER_FILENAME]

    def test_creates_output_dir(self, tmp_path: Path):
        target = tmp_path / "new" / "dir"
        version_marker.save(target, semver.parse("1.2.3"))
        assert version_marker.exists(target)

    def test_write_failure(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")
        with pytest.raises(FilesystemError):
            version_marker.save(blocker / "sub", semver.parse("1.2.3"))
