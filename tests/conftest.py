"""Shared pytest fixtures for organize-media tests."""

import json
import os
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from media_organizer.metadata import MetadataRecord


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user config files and environment overrides out of tests."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("ORGANIZE_MEDIA_CONFIG_DIR", str(config_dir))
    for var in ("ORGANIZE_MEDIA_SOURCE", "ORGANIZE_MEDIA_TARGET", "ORGANIZE_MEDIA_EXIFTOOL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return config_dir


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def source_dir(tmp_path):
    """Create a source tree with a Live Photo pair, a plain photo and a clip."""
    src = tmp_path / "source"
    (src / "trip").mkdir(parents=True)

    (src / "trip" / "IMG_0001.HEIC").write_bytes(b"fake heic data")
    (src / "trip" / "IMG_0001.MOV").write_bytes(b"fake mov data")
    (src / "a.jpg").write_bytes(b"fake jpg data")
    (src / "b.mov").write_bytes(b"fake clip data")
    (src / "notes.txt").write_text("not media")

    return src


@pytest.fixture
def target_dir(tmp_path):
    return tmp_path / "target"


@pytest.fixture
def make_record():
    """Build a MetadataRecord from ExifTool-style keyword arguments."""

    def _make(source_file, **tags):
        return MetadataRecord.from_exiftool({"SourceFile": str(source_file), **tags})

    return _make


@pytest.fixture
def counting_hasher():
    """Hash function that records every path it is asked to hash."""

    class CountingHasher:
        def __init__(self):
            self.calls = []

        def __call__(self, path):
            self.calls.append(path)
            return f"hash-{path.stem.lower()}-{path.suffix.lower().lstrip('.')}"

    return CountingHasher()


def exiftool_result(rows, returncode=0, stderr=""):
    """Fake CompletedProcess for an `exiftool -json` run."""
    return MagicMock(returncode=returncode, stdout=json.dumps(rows).encode(), stderr=stderr.encode())


@pytest.fixture
def mock_exiftool():
    """
    Mock subprocess.run to answer like `exiftool -json -@ -`.

    Tests register tags per file name in `mock.tags`; every file read from
    stdin gets a row with its SourceFile plus the registered tags.
    """
    tags: dict[str, dict] = {}

    def run_side_effect(cmd, input=b"", **kwargs):
        rows = []
        for line in map(os.fsdecode, input.splitlines()):
            if line:
                name = line.replace("\\", "/").rsplit("/", 1)[-1]
                rows.append({"SourceFile": line, **tags.get(name, {})})
        return exiftool_result(rows)

    with patch("media_organizer.exiftool.subprocess.run", side_effect=run_side_effect) as mock_run:
        mock_run.tags = tags
        yield mock_run
