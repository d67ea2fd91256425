"""Tests for the ExifTool batch reader and metadata records."""

import json
import os
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from media_organizer.exiftool import ExifToolError, build_command, find_exiftool, read_metadata, run_exiftool
from media_organizer.metadata import EXIFTOOL_TAGS, MetadataRecord


class TestMetadataRecord:
    """Tests for parsing ExifTool rows."""

    def test_from_exiftool(self):
        record = MetadataRecord.from_exiftool(
            {
                "SourceFile": "/src/IMG_1.HEIC",
                "DateTimeOriginal": "2024:01:02 03:04:05",
                "ContentIdentifier": "CID",
                "Make": "Apple",
            }
        )

        assert record.source_file == "/src/IMG_1.HEIC"
        assert record.path == Path("/src/IMG_1.HEIC")
        assert record.date_time_original == "2024:01:02 03:04:05"
        assert record.get("DateTimeOriginal") == "2024:01:02 03:04:05"
        assert record.content_identifier == "CID"
        assert record.create_date is None

    def test_empty_values_are_absent(self):
        record = MetadataRecord.from_exiftool({"SourceFile": "a.jpg", "CreateDate": "", "ContentIdentifier": "  "})
        assert record.create_date is None
        assert record.content_identifier is None

    def test_non_string_values(self):
        record = MetadataRecord.from_exiftool({"SourceFile": "a.jpg", "ContentIdentifier": 12345})
        assert record.content_identifier == "12345"

    def test_missing_source_file(self):
        with pytest.raises(ValueError):
            MetadataRecord.from_exiftool({"CreateDate": "2024:01:02 03:04:05"})

    def test_record_is_immutable(self):
        record = MetadataRecord(source_file="a.jpg")
        with pytest.raises(AttributeError):
            record.create_date = "2024:01:02 03:04:05"


class TestBuildCommand:
    """Tests for ExifTool command construction."""

    def test_reads_file_list_from_stdin(self):
        cmd = build_command("exiftool")
        assert cmd[0] == "exiftool"
        assert cmd[-2:] == ["-@", "-"]
        assert "-json" in cmd

    def test_requests_every_tag(self):
        cmd = build_command("exiftool")
        for tag in EXIFTOOL_TAGS:
            assert f"-{tag}" in cmd


class TestRunExifTool:
    """Tests for a single ExifTool invocation."""

    def test_empty_batch_does_not_spawn(self):
        with patch("subprocess.run") as mock_run:
            assert run_exiftool([]) == []
        mock_run.assert_not_called()

    def test_parses_rows(self):
        rows = [{"SourceFile": "a.jpg", "DateTimeOriginal": "2024:01:02 03:04:05"}, {"SourceFile": "b.mov"}]
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout=json.dumps(rows).encode(), stderr=b"")
            records = run_exiftool([Path("a.jpg"), Path("b.mov")])

        assert [r.source_file for r in records] == ["a.jpg", "b.mov"]
        assert records[0].date_time_original == "2024:01:02 03:04:05"
        assert mock_run.call_args.kwargs["input"] == os.fsencode(f"{Path('a.jpg')}\n{Path('b.mov')}\n")

    def test_failure_without_output(self):
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=2, stdout=b"", stderr=b"boom")
            with pytest.raises(ExifToolError, match="boom"):
                run_exiftool([Path("a.jpg")])

    def test_partial_failure_keeps_rows(self):
        """ExifTool exits 1 when some files fail but still reports the rest."""
        rows = [{"SourceFile": "a.jpg"}]
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=1, stdout=json.dumps(rows).encode(), stderr=b"Error: b.jpg")
            records = run_exiftool([Path("a.jpg"), Path("b.jpg")])

        assert [r.source_file for r in records] == ["a.jpg"]

    def test_invalid_json(self):
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout=b"not json", stderr=b"")
            with pytest.raises(ExifToolError):
                run_exiftool([Path("a.jpg")])

    def test_missing_binary(self):
        with patch("subprocess.run", side_effect=FileNotFoundError("exiftool")):
            with pytest.raises(ExifToolError, match="not found"):
                run_exiftool([Path("a.jpg")], exiftool="exiftool")

    @pytest.mark.skipif(sys.platform != "linux", reason="needs byte file names")
    def test_non_utf8_file_name(self, tmp_path):
        """Names that are not valid UTF-8 are sent and read back as raw bytes."""
        raw = os.fsencode(tmp_path) + b"/\xff.jpg"
        path = Path(os.fsdecode(raw))
        path.write_bytes(b"x")

        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout=b'[{"SourceFile": "' + raw + b'"}]', stderr=b"")
            (record,) = run_exiftool([path])

        assert mock_run.call_args.kwargs["input"] == raw + b"\n"
        assert record.path == path


class TestReadMetadata:
    """Tests for batched reading."""

    def test_batches_and_progress(self, mock_exiftool):
        files = [Path(f"file-{i}.jpg") for i in range(101)]
        seen = []

        records = read_metadata(files, batch_size=100, on_progress=seen.append)

        assert mock_exiftool.call_count == 2
        assert len(records) == 101
        assert seen == records
        assert records[0].source_file == str(files[0])
        assert records[-1].source_file == str(files[-1])

    def test_registered_tags(self, mock_exiftool):
        mock_exiftool.tags["a.jpg"] = {"CreateDate": "2024:01:02 03:04:05"}
        (record,) = read_metadata([Path("/src/a.jpg")])
        assert record.create_date == "2024:01:02 03:04:05"

    def test_invalid_batch_size(self):
        with pytest.raises(ValueError):
            read_metadata([Path("a.jpg")], batch_size=0)


class TestFindExifTool:
    """Tests for locating ExifTool."""

    def test_found(self):
        with patch("shutil.which", return_value="/usr/bin/exiftool"):
            assert find_exiftool("exiftool") == Path("/usr/bin/exiftool")

    def test_missing(self):
        with patch("shutil.which", return_value=None):
            assert find_exiftool("exiftool") is None

