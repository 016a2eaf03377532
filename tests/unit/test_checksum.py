"""Tests for the chunk manifest helpers."""

import hashlib
import io
import json
from pathlib import Path

import pytest

from csvsplit.lib.checksum import (
    ChunkManifest,
    compute_file_sha256,
    verify_chunk_manifest,
    write_chunk_manifest,
)
from csvsplit.lib.chunker import split
from csvsplit.lib.errors import StreamIOError
from csvsplit.lib.sinks import FileSinkFactory
from csvsplit.lib.tokenizer import iter_rows


def _split_files(tmp_path: Path, data: bytes, budget: int):
    with FileSinkFactory(prefix=str(tmp_path / "out" / "part-"), additional_suffix=".csv") as factory:
        result = split(iter_rows(io.BytesIO(data)), budget, factory)
    return result


def test_compute_file_sha256(tmp_path: Path):
    file = tmp_path / "part-00.csv"
    file.write_bytes(b"hello")
    assert compute_file_sha256(file) == hashlib.sha256(b"hello").hexdigest()


class TestWriteChunkManifest:
    def test_manifest_contents(self, tmp_path: Path):
        result = _split_files(tmp_path, b"a,b\nc,d\ne,f\n", 8)
        manifest_path = write_chunk_manifest(tmp_path / "out" / "manifest.json", result, line_bytes=8)

        data = json.loads(manifest_path.read_text())
        assert data["row_count"] == 3
        assert data["chunk_count"] == 2
        assert data["line_bytes"] == 8
        assert [f["path"] for f in data["files"]] == ["part-00.csv", "part-01.csv"]
        assert [f["rows"] for f in data["files"]] == [2, 1]
        assert [f["size_bytes"] for f in data["files"]] == [8, 4]
        assert data["files"][0]["sha256"] == hashlib.sha256(b"a,b\nc,d\n").hexdigest()

    def test_round_trip_from_file(self, tmp_path: Path):
        result = _split_files(tmp_path, b"x\n", 10)
        manifest_path = write_chunk_manifest(tmp_path / "m.json", result)
        manifest = ChunkManifest.from_file(manifest_path)
        assert manifest.chunk_count == 1
        assert manifest.files[0]["path"] == str(Path("out") / "part-00.csv")


class TestVerifyChunkManifest:
    def test_valid(self, tmp_path: Path):
        result = _split_files(tmp_path, b"a\nb\nc\n", 2)
        manifest_path = write_chunk_manifest(tmp_path / "out" / "manifest.json", result)

        verification = verify_chunk_manifest(manifest_path)

        assert verification.valid
        assert len(verification.verified_files) == 3
        assert "VALID" in str(verification)

    def test_missing_and_mismatched(self, tmp_path: Path):
        result = _split_files(tmp_path, b"a\nb\nc\n", 2)
        manifest_path = write_chunk_manifest(tmp_path / "out" / "manifest.json", result)
        (tmp_path / "out" / "part-00.csv").unlink()
        (tmp_path / "out" / "part-01.csv").write_bytes(b"z\n")

        verification = verify_chunk_manifest(manifest_path)

        assert not verification.valid
        assert verification.missing_files == ["part-00.csv"]
        assert verification.mismatched_files == ["part-01.csv"]
        assert verification.verified_files == ["part-02.csv"]

    def test_missing_manifest(self, tmp_path: Path):
        assert not verify_chunk_manifest(tmp_path / "none.json").valid

    @pytest.mark.parametrize(
        "content",
        ["{not json", '{"files": [{"rows": 1}]}', '["part-00.csv"]'],
    )
    def test_unreadable_manifest_raises_stream_error(self, tmp_path: Path, content: str):
        manifest_path = tmp_path / "manifest.json"
        manifest_path.write_text(content)

        with pytest.raises(StreamIOError) as exc_info:
            verify_chunk_manifest(manifest_path)

        assert exc_info.value.details["operation"] == "manifest"
        assert exc_info.value.details["path"] == str(manifest_path)
