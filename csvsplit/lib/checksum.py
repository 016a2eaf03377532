"""Chunk manifest with SHA256 checksums.

After a split, a manifest records every chunk file with its row count,
size and SHA256 so downstream loaders can check they received complete,
unmodified chunks. File paths are stored relative to the manifest.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from csvsplit.lib.chunker import SplitResult
from csvsplit.lib.errors import StreamIOError

logger = logging.getLogger(__name__)

__all__ = [
    "ChunkManifest",
    "ManifestVerificationResult",
    "compute_file_sha256",
    "write_chunk_manifest",
    "verify_chunk_manifest",
]


@dataclass
class ChunkManifest:
    """Manifest describing the chunks of one split."""

    timestamp: str
    files: List[Dict[str, Any]]
    row_count: int = 0
    line_bytes: Optional[int] = None

    @property
    def chunk_count(self) -> int:
        return len(self.files)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["chunk_count"] = self.chunk_count
        return data

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChunkManifest":
        """Create from dictionary."""
        return cls(
            timestamp=data.get("timestamp", ""),
            files=data.get("files", []),
            row_count=data.get("row_count", 0),
            line_bytes=data.get("line_bytes"),
        )

    @classmethod
    def from_file(cls, path: Path) -> "ChunkManifest":
        """Load manifest from file."""
        with open(path, encoding="utf-8") as f:
            return cls.from_dict(json.load(f))


@dataclass
class ManifestVerificationResult:
    """Result of checking chunk files against a manifest."""

    valid: bool
    verified_files: List[str] = field(default_factory=list)
    missing_files: List[str] = field(default_factory=list)
    mismatched_files: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        status = "VALID" if self.valid else "INVALID"
        parts = [f"ManifestVerification({status}", f"verified={len(self.verified_files)}"]
        if self.missing_files:
            parts.append(f"missing={len(self.missing_files)}")
        if self.mismatched_files:
            parts.append(f"mismatched={len(self.mismatched_files)}")
        return ", ".join(parts) + ")"


def compute_file_sha256(path: Path) -> str:
    """Compute SHA256 hash of a file, reading 1MB at a time."""
    hasher = hashlib.sha256()
    with path.open("rb") as f:
        for block in iter(lambda: f.read(1024 * 1024), b""):
            hasher.update(block)
    return hasher.hexdigest()


def write_chunk_manifest(
    manifest_path: Union[str, Path],
    result: SplitResult,
    *,
    line_bytes: Optional[int] = None,
) -> Path:
    """Write a JSON manifest for the chunk files of a split.

    Args:
        manifest_path: Where to write the manifest
        result: SplitResult whose chunks were written to named files
        line_bytes: Byte budget used for the split, recorded for reference

    Returns:
        Path to the written manifest

    Raises:
        StreamIOError: If a chunk cannot be hashed or the manifest written
    """
    manifest_path = Path(manifest_path)
    base_dir = manifest_path.parent

    entries: List[Dict[str, Any]] = []
    try:
        for chunk in result.chunks:
            if chunk.name is None:
                continue
            chunk_path = Path(chunk.name)
            entries.append({
                "path": os.path.relpath(chunk_path, base_dir),
                "rows": chunk.rows,
                "size_bytes": chunk_path.stat().st_size,
                "sha256": compute_file_sha256(chunk_path),
            })

        manifest = ChunkManifest(
            timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            files=entries,
            row_count=result.rows_written,
            line_bytes=line_bytes,
        )
        if str(base_dir) not in ("", "."):
            base_dir.mkdir(parents=True, exist_ok=True)
        manifest_path.write_text(manifest.to_json(), encoding="utf-8")
    except OSError as e:
        raise StreamIOError(
            "Failed to write chunk manifest",
            operation="manifest",
            path=str(manifest_path),
            cause=e,
        ) from e

    logger.debug("Wrote manifest for %d chunk(s) to %s", len(entries), manifest_path)
    return manifest_path


def verify_chunk_manifest(manifest_path: Union[str, Path]) -> ManifestVerificationResult:
    """Re-hash the chunk files listed in a manifest.

    Args:
        manifest_path: Path to a manifest written by write_chunk_manifest

    Returns:
        ManifestVerificationResult; invalid if the manifest is missing,
        or any chunk is missing or differs in size or hash

    Raises:
        StreamIOError: If the manifest cannot be read or parsed, or a
            chunk file cannot be hashed
    """
    manifest_path = Path(manifest_path)
    if not manifest_path.exists():
        logger.warning("Manifest not found: %s", manifest_path)
        return ManifestVerificationResult(valid=False)

    result = ManifestVerificationResult(valid=True)
    try:
        manifest = ChunkManifest.from_file(manifest_path)

        for entry in manifest.files:
            rel_path = entry["path"]
            chunk_path = manifest_path.parent / rel_path
            if not chunk_path.exists():
                result.missing_files.append(rel_path)
                continue
            if (
                chunk_path.stat().st_size != entry.get("size_bytes")
                or compute_file_sha256(chunk_path) != entry.get("sha256")
            ):
                result.mismatched_files.append(rel_path)
                continue
            result.verified_files.append(rel_path)
    except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
        raise StreamIOError(
            f"Failed to read chunk manifest {manifest_path}",
            operation="manifest",
            path=str(manifest_path),
            cause=e,
            suggestion="Regenerate the manifest with --manifest.",
        ) from e

    result.valid = not result.missing_files and not result.mismatched_files
    return result
