"""Greedy row-to-chunk assignment under a soft byte budget.

Rows are written whole. Before each row is written, the chunker checks
whether it still fits in the current chunk; if not, it asks the sink
factory for a new sink. A row bigger than the whole budget therefore gets
a chunk of its own instead of being refused or split.

Example:
    >>> factory = BufferSinkFactory()
    >>> split([b"a,b,c", b"d,e,f"], 6, factory).chunk_count
    2
    >>> factory.chunks
    [b'a,b,c\\n', b'd,e,f\\n']
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, BinaryIO, Dict, Iterable, List, Optional

from csvsplit.lib.errors import ConfigurationError, StreamIOError
from csvsplit.lib.sinks import SinkFactory
from csvsplit.lib.tokenizer import ROW_SEP

logger = logging.getLogger(__name__)

__all__ = ["ChunkInfo", "SplitResult", "split", "TERMINATOR"]

TERMINATOR = bytes([ROW_SEP])


@dataclass
class ChunkInfo:
    """One chunk produced by a split."""

    index: int
    name: Optional[str] = None
    rows: int = 0
    bytes: int = 0


@dataclass
class SplitResult:
    """Outcome of a split."""

    chunks: List[ChunkInfo] = field(default_factory=list)
    rows_written: int = 0
    bytes_written: int = 0

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "chunk_count": self.chunk_count,
            "rows_written": self.rows_written,
            "bytes_written": self.bytes_written,
            "chunks": [asdict(chunk) for chunk in self.chunks],
        }


def _sink_name(sink: Any) -> Optional[str]:
    name = getattr(sink, "name", None)
    return str(name) if name is not None else None


def split(
    rows: Iterable[bytes],
    max_bytes_per_chunk: int,
    sink_factory: SinkFactory,
) -> SplitResult:
    """Write rows into chunks of at most ``max_bytes_per_chunk`` bytes.

    Each row is written followed by a single ``\\n`` and flushed at once.
    The budget is checked per row, in raw bytes, before writing.

    Args:
        rows: Row byte strings without terminators (e.g. from iter_rows)
        max_bytes_per_chunk: Soft byte budget per chunk
        sink_factory: Provides a new sink whenever a chunk starts

    Returns:
        SplitResult describing every chunk written

    Raises:
        ConfigurationError: If the budget is not a positive integer
        StreamIOError: If a sink cannot be created or written
        SplitError: Anything raised by the row source or the factory
    """
    if (
        not isinstance(max_bytes_per_chunk, int)
        or isinstance(max_bytes_per_chunk, bool)
        or max_bytes_per_chunk < 1
    ):
        raise ConfigurationError(
            f"max_bytes_per_chunk must be a positive integer, got {max_bytes_per_chunk!r}",
            field="max_bytes_per_chunk",
            value=max_bytes_per_chunk,
        )

    result = SplitResult()
    sink: Optional[BinaryIO] = None
    current: Optional[ChunkInfo] = None
    # No capacity left, so the first row always opens a sink.
    current_chunk_bytes = max_bytes_per_chunk

    for row_number, row in enumerate(rows, start=1):
        row_size = len(row) + len(TERMINATOR)

        if sink is None or current_chunk_bytes + row_size > max_bytes_per_chunk:
            try:
                sink = sink_factory.next_sink()
            except OSError as e:
                raise StreamIOError(
                    "Failed to get next file",
                    operation="open",
                    row_number=row_number,
                    cause=e,
                ) from e
            current = ChunkInfo(index=len(result.chunks), name=_sink_name(sink))
            result.chunks.append(current)
            current_chunk_bytes = 0
            logger.debug("Started chunk %d (%s)", current.index, current.name or "unnamed")

        try:
            sink.write(row + TERMINATOR)
            sink.flush()
        except OSError as e:
            raise StreamIOError(
                "Failed to write line",
                operation="write",
                path=current.name if current else None,
                row_number=row_number,
                cause=e,
            ) from e

        current_chunk_bytes += row_size
        current.rows += 1
        current.bytes += row_size
        result.rows_written += 1
        result.bytes_written += row_size

    logger.debug(
        "Wrote %d rows (%d bytes) into %d chunk(s)",
        result.rows_written,
        result.bytes_written,
        result.chunk_count,
    )
    return result
