"""Sink factories for chunk output.

A sink factory hands the chunker a fresh writable binary destination each
time a new chunk starts. The factory owns naming and numbering, and it
closes the previous sink before opening the next one.
"""

from __future__ import annotations

import io
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, BinaryIO, List, Optional

from csvsplit.lib.config import SplitConfig
from csvsplit.lib.errors import ConfigurationError, StreamIOError
from csvsplit.lib.naming import chunk_file_name

logger = logging.getLogger(__name__)

__all__ = ["SinkFactory", "FileSinkFactory", "BufferSinkFactory"]


class SinkFactory(ABC):
    """Produces one writable destination per chunk."""

    @abstractmethod
    def next_sink(self) -> BinaryIO:
        """Return a fresh writable sink for the next chunk.

        Raises:
            OSError: If the destination cannot be created
            SplitError: If the destination cannot be named
        """
        pass


class FileSinkFactory(SinkFactory):
    """Writes each chunk to its own numbered file.

    File names are ``prefix + zero-padded number + additional_suffix``.
    Use as a context manager so the last file is closed even on failure.

    Example:
        >>> with FileSinkFactory(prefix="out/part-", additional_suffix=".csv") as factory:
        ...     split(iter_rows(stream), 1_000_000, factory)
        >>> factory.paths
        [PosixPath('out/part-00.csv'), PosixPath('out/part-01.csv')]
    """

    def __init__(
        self,
        prefix: str = "",
        suffix_length: int = 2,
        numeric_start: int = 0,
        additional_suffix: str = "",
    ) -> None:
        if suffix_length < 1:
            raise ConfigurationError(
                f"suffix_length must be at least 1, got {suffix_length}",
                field="suffix_length",
                value=suffix_length,
            )
        if numeric_start < 0:
            raise ConfigurationError(
                f"numeric_start must not be negative, got {numeric_start}",
                field="numeric_start",
                value=numeric_start,
            )

        self.prefix = prefix
        self.suffix_length = suffix_length
        self.additional_suffix = additional_suffix
        self.next_number = numeric_start
        self.paths: List[Path] = []
        self._active: Optional[BinaryIO] = None

    @classmethod
    def from_config(cls, config: SplitConfig) -> "FileSinkFactory":
        """Create a factory from the naming fields of a SplitConfig."""
        return cls(
            prefix=config.prefix,
            suffix_length=config.suffix_length,
            numeric_start=config.numeric_start,
            additional_suffix=config.additional_suffix,
        )

    def next_sink(self) -> BinaryIO:
        self.close()

        name = chunk_file_name(
            self.next_number,
            self.suffix_length,
            prefix=self.prefix,
            additional_suffix=self.additional_suffix,
        )
        path = Path(name)
        try:
            if path.parent != Path("."):
                path.parent.mkdir(parents=True, exist_ok=True)
            sink: BinaryIO = open(path, "wb")
        except OSError as e:
            raise StreamIOError(
                f"Failed to create new file {name}",
                operation="open",
                path=name,
                cause=e,
            ) from e

        self._active = sink
        self.paths.append(path)
        self.next_number += 1
        logger.debug("opened new file for writing: %s", name)
        return sink

    def close(self) -> None:
        """Close the active file, if any."""
        if self._active is None:
            return
        active, self._active = self._active, None
        try:
            active.close()
        except OSError as e:
            raise StreamIOError(
                "Failed to close previous active file",
                operation="close",
                path=getattr(active, "name", None),
                cause=e,
            ) from e

    def __enter__(self) -> "FileSinkFactory":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if exc_type is None:
            self.close()
            return
        # Keep the error that is already unwinding
        try:
            self.close()
        except StreamIOError as close_error:
            logger.warning("%s while handling %s", close_error.message, exc_type.__name__)


class BufferSinkFactory(SinkFactory):
    """Keeps every chunk in memory as a BytesIO."""

    def __init__(self) -> None:
        self.buffers: List[io.BytesIO] = []

    def next_sink(self) -> BinaryIO:
        buffer = io.BytesIO()
        self.buffers.append(buffer)
        return buffer

    @property
    def chunks(self) -> List[bytes]:
        """Contents of each chunk, in order."""
        return [buffer.getvalue() for buffer in self.buffers]
