"""Quote-aware CSV row tokenizer.

Splits a binary stream into rows without splitting on row separators that
sit inside quoted fields. Rows are returned verbatim as ``bytes`` (without
the terminating ``\\n``); fields are never parsed or re-joined.

Example:
    >>> import io
    >>> list(iter_rows(io.BytesIO(b'a,"b\\nc"\\nd')))
    [b'a,"b\\nc"', b'd']
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, BinaryIO, Iterator, Optional, Tuple

from csvsplit.lib.errors import (
    ConfigurationError,
    MalformedQuotingError,
    RowTooLargeError,
    StreamIOError,
)

logger = logging.getLogger(__name__)

__all__ = [
    "State",
    "transition",
    "RowTokenizer",
    "iter_rows",
    "QUOTE",
    "COL_SEP",
    "ROW_SEP",
    "INITIAL_BUFFER_BYTES",
    "MAX_ROW_BYTES",
]

QUOTE = ord('"')
COL_SEP = ord(",")
ROW_SEP = ord("\n")

INITIAL_BUFFER_BYTES = 64 * 1024
MAX_ROW_BYTES = 10 * 1024 * 1024


class State(Enum):
    """Position of the scanner within the current row."""

    START = "start"
    UNQUOTED_FIELD = "unquoted_field"
    QUOTED_FIELD = "quoted_field"
    AFTER_QUOTE = "after_quote"


def transition(state: State, byte: int) -> Tuple[State, bool]:
    """Advance the scanner by one byte.

    Args:
        state: Current scanner state
        byte: Next input byte

    Returns:
        Tuple of (next_state, is_row_boundary)

    Raises:
        MalformedQuotingError: If a closing quote is followed by anything
            other than a quote, comma or row separator
    """
    if state is State.START:
        if byte == QUOTE:
            return State.QUOTED_FIELD, False
        if byte == COL_SEP:
            return State.START, False
        if byte == ROW_SEP:
            return State.START, True
        return State.UNQUOTED_FIELD, False

    if state is State.UNQUOTED_FIELD:
        # A quote in the middle of an unquoted field is plain data.
        if byte == COL_SEP:
            return State.START, False
        if byte == ROW_SEP:
            return State.START, True
        return State.UNQUOTED_FIELD, False

    if state is State.QUOTED_FIELD:
        if byte == QUOTE:
            return State.AFTER_QUOTE, False
        return State.QUOTED_FIELD, False

    # AFTER_QUOTE
    if byte == QUOTE:
        # Escaped quote ("")
        return State.QUOTED_FIELD, False
    if byte == COL_SEP:
        return State.START, False
    if byte == ROW_SEP:
        return State.START, True
    raise MalformedQuotingError(
        f"invalid character following \" in quoted field: {bytes([byte])!r}",
        byte=byte,
    )


class RowTokenizer:
    """Lazy, single-pass iterator over the rows of a CSV byte stream.

    Input is read in ``read_size`` blocks. Scanner state survives across
    reads, so every byte is examined once even when a row spans many
    blocks. Unterminated data is buffered up to ``max_row_bytes``.

    Example:
        >>> with open("data.csv", "rb") as f:
        ...     for row in RowTokenizer(f):
        ...         handle(row)
    """

    def __init__(
        self,
        stream: BinaryIO,
        *,
        max_row_bytes: int = MAX_ROW_BYTES,
        read_size: int = INITIAL_BUFFER_BYTES,
    ) -> None:
        """Initialize the tokenizer.

        Args:
            stream: Binary stream to read from (file, stdin buffer, BytesIO)
            max_row_bytes: Largest row that may be buffered
            read_size: Bytes requested from the stream per read
        """
        if max_row_bytes < 1:
            raise ConfigurationError(
                "max_row_bytes must be a positive integer",
                field="max_row_bytes",
                value=max_row_bytes,
            )
        if read_size < 1:
            raise ConfigurationError(
                "read_size must be a positive integer",
                field="read_size",
                value=read_size,
            )
        self._stream = stream
        self.max_row_bytes = max_row_bytes
        self.read_size = read_size
        self.rows_emitted = 0
        self.bytes_consumed = 0
        self._started = False

    def __iter__(self) -> Iterator[bytes]:
        if self._started:
            raise RuntimeError("RowTokenizer is single-pass and was already iterated")
        self._started = True
        return self._rows()

    @property
    def _stream_name(self) -> Optional[str]:
        name: Any = getattr(self._stream, "name", None)
        return str(name) if name is not None else None

    def _read(self) -> bytes:
        try:
            block = self._stream.read(self.read_size)
        except OSError as e:
            raise StreamIOError(
                "Failed to read input",
                operation="read",
                path=self._stream_name,
                row_number=self.rows_emitted + 1,
                cause=e,
            ) from e
        block = block or b""
        self.bytes_consumed += len(block)
        return block

    def _too_large(self) -> RowTooLargeError:
        return RowTooLargeError(
            f"row exceeds the maximum of {self.max_row_bytes} bytes",
            limit=self.max_row_bytes,
            row_number=self.rows_emitted + 1,
        )

    def _rows(self) -> Iterator[bytes]:
        buffer = bytearray()
        state = State.START
        base = 0  # absolute input offset of buffer[0]
        scanned = 0

        while True:
            block = self._read()
            if not block:
                break
            buffer += block

            row_start = 0
            pos = scanned
            end = len(buffer)
            while pos < end:
                try:
                    state, boundary = transition(state, buffer[pos])
                except MalformedQuotingError as exc:
                    raise MalformedQuotingError(
                        exc.message,
                        byte=exc.byte,
                        row_number=self.rows_emitted + 1,
                        offset=base + pos,
                    ) from None
                pos += 1
                if boundary:
                    if pos - 1 - row_start > self.max_row_bytes:
                        raise self._too_large()
                    row = bytes(buffer[row_start : pos - 1])
                    row_start = pos
                    self.rows_emitted += 1
                    yield row

            del buffer[:row_start]
            base += row_start
            scanned = len(buffer)

            if len(buffer) > self.max_row_bytes:
                raise self._too_large()

        if buffer:
            if state is State.QUOTED_FIELD:
                logger.warning(
                    "Input ended inside a quoted field (row %d); emitting it as is",
                    self.rows_emitted + 1,
                )
            self.rows_emitted += 1
            yield bytes(buffer)

        logger.debug(
            "Tokenized %d rows from %d bytes", self.rows_emitted, self.bytes_consumed
        )


def iter_rows(stream: BinaryIO, **kwargs: Any) -> Iterator[bytes]:
    """Yield the rows of a CSV byte stream.

    Args:
        stream: Binary stream to read from
        **kwargs: Passed to RowTokenizer (max_row_bytes, read_size)

    Returns:
        Lazy iterator of rows, each without its terminator
    """
    return iter(RowTokenizer(stream, **kwargs))
