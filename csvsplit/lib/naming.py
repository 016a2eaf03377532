"""Chunk file naming."""

from __future__ import annotations

from csvsplit.lib.errors import ConfigurationError

__all__ = ["chunk_file_name"]


def chunk_file_name(
    sequence: int,
    suffix_length: int,
    prefix: str = "",
    additional_suffix: str = "",
) -> str:
    """Build the file name for the chunk at position ``sequence``.

    Args:
        sequence: Chunk number
        suffix_length: Zero-padded width of the number
        prefix: Text placed before the number (may include directories)
        additional_suffix: Text placed after the number, e.g. ".csv"

    Returns:
        ``prefix + zero-padded(sequence) + additional_suffix``

    Raises:
        ConfigurationError: If suffix_length is below 1, sequence is
            negative, or the number has more digits than suffix_length

    Example:
        >>> chunk_file_name(7, 3, prefix="orders_", additional_suffix=".csv")
        'orders_007.csv'
    """
    if suffix_length < 1:
        raise ConfigurationError(
            f"suffix length must be at least 1, got {suffix_length}",
            field="suffix_length",
            value=suffix_length,
        )
    if sequence < 0:
        raise ConfigurationError(
            f"chunk number must not be negative, got {sequence}",
            field="numeric_start",
            value=sequence,
        )

    num = str(sequence)
    if len(num) > suffix_length:
        raise ConfigurationError(
            f"file number longer than suffix size ({suffix_length}): {num}",
            field="suffix_length",
            value=suffix_length,
            suggestion="Increase --suffix-length or --line-bytes.",
        )
    return f"{prefix}{num.zfill(suffix_length)}{additional_suffix}"
