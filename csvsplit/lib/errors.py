"""Structured exception hierarchy for CSV splitting.

Every failure aborts the whole split. Each exception carries enough
context (offending byte, row number, sink name) to diagnose the problem
from the CLI message alone.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__ = [
    "SplitError",
    "MalformedQuotingError",
    "RowTooLargeError",
    "StreamIOError",
    "ConfigurationError",
]


class SplitError(Exception):
    """Base exception for all split errors.

    Provides structured error information for debugging.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        self.suggestion = suggestion

        parts = [message]

        if self.details:
            detail_lines = [f"  {k}: {v}" for k, v in self.details.items()]
            parts.append("\nDetails:")
            parts.extend(detail_lines)

        if suggestion:
            parts.append(f"\nSuggestion: {suggestion}")

        super().__init__("\n".join(parts) if len(parts) > 1 else message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "suggestion": self.suggestion,
        }


class MalformedQuotingError(SplitError):
    """A closing quote was followed by something other than a quote,
    comma or row separator.
    """

    def __init__(
        self,
        message: str,
        *,
        byte: Optional[int] = None,
        row_number: Optional[int] = None,
        offset: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        self.byte = byte
        self.row_number = row_number
        self.offset = offset

        details = kwargs.pop("details", {})
        if byte is not None:
            details["byte"] = repr(bytes([byte]))
        if row_number is not None:
            details["row"] = row_number
        if offset is not None:
            details["offset"] = offset

        suggestion = kwargs.pop("suggestion", None)
        if not suggestion:
            suggestion = (
                "Quotes inside a quoted field must be doubled (\"\"), and a "
                "closing quote must end the field."
            )

        super().__init__(message, details=details, suggestion=suggestion, **kwargs)


class RowTooLargeError(SplitError):
    """A single row grew past the tokenizer's buffering limit."""

    def __init__(
        self,
        message: str,
        *,
        limit: Optional[int] = None,
        row_number: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        self.limit = limit
        self.row_number = row_number

        details = kwargs.pop("details", {})
        if limit is not None:
            details["limit_bytes"] = limit
        if row_number is not None:
            details["row"] = row_number

        suggestion = kwargs.pop("suggestion", None)
        if not suggestion:
            suggestion = (
                "Raise --max-row-bytes, or check the input for an unbalanced "
                "quote that swallows the rest of the file."
            )

        super().__init__(message, details=details, suggestion=suggestion, **kwargs)


class StreamIOError(SplitError):
    """Reading the input, opening a sink or writing to one failed."""

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        path: Optional[str] = None,
        row_number: Optional[int] = None,
        cause: Optional[BaseException] = None,
        **kwargs: Any,
    ) -> None:
        self.operation = operation
        self.path = path
        self.row_number = row_number
        self.cause = cause

        details = kwargs.pop("details", {})
        if operation:
            details["operation"] = operation
        if path:
            details["path"] = path
        if row_number is not None:
            details["row"] = row_number
        if cause:
            details["cause"] = str(cause)
            details["cause_type"] = type(cause).__name__

        super().__init__(message, details=details, **kwargs)


class ConfigurationError(SplitError):
    """Invalid split configuration.

    Raised for a non-positive byte budget, a chunk number wider than the
    suffix length, or a malformed configuration file.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        self.field = field
        self.value = value

        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)

        super().__init__(message, details=details, **kwargs)
