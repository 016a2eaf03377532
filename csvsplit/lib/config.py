"""Split configuration value object.

All settings for one run live in a single immutable SplitConfig that is
built once (from CLI flags and/or a YAML file) and passed into the core.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Optional

from csvsplit.lib.errors import ConfigurationError
from csvsplit.lib.tokenizer import MAX_ROW_BYTES

__all__ = ["SplitConfig", "CONFIG_FIELDS"]


@dataclass(frozen=True)
class SplitConfig:
    """Settings for splitting one CSV stream.

    Example:
        config = SplitConfig(line_bytes=50 * 1024 * 1024, prefix="out/orders_",
                             additional_suffix=".csv", suffix_length=4)
        config.ensure_valid()
    """

    line_bytes: Optional[int] = None
    suffix_length: int = 2
    numeric_start: int = 0
    prefix: str = ""
    additional_suffix: str = ""
    verbose: bool = False
    json_log: bool = False
    log_file: Optional[str] = None
    max_row_bytes: int = MAX_ROW_BYTES
    manifest_path: Optional[str] = None

    def validate(self) -> List[str]:
        """Check the configuration.

        Returns:
            List of validation issues (empty if valid)
        """
        issues: List[str] = []

        if not _is_int(self.line_bytes) or self.line_bytes < 1:
            issues.append(
                f"must set --line-bytes to a positive integer ({self.line_bytes})"
            )
        if not _is_int(self.suffix_length) or self.suffix_length < 1:
            issues.append(
                f"suffix_length must be a positive integer ({self.suffix_length})"
            )
        if not _is_int(self.numeric_start) or self.numeric_start < 0:
            issues.append(
                f"numeric_start must be zero or a positive integer ({self.numeric_start})"
            )
        if not _is_int(self.max_row_bytes) or self.max_row_bytes < 1:
            issues.append(
                f"max_row_bytes must be a positive integer ({self.max_row_bytes})"
            )

        return issues

    def ensure_valid(self) -> "SplitConfig":
        """Raise ConfigurationError on the first validation issue."""
        issues = self.validate()
        if issues:
            raise ConfigurationError(issues[0], details={"issue_count": len(issues)})
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


CONFIG_FIELDS = {f.name: f for f in fields(SplitConfig)}
