"""YAML configuration loader.

Lets operators keep split settings in a file instead of on the command
line. Keys match the SplitConfig field names.

Example YAML (orders_split.yaml):
    line_bytes: 52428800
    prefix: "${EXPORT_DIR}/orders_"
    additional_suffix: .csv
    suffix_length: 4
    manifest_path: "${EXPORT_DIR}/orders_manifest.json"

Usage:
    csvsplit orders.csv --config orders_split.yaml
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml

from csvsplit.lib.config import CONFIG_FIELDS, SplitConfig
from csvsplit.lib.env import expand_config_values
from csvsplit.lib.errors import ConfigurationError

logger = logging.getLogger(__name__)

__all__ = ["load_config_file", "build_config"]

# Accepted YAML types per SplitConfig field
FIELD_TYPES: Dict[str, Tuple[type, ...]] = {
    "line_bytes": (int,),
    "suffix_length": (int,),
    "numeric_start": (int,),
    "prefix": (str,),
    "additional_suffix": (str,),
    "verbose": (bool,),
    "json_log": (bool,),
    "log_file": (str,),
    "max_row_bytes": (int,),
    "manifest_path": (str,),
}

INT_FIELDS = {"line_bytes", "suffix_length", "numeric_start", "max_row_bytes"}


def _coerce(key: str, value: Any) -> Any:
    """Check a single value against its field type.

    Integers written as strings (common after ${VAR} expansion) are
    converted.
    """
    if value is None:
        return None

    if key in INT_FIELDS and isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise ConfigurationError(
                f"'{key}' must be an integer", field=key, value=value
            ) from None

    expected = FIELD_TYPES[key]
    if not isinstance(value, expected) or (
        key in INT_FIELDS and isinstance(value, bool)
    ):
        raise ConfigurationError(
            f"'{key}' must be of type {expected[0].__name__}, got {type(value).__name__}",
            field=key,
            value=value,
        )
    return value


def load_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Load and validate split settings from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Mapping of SplitConfig field names to values, env vars expanded

    Raises:
        ConfigurationError: If the file is missing, not UTF-8, unparsable,
            not a mapping, references an unset variable, or has unknown keys
            or wrongly typed values
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(
            f"Config file not found: {path}", field="config", value=path
        ) from None
    except UnicodeDecodeError as e:
        raise ConfigurationError(
            f"Config file {path} is not valid UTF-8: {e.reason} at byte {e.start}",
            field="config",
            value=path,
        ) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in config file {path}: {e}", field="config", value=path
        ) from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"Config file {path} must contain a mapping at the top level",
            field="config",
            value=path,
        )

    unknown = sorted(str(k) for k in raw if k not in CONFIG_FIELDS)
    if unknown:
        raise ConfigurationError(
            f"Unknown keys in config file {path}: {', '.join(unknown)}",
            field="config",
            value=path,
            suggestion=f"Valid keys: {', '.join(CONFIG_FIELDS)}",
        )

    values = {key: _coerce(key, value) for key, value in expand_config_values(raw).items()}
    logger.debug("Loaded %d setting(s) from %s", len(values), path)
    return values


def build_config(
    file_values: Optional[Mapping[str, Any]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> SplitConfig:
    """Merge file settings and explicit overrides into a SplitConfig.

    Overrides whose value is None are treated as "not given" and do not
    replace file values.

    Raises:
        ConfigurationError: If the merged configuration is invalid
    """
    merged: Dict[str, Any] = dict(file_values or {})
    for key, value in (overrides or {}).items():
        if value is not None:
            merged[key] = value

    # Explicit None in a file means "use the default"
    merged = {k: v for k, v in merged.items() if v is not None}
    return SplitConfig(**merged).ensure_valid()
