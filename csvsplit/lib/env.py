"""Environment variables in config files.

A config file may reference ${VAR} or $VAR in its string values, e.g.
``prefix: "${EXPORT_DIR}/orders_"``. Variables come from the process
environment, optionally seeded from a .env file via python-dotenv.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from dotenv import load_dotenv

from csvsplit.lib.errors import ConfigurationError

__all__ = ["expand_config_values", "expand_env_vars", "load_env_file"]

# ${VAR_NAME} or $VAR_NAME
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def load_env_file(path: Optional[Union[str, Path]] = None) -> bool:
    """Load a .env file into the environment without overriding set variables.

    Returns True if a file was found and at least one variable loaded.
    """
    return load_dotenv(dotenv_path=path, override=False)


def expand_env_vars(value: str, *, key: Optional[str] = None) -> str:
    """Replace variable references in ``value`` with their environment values.

    Args:
        value: String that may contain ${VAR} or $VAR
        key: Config field the value belongs to, reported on failure

    Raises:
        ConfigurationError: If a referenced variable is not set
    """

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1) or match.group(2)
        env_value = os.environ.get(var_name)
        if env_value is None:
            where = f" in '{key}'" if key else ""
            raise ConfigurationError(
                f"Environment variable {var_name} referenced{where} is not set",
                field=key,
                value=value,
                suggestion="Export the variable or define it in the file given to --env-file.",
            )
        return env_value

    return ENV_VAR_PATTERN.sub(replacer, value)


def expand_config_values(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Expand string values of a flat config mapping; others pass through."""
    return {
        key: expand_env_vars(value, key=key) if isinstance(value, str) else value
        for key, value in values.items()
    }
