"""Library modules for csvsplit.

Tokenizer, chunker and sink factories make up the core; the remaining
modules provide configuration, logging and chunk manifests.
"""

from csvsplit.lib.checksum import (
    ChunkManifest,
    ManifestVerificationResult,
    compute_file_sha256,
    verify_chunk_manifest,
    write_chunk_manifest,
)
from csvsplit.lib.chunker import ChunkInfo, SplitResult, split
from csvsplit.lib.config import SplitConfig
from csvsplit.lib.config_loader import build_config, load_config_file
from csvsplit.lib.env import expand_config_values, expand_env_vars, load_env_file
from csvsplit.lib.errors import (
    ConfigurationError,
    MalformedQuotingError,
    RowTooLargeError,
    SplitError,
    StreamIOError,
)
from csvsplit.lib.naming import chunk_file_name
from csvsplit.lib.sinks import BufferSinkFactory, FileSinkFactory, SinkFactory
from csvsplit.lib.tokenizer import RowTokenizer, State, iter_rows, transition

__all__ = [
    # Core
    "RowTokenizer",
    "State",
    "iter_rows",
    "transition",
    "split",
    "ChunkInfo",
    "SplitResult",
    "SinkFactory",
    "FileSinkFactory",
    "BufferSinkFactory",
    "chunk_file_name",
    # Configuration
    "SplitConfig",
    "build_config",
    "load_config_file",
    "expand_env_vars",
    "expand_config_values",
    "load_env_file",
    # Manifest
    "ChunkManifest",
    "ManifestVerificationResult",
    "compute_file_sha256",
    "verify_chunk_manifest",
    "write_chunk_manifest",
    # Errors
    "SplitError",
    "MalformedQuotingError",
    "RowTooLargeError",
    "StreamIOError",
    "ConfigurationError",
]
