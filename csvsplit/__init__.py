"""csvsplit: split CSV streams into size-bounded chunks without breaking rows."""

from csvsplit.lib import (
    BufferSinkFactory,
    FileSinkFactory,
    SinkFactory,
    SplitConfig,
    SplitError,
    SplitResult,
    iter_rows,
    split,
)

__version__ = "1.0.0"

__all__ = [
    "BufferSinkFactory",
    "FileSinkFactory",
    "SinkFactory",
    "SplitConfig",
    "SplitError",
    "SplitResult",
    "iter_rows",
    "split",
]
