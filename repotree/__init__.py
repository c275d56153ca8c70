"""repotree: a read-only filesystem view of a hosted git repository."""

from repotree.service import RepoService
from repotree.tree import (
    EntryStat,
    Interrupted,
    NotADirectory,
    NotFound,
    TreeCache,
    TreeError,
)

__version__ = "0.1.0"

__all__ = [
    "EntryStat",
    "Interrupted",
    "NotADirectory",
    "NotFound",
    "RepoService",
    "TreeCache",
    "TreeError",
    "__version__",
]
