"""Read-only filesystem view over a remote repository tree."""

from repotree.tree.builder import TreeBuilder
from repotree.tree.cache import DEFAULT_MAX_SYMLINK_DEPTH, TreeCache
from repotree.tree.errors import (
    Interrupted,
    NotADirectory,
    NotFound,
    TreeBuildError,
    TreeError,
)
from repotree.tree.models import (
    S_IFDIR,
    S_IFGITLINK,
    S_IFLNK,
    S_IFMT,
    S_IFREG,
    DirEntry,
    Entry,
    EntryStat,
    FileEntry,
    SymlinkEntry,
)

__all__ = [
    "DEFAULT_MAX_SYMLINK_DEPTH",
    "DirEntry",
    "Entry",
    "EntryStat",
    "FileEntry",
    "Interrupted",
    "NotADirectory",
    "NotFound",
    "S_IFDIR",
    "S_IFGITLINK",
    "S_IFLNK",
    "S_IFMT",
    "S_IFREG",
    "SymlinkEntry",
    "TreeBuildError",
    "TreeBuilder",
    "TreeCache",
    "TreeError",
]
