"""Entry types for the synthetic filesystem built from a tree listing."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass

S_IFMT = 0o170000
S_IFDIR = 0o040000
S_IFREG = 0o100000
S_IFLNK = 0o120000
# Mode git uses for submodule (gitlink) entries
S_IFGITLINK = 0o160000


@dataclass(eq=False)
class Entry:
    """Base class for a node in the tree. Only the builder mutates entries."""

    name: str
    mode: int
    size: int = 0
    sha: str = ""


@dataclass(eq=False)
class DirEntry(Entry):
    """A directory. ``children`` is None until the builder populates it."""

    mode: int = S_IFDIR
    children: dict[str, Entry] | None = None
    submodule_url: str | None = None


@dataclass(eq=False)
class FileEntry(Entry):
    pass


@dataclass(eq=False)
class SymlinkEntry(Entry):
    """A symbolic link. ``target`` is an absolute tree path once resolved."""

    mode: int = S_IFLNK
    target: str | None = None


@dataclass(frozen=True)
class EntryStat:
    """Snapshot of an entry's metadata handed out to callers."""

    name: str
    mode: int
    size: int
    sha: str
    mtime: float
    submodule_url: str | None = None
    target: str | None = None

    @classmethod
    def from_entry(cls, entry: Entry, mtime: float) -> EntryStat:
        return cls(
            name=entry.name,
            mode=entry.mode,
            size=entry.size,
            sha=entry.sha,
            mtime=mtime,
            submodule_url=getattr(entry, "submodule_url", None),
            target=getattr(entry, "target", None),
        )

    def is_directory(self) -> bool:
        return (self.mode & S_IFMT) == S_IFDIR

    def is_symlink(self) -> bool:
        return (self.mode & S_IFMT) == S_IFLNK

    def is_file(self) -> bool:
        return (self.mode & S_IFMT) == S_IFREG

    @property
    def is_submodule(self) -> bool:
        return self.submodule_url is not None


def normalize_path(path: str) -> str:
    """Collapse ``.``, ``..`` and repeated slashes in an absolute tree path."""
    return "/" + posixpath.normpath(path).lstrip("/")
