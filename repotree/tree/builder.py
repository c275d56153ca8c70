"""Builder for constructing an entry hierarchy from a flat git tree listing."""

from __future__ import annotations

import asyncio
import logging
import posixpath
from collections.abc import Awaitable, Iterable

from repotree.tree.errors import TreeBuildError
from repotree.tree.models import (
    S_IFDIR,
    S_IFGITLINK,
    S_IFLNK,
    S_IFMT,
    DirEntry,
    Entry,
    FileEntry,
    SymlinkEntry,
    normalize_path,
)
from repotree.vcs.base import RepoHandle
from repotree.vcs.models import TreeItem

logger = logging.getLogger(__name__)


class TreeBuilder:
    """Turns a recursive tree listing into a rooted ``DirEntry`` hierarchy.

    Submodule origins and symlink targets are not part of the listing, so
    they are fetched from the repository while building. Those side fetches
    run one at a time and a failed fetch only leaves its field unset.
    """

    def __init__(
        self, repo: RepoHandle, ref: str, support_symlinks: bool = True
    ) -> None:
        self.repo = repo
        self.ref = ref
        self.support_symlinks = support_symlinks

    async def build(self, items: Iterable[TreeItem]) -> DirEntry:
        """Build a fresh tree from *items* and wait for all side fetches.

        Listing order does not matter: parent directories that have not been
        seen yet are synthesized. Raises ``TreeBuildError`` when a path runs
        through an entry that is not a directory.
        """
        root = DirEntry(name="", children={})
        # One request in flight at a time to stay clear of API rate limits
        limiter = asyncio.Semaphore(1)
        pending: list[Awaitable[None]] = []

        for item in items:
            parent_path, _, name = item.path.rpartition("/")
            parent = _ensure_dir(root, parent_path)
            entry = _insert(parent, _make_entry(name, item))

            if _is_submodule(item) and isinstance(entry, DirEntry):
                pending.append(self._resolve_submodule(limiter, entry, item.path))
            elif self.support_symlinks and isinstance(entry, SymlinkEntry):
                pending.append(
                    self._resolve_symlink(limiter, entry, item.sha, "/" + parent_path)
                )

        if pending:
            await asyncio.gather(*pending)
        return root

    async def _resolve_submodule(
        self, limiter: asyncio.Semaphore, entry: DirEntry, path: str
    ) -> None:
        async with limiter:
            try:
                contents = await self.repo.get_contents(self.ref, path)
            except Exception:
                logger.warning("Submodule lookup failed for %s", path, exc_info=True)
                return
        if contents.submodule_git_url:
            entry.submodule_url = contents.submodule_git_url

    async def _resolve_symlink(
        self, limiter: asyncio.Semaphore, entry: SymlinkEntry, sha: str, parent: str
    ) -> None:
        async with limiter:
            try:
                content = await self.repo.get_blob(sha)
            except Exception:
                logger.warning(
                    "Symlink target lookup failed for %s",
                    posixpath.join(parent, entry.name),
                    exc_info=True,
                )
                return
        # Some clients hand back numbers for numeric-looking blobs
        content = str(content)
        if not content:
            logger.warning("Symlink %s has an empty target", posixpath.join(parent, entry.name))
            return
        entry.target = normalize_path(posixpath.join(parent, content))


def _make_entry(name: str, item: TreeItem) -> Entry:
    mode = item.mode_bits
    if item.type == "tree" or _is_submodule(item):
        # Submodule mounts surface as directories with nothing inside
        return DirEntry(name=name, mode=S_IFDIR, sha=item.sha)
    if (mode & S_IFMT) == S_IFLNK:
        return SymlinkEntry(name=name, mode=mode, size=item.size or 0, sha=item.sha)
    return FileEntry(name=name, mode=mode, size=item.size or 0, sha=item.sha)


def _is_submodule(item: TreeItem) -> bool:
    return item.type == "commit" or (item.mode_bits & S_IFMT) == S_IFGITLINK


def _ensure_dir(root: DirEntry, dir_path: str) -> DirEntry:
    """Walk *dir_path* from *root*, creating missing directories on the way."""
    current = root
    if not dir_path:
        return current
    for part in dir_path.split("/"):
        if current.children is None:
            current.children = {}
        child = current.children.get(part)
        if child is None:
            child = DirEntry(name=part, children={})
            current.children[part] = child
        elif not isinstance(child, DirEntry):
            raise TreeBuildError(f"Parent of {dir_path!r} is not a directory: {part!r}")
        current = child
    if current.children is None:
        current.children = {}
    return current


def _insert(parent: DirEntry, entry: Entry) -> Entry:
    """Add *entry* under *parent*, merging into a directory synthesized earlier."""
    if parent.children is None:
        parent.children = {}
    existing = parent.children.get(entry.name)
    if isinstance(existing, DirEntry) and isinstance(entry, DirEntry):
        existing.sha = entry.sha
        return existing
    if existing is not None:
        logger.debug("Duplicate tree path %r, keeping the later entry", entry.name)
    parent.children[entry.name] = entry
    return entry
