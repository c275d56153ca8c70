"""Lazily refreshed, read-only filesystem view of a repository tree."""

from __future__ import annotations

import asyncio
import logging
import posixpath
import time
from collections.abc import AsyncIterator

from repotree.tree.builder import TreeBuilder
from repotree.tree.errors import Interrupted, NotADirectory, NotFound
from repotree.tree.models import (
    DirEntry,
    Entry,
    EntryStat,
    SymlinkEntry,
    normalize_path,
)
from repotree.vcs.base import RepoHandle
from repotree.vcs.models import RefKind

logger = logging.getLogger(__name__)

# Same bound Linux uses for nested symlink resolution (SYMLOOP_MAX)
DEFAULT_MAX_SYMLINK_DEPTH = 40


class TreeCache:
    """Answers stat/lstat/realpath/readdir against the tree of one ref.

    The tree is rebuilt on the first query after ``mark_dirty()``. Queries
    that arrive while a rebuild is running wait for that same rebuild, and a
    finished rebuild replaces the previous tree in one assignment. Callers
    only ever receive ``EntryStat`` copies and name lists.
    """

    def __init__(
        self,
        repo: RepoHandle,
        ref: str,
        is_tag: bool = False,
        support_symlinks: bool = True,
        max_symlink_depth: int = DEFAULT_MAX_SYMLINK_DEPTH,
    ) -> None:
        self.repo = repo
        self.ref = ref
        self.is_tag = is_tag
        self.support_symlinks = support_symlinks
        self.max_symlink_depth = max_symlink_depth

        self._tree: DirEntry | None = None
        self._commit_sha: str | None = None
        self._refresh_task: asyncio.Task[None] | None = None
        self._generation = 0
        self._dirty = True
        # The listing carries no timestamps, so every entry shares this one
        self._fake_mtime = time.time()

    def mark_dirty(self) -> None:
        """Force the next query to rebuild the tree."""
        self._dirty = True
        self._generation += 1

    @property
    def fake_mtime(self) -> float:
        return self._fake_mtime

    @property
    def commit_sha(self) -> str | None:
        """Commit the current tree was built from, if any."""
        return self._commit_sha

    @property
    def snapshot_ready(self) -> bool:
        return self._tree is not None and not self._dirty

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def stat(self, path: str) -> EntryStat:
        """Stat *path*, following symlinks including the last component."""
        root = await self._refresh(path)
        entry = self._find_entry(root, path, follow_final=True)
        if entry is None:
            raise NotFound(path)
        return EntryStat.from_entry(entry, self._fake_mtime)

    async def lstat(self, path: str) -> EntryStat:
        """Stat *path* without following a symlink in the last component."""
        root = await self._refresh(path)
        entry = self._find_entry(root, path, follow_final=False)
        if entry is None:
            raise NotFound(path)
        return EntryStat.from_entry(entry, self._fake_mtime)

    async def realpath(self, path: str) -> str:
        """Return the target of a resolved symlink, otherwise *path* itself.

        A symlink whose target could not be fetched reports its own path
        rather than failing.
        """
        root = await self._refresh(path)
        entry = self._find_entry(root, path, follow_final=False)
        if entry is None:
            raise NotFound(path)
        if isinstance(entry, SymlinkEntry) and entry.target:
            return entry.target
        return path

    async def readdir(self, path: str) -> list[str]:
        root = await self._refresh(path)
        entry = self._find_entry(root, path, follow_final=True)
        if entry is None:
            raise NotFound(path)
        if not isinstance(entry, DirEntry):
            raise NotADirectory(path)
        if entry.children is None:
            return []
        return list(entry.children)

    async def walk(
        self, path: str = "/"
    ) -> AsyncIterator[tuple[str, list[str], list[str]]]:
        """Yield ``(dirpath, dirnames, filenames)`` top-down, like ``os.walk``.

        Symlinks are reported as files and never descended into.
        """
        root = await self._refresh(path)
        start = self._find_entry(root, path, follow_final=True)
        if start is None:
            raise NotFound(path)
        if not isinstance(start, DirEntry):
            raise NotADirectory(path)

        stack: list[tuple[str, DirEntry]] = [(normalize_path(path), start)]
        while stack:
            dirpath, entry = stack.pop()
            children = entry.children or {}
            subdirs = {n: c for n, c in children.items() if isinstance(c, DirEntry)}
            dirnames = sorted(subdirs)
            filenames = sorted(n for n in children if n not in subdirs)
            yield dirpath, dirnames, filenames
            for name in reversed(dirnames):
                stack.append((posixpath.join(dirpath, name), subdirs[name]))

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def _refresh(self, path: str) -> DirEntry:
        """Make sure a clean tree is installed and return its root.

        Concurrent callers share one rebuild task. Any failure surfaces as
        ``Interrupted`` and leaves the cache dirty for the next query.
        """
        if self._dirty or self._tree is None:
            task = self._refresh_task
            if task is None:
                task = asyncio.create_task(self._rebuild())
                task.add_done_callback(self._refresh_done)
                self._refresh_task = task
            try:
                # Shielded so one cancelled waiter does not cancel the others
                await asyncio.shield(task)
            except Exception as e:
                raise Interrupted(path, f"EINTR: tree refresh failed: {e}") from e

        tree = self._tree
        if tree is None:
            raise Interrupted(path, "EINTR: no tree after refresh")
        return tree

    def _refresh_done(self, task: asyncio.Task[None]) -> None:
        if self._refresh_task is task:
            self._refresh_task = None
        if not task.cancelled():
            # Marks a failure as retrieved even when every waiter was cancelled
            task.exception()

    async def _rebuild(self) -> None:
        generation = self._generation
        kind = RefKind.TAG if self.is_tag else RefKind.BRANCH
        logger.debug("Refreshing tree for %s %r", kind.value, self.ref)
        try:
            sha = await self.repo.resolve_ref(kind, self.ref)
            items = await self.repo.get_recursive_tree(sha)
            builder = TreeBuilder(self.repo, sha, support_symlinks=self.support_symlinks)
            tree = await builder.build(items)
        except Exception:
            logger.warning("Tree refresh failed for %s %r", kind.value, self.ref, exc_info=True)
            raise

        self._tree = tree
        self._commit_sha = sha
        # An invalidation that landed mid-rebuild keeps the cache dirty
        if generation == self._generation:
            self._dirty = False
        logger.info("Loaded %d tree entries for %r at %s", len(items), self.ref, sha[:7])

    # ------------------------------------------------------------------
    # Path resolution
    # ------------------------------------------------------------------

    def _find_entry(self, root: DirEntry, path: str, follow_final: bool) -> Entry | None:
        """Resolve *path* against *root*; None when it does not resolve.

        Symlinks in intermediate components are always followed; the last
        component is followed only if *follow_final* is set. A lookup that
        needs more than ``max_symlink_depth`` links in total counts as
        unresolvable, which also stops cycles.
        """
        return self._resolve(root, path, follow_final, [self.max_symlink_depth])

    def _resolve(
        self, root: DirEntry, path: str, follow_final: bool, hops_left: list[int]
    ) -> Entry | None:
        # hops_left is shared by every nested resolution of one lookup
        if not path.startswith("/"):
            return None
        parts = normalize_path(path).split("/")

        entry: Entry = root
        last = len(parts) - 1
        for i in range(1, len(parts)):
            # Ignore trailing slash
            if i == last and parts[i] == "":
                break

            if not isinstance(entry, DirEntry) or entry.children is None:
                return None
            child = entry.children.get(parts[i])
            if child is None:
                return None

            if (
                self.support_symlinks
                and isinstance(child, SymlinkEntry)
                and (i != last or follow_final)
            ):
                if child.target is None or hops_left[0] <= 0:
                    return None
                hops_left[0] -= 1
                child = self._resolve(root, child.target, True, hops_left)
                if child is None:
                    return None
            entry = child
        return entry
