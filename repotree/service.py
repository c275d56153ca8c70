"""Repository session: opens a repo at a ref and owns its tree cache."""

from __future__ import annotations

import logging

from repotree.config.models import TreeConfig
from repotree.tree.cache import TreeCache
from repotree.vcs.base import RepoHandle
from repotree.vcs.models import RepoInfo

logger = logging.getLogger(__name__)


class RepoService:
    """Tracks which repository and ref are being browsed.

    ``open()`` must be awaited before ``cache`` is used. Re-opening with a
    different ref replaces the cache.
    """

    def __init__(self, handle: RepoHandle, config: TreeConfig | None = None) -> None:
        self.handle = handle
        self.config = config or TreeConfig()
        self.ref: str | None = None
        self.is_tag = False
        self._info: RepoInfo | None = None
        self._cache: TreeCache | None = None

    async def open(self, ref: str | None = None, is_tag: bool = False) -> RepoInfo:
        """Fetch repo metadata and start a fresh cache for *ref*.

        Without *ref* the repository's default branch is used.
        """
        info = await self.handle.get_repo_info()
        if ref is None:
            ref, is_tag = info.default_branch, False
        self._info = info
        self.ref = ref
        self.is_tag = is_tag
        self._cache = TreeCache(
            self.handle,
            ref,
            is_tag=is_tag,
            support_symlinks=self.config.support_symlinks,
            max_symlink_depth=self.config.max_symlink_depth,
        )
        logger.info("Opened %s at %s %r", info.full_name, "tag" if is_tag else "branch", ref)
        return info

    @property
    def info(self) -> RepoInfo:
        if self._info is None:
            raise RuntimeError("Repository not opened. Call open() first.")
        return self._info

    @property
    def cache(self) -> TreeCache:
        if self._cache is None:
            raise RuntimeError("Repository not opened. Call open() first.")
        return self._cache

    @property
    def default_branch(self) -> str:
        return self.info.default_branch

    def is_fork(self) -> bool:
        return self.info.fork

    def is_default_branch(self) -> bool:
        return not self.is_tag and self.ref == self.info.default_branch

    def invalidate(self) -> None:
        """Mark the tree stale, e.g. after a push made through another client."""
        self.cache.mark_dirty()
