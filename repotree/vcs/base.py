"""Abstract repository interface consumed by the tree cache."""

from abc import ABC, abstractmethod

from repotree.vcs.models import ContentsInfo, RefKind, RepoInfo, TreeItem


class RepoHandle(ABC):
    """Abstract base class for a handle on one hosted repository.

    The tree builder and tree cache only talk to the remote through this
    interface, so tests can substitute a mock and other hosts can be added.
    """

    @abstractmethod
    async def get_repo_info(self) -> RepoInfo:
        """Fetch repository metadata (default branch, fork flag)."""
        ...

    @abstractmethod
    async def resolve_ref(self, kind: RefKind, name: str) -> str:
        """Resolve a branch or tag name to a commit sha.

        Args:
            kind: Namespace the name lives in.
            name: Branch or tag name without the ``refs/heads/`` prefix.
        """
        ...

    @abstractmethod
    async def get_recursive_tree(self, sha: str) -> list[TreeItem]:
        """Return the full recursive tree listing for a commit."""
        ...

    @abstractmethod
    async def get_contents(self, ref: str, path: str) -> ContentsInfo:
        """Fetch contents metadata for a path at a ref."""
        ...

    @abstractmethod
    async def get_blob(self, sha: str) -> str:
        """Fetch a blob's decoded text content by sha."""
        ...
