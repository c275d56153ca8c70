"""Repository handles for repotree."""

import os

from repotree.config.models import VCSConfig
from repotree.vcs.base import RepoHandle
from repotree.vcs.github import GitHubRepoHandle
from repotree.vcs.models import ContentsInfo, RefKind, RepoInfo, TreeItem


def create_repo_handle(config: VCSConfig, repo_name: str) -> RepoHandle:
    """Create a repository handle from config.

    Resolves the token from the environment variable named in config.token_env.
    """
    if config.provider != "github":
        raise ValueError(
            f"Unsupported VCS provider: {config.provider!r}. "
            "Currently only 'github' is supported."
        )
    token = os.environ.get(config.token_env, "")
    if not token:
        raise ValueError(
            f"VCS token not found. Set the {config.token_env} environment variable."
        )
    return GitHubRepoHandle(repo_name, token=token, base_url=config.base_url)


__all__ = [
    "ContentsInfo",
    "GitHubRepoHandle",
    "RefKind",
    "RepoHandle",
    "RepoInfo",
    "TreeItem",
    "create_repo_handle",
]
