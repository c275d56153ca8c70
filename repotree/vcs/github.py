"""GitHub repository handle using PyGithub."""

import asyncio
import base64
import logging
import os
from functools import cached_property

from github import Auth, Github
from github.Repository import Repository

from repotree.vcs.base import RepoHandle
from repotree.vcs.models import ContentsInfo, RefKind, RepoInfo, TreeItem

logger = logging.getLogger(__name__)


class GitHubRepoHandle(RepoHandle):
    """GitHub implementation of RepoHandle using PyGithub.

    PyGithub is synchronous, so all blocking calls are wrapped
    with asyncio.to_thread() to avoid blocking the event loop.
    """

    def __init__(
        self, repo_name: str, token: str | None = None, base_url: str | None = None
    ):
        self.repo_name = repo_name
        self._token = token or os.environ.get("GITHUB_TOKEN", "")
        if not self._token:
            raise ValueError(
                "GitHub token required. Pass token= or set GITHUB_TOKEN env var."
            )
        self._base_url = base_url

    @cached_property
    def _client(self) -> Github:
        auth = Auth.Token(self._token)
        if self._base_url:
            return Github(auth=auth, base_url=self._base_url)
        return Github(auth=auth)

    @cached_property
    def _repo(self) -> Repository:
        return self._client.get_repo(self.repo_name)

    async def get_repo_info(self) -> RepoInfo:
        def _sync() -> RepoInfo:
            repo = self._repo
            return RepoInfo(
                full_name=repo.full_name,
                default_branch=repo.default_branch,
                fork=repo.fork,
                private=repo.private,
                url=repo.html_url,
            )

        return await asyncio.to_thread(_sync)

    async def resolve_ref(self, kind: RefKind, name: str) -> str:
        """Resolve a ref to a commit sha, peeling annotated tags."""

        def _sync() -> str:
            ref = self._repo.get_git_ref(kind.namespace + name)
            obj_type, sha = ref.object.type, ref.object.sha
            while obj_type == "tag":
                tag = self._repo.get_git_tag(sha)
                obj_type, sha = tag.object.type, tag.object.sha
            return sha

        return await asyncio.to_thread(_sync)

    async def get_recursive_tree(self, sha: str) -> list[TreeItem]:
        def _sync() -> list[TreeItem]:
            tree = self._repo.get_git_tree(sha, recursive=True)
            if tree.raw_data.get("truncated"):
                logger.warning(
                    "Tree listing for %s@%s was truncated by the API", self.repo_name, sha
                )
            return [
                TreeItem(
                    path=element.path,
                    mode=element.mode,
                    type=element.type,
                    sha=element.sha,
                    size=element.size,
                )
                for element in tree.tree
            ]

        return await asyncio.to_thread(_sync)

    async def get_contents(self, ref: str, path: str) -> ContentsInfo:
        def _sync() -> ContentsInfo:
            contents = self._repo.get_contents(path, ref=ref)
            # get_contents returns a list when path is a directory
            if isinstance(contents, list):
                return ContentsInfo(type="dir", path=path)
            raw = contents.raw_data
            return ContentsInfo(
                type=raw.get("type", "file"),
                path=raw.get("path", path),
                submodule_git_url=raw.get("submodule_git_url"),
            )

        return await asyncio.to_thread(_sync)

    async def get_blob(self, sha: str) -> str:
        def _sync() -> str:
            blob = self._repo.get_git_blob(sha)
            if blob.encoding == "base64":
                return base64.b64decode(blob.content).decode()
            return blob.content

        return await asyncio.to_thread(_sync)
