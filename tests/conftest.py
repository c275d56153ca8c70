"""Shared test fixtures for repotree."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from repotree.config.models import RepoTreeConfig
from repotree.vcs.base import RepoHandle
from repotree.vcs.models import ContentsInfo, RepoInfo, TreeItem


def make_item(path, mode="100644", type_=None, sha=None, size=None):
    """Build a TreeItem, inferring the git object type from the mode."""
    if type_ is None:
        type_ = {"040000": "tree", "160000": "commit"}.get(mode, "blob")
    return TreeItem(path=path, mode=mode, type=type_, sha=sha or f"sha-{path}", size=size)


@pytest.fixture
def sample_repo_info():
    return RepoInfo(
        full_name="acme/widget-api",
        default_branch="main",
        fork=False,
        url="https://github.com/acme/widget-api",
    )


@pytest.fixture
def sample_tree_items():
    """Listing with nested files, a submodule and a few symlinks."""
    return [
        make_item("README.md", size=120, sha="h-readme"),
        make_item("src", mode="040000", sha="t-src"),
        make_item("src/app.py", size=800, sha="h-app"),
        make_item("src/util", mode="040000", sha="t-util"),
        make_item("src/util/strings.py", size=300, sha="h-strings"),
        make_item("docs/guide.md", size=5000, sha="h-guide"),
        make_item("vendor/lib", mode="160000", sha="c-lib"),
        make_item("latest", mode="120000", sha="l-latest"),
        make_item("src/readme-link", mode="120000", sha="l-readme"),
        make_item("pkg", mode="120000", sha="l-pkg"),
    ]


@pytest.fixture
def sample_blobs():
    """Symlink blob contents keyed by sha."""
    return {
        "l-latest": "docs/guide.md",
        "l-readme": "../README.md",
        "l-pkg": "src/util",
    }


@pytest.fixture
def mock_repo(sample_repo_info, sample_tree_items, sample_blobs):
    repo = MagicMock(spec=RepoHandle)
    repo.get_repo_info = AsyncMock(return_value=sample_repo_info)
    repo.resolve_ref = AsyncMock(return_value="c0ffee1234567890")
    repo.get_recursive_tree = AsyncMock(return_value=sample_tree_items)

    async def _get_blob(sha):
        if sha not in sample_blobs:
            raise KeyError(sha)
        return sample_blobs[sha]

    async def _get_contents(ref, path):
        if path == "vendor/lib":
            return ContentsInfo(
                type="submodule",
                path=path,
                submodule_git_url="https://github.com/acme/lib.git",
            )
        return ContentsInfo(type="file", path=path)

    repo.get_blob = AsyncMock(side_effect=_get_blob)
    repo.get_contents = AsyncMock(side_effect=_get_contents)
    return repo


@pytest.fixture
def sample_config():
    return RepoTreeConfig()
