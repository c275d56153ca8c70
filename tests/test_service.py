"""Tests for repotree.service.RepoService."""

import pytest

from repotree.config.models import TreeConfig
from repotree.service import RepoService
from repotree.tree import TreeCache
from repotree.vcs.models import RefKind


class TestRepoService:
    def test_cache_before_open_raises(self, mock_repo):
        service = RepoService(mock_repo)
        with pytest.raises(RuntimeError, match="not opened"):
            service.cache
        with pytest.raises(RuntimeError):
            service.is_fork()

    async def test_open_defaults_to_default_branch(self, mock_repo):
        service = RepoService(mock_repo)
        info = await service.open()
        assert info.full_name == "acme/widget-api"
        assert service.ref == "main"
        assert service.is_default_branch()
        assert not service.is_fork()
        assert isinstance(service.cache, TreeCache)

    async def test_open_tag(self, mock_repo):
        service = RepoService(mock_repo)
        await service.open("main", is_tag=True)
        assert not service.is_default_branch()

        await service.cache.readdir("/")
        mock_repo.resolve_ref.assert_awaited_once_with(RefKind.TAG, "main")

    async def test_open_other_branch(self, mock_repo):
        service = RepoService(mock_repo)
        await service.open("feature/x")
        assert service.default_branch == "main"
        assert not service.is_default_branch()

    async def test_tree_config_passed_to_cache(self, mock_repo):
        service = RepoService(mock_repo, TreeConfig(support_symlinks=False, max_symlink_depth=3))
        await service.open()
        assert service.cache.support_symlinks is False
        assert service.cache.max_symlink_depth == 3

    async def test_invalidate_forces_refresh(self, mock_repo):
        service = RepoService(mock_repo)
        await service.open()
        await service.cache.readdir("/")
        service.invalidate()
        await service.cache.readdir("/")
        assert mock_repo.get_recursive_tree.await_count == 2

    async def test_reopen_replaces_cache(self, mock_repo):
        service = RepoService(mock_repo)
        await service.open()
        first = service.cache
        await service.open("develop")
        assert service.cache is not first
        assert service.cache.ref == "develop"
