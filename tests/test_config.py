"""Tests for repotree.config: models, YAML loading and env expansion."""

import json
import logging
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from repotree.config import RepoTreeConfig, TreeConfig, load_config
from repotree.config.loader import DEFAULT_CONFIG_TEMPLATE, _expand_env_vars
from repotree.log import JsonFormatter, configure_logging


class TestDefaults:
    def test_default_vcs(self, sample_config):
        assert sample_config.vcs.provider == "github"
        assert sample_config.vcs.token_env == "GITHUB_TOKEN"
        assert sample_config.vcs.base_url is None

    def test_default_tree(self, sample_config):
        assert sample_config.tree.support_symlinks is True
        assert sample_config.tree.max_symlink_depth == 40

    def test_default_log_level(self, sample_config):
        assert sample_config.log_level == "info"
        assert sample_config.log_format == "text"

    def test_symlink_depth_must_be_positive(self):
        with pytest.raises(ValidationError):
            TreeConfig(max_symlink_depth=0)

    def test_template_parses_to_defaults(self):
        import yaml

        raw = yaml.safe_load(DEFAULT_CONFIG_TEMPLATE)
        assert RepoTreeConfig(**raw) == RepoTreeConfig()


class TestExpandEnvVars:
    def test_allowed_var_expanded(self):
        with patch.dict(os.environ, {"GITHUB_API_URL": "https://ghe.local/api/v3"}):
            assert _expand_env_vars("${GITHUB_API_URL}") == "https://ghe.local/api/v3"

    def test_disallowed_var_left_alone(self):
        with patch.dict(os.environ, {"SECRET": "nope"}):
            assert _expand_env_vars("${SECRET}") == "${SECRET}"

    def test_nested_structures(self):
        with patch.dict(os.environ, {"GH_TOKEN": "t"}):
            assert _expand_env_vars({"a": ["${GH_TOKEN}", 1]}) == {"a": ["t", 1]}

    def test_non_string_passthrough(self):
        assert _expand_env_vars(42) == 42
        assert _expand_env_vars(None) is None


class TestLoadConfig:
    def test_returns_defaults_when_no_file_exists(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        assert load_config() == RepoTreeConfig()

    def test_loads_valid_yaml(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        (tmp_path / "repotree.yaml").write_text(
            "tree:\n  support_symlinks: false\nlog_level: debug\n"
        )
        config = load_config()
        assert config.tree.support_symlinks is False
        assert config.log_level == "debug"

    def test_raises_on_invalid_yaml(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        (tmp_path / "repotree.yaml").write_text("  bad:\nyaml: [unterminated")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config()

    def test_raises_on_invalid_values(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        (tmp_path / "repotree.yaml").write_text("vcs:\n  provider: svn\n")
        with pytest.raises(ValueError, match="Invalid config"):
            load_config()

    def test_cli_path_takes_priority(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "repotree.yaml").write_text("log_level: warn\n")
        cli_file = tmp_path / "custom.yaml"
        cli_file.write_text("log_level: error\n")
        assert load_config(cli_path=str(cli_file)).log_level == "error"

    def test_user_global_config_used_as_fallback(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        fake_home = tmp_path / "fakehome"
        (fake_home / ".repotree").mkdir(parents=True)
        (fake_home / ".repotree" / "config.yaml").write_text("log_format: json\n")
        monkeypatch.setattr("pathlib.Path.home", lambda: fake_home)
        assert load_config().log_format == "json"

    def test_empty_file_falls_through(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        (tmp_path / "repotree.yaml").write_text("")
        assert load_config() == RepoTreeConfig()


class TestLogging:
    @pytest.fixture(autouse=True)
    def _restore_root(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers = handlers
        root.setLevel(level)

    def test_configure_sets_level_and_single_handler(self):
        configure_logging("warn", "text")
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1

    def test_json_format(self):
        configure_logging("debug", "json")
        assert isinstance(logging.getLogger().handlers[0].formatter, JsonFormatter)

    def test_json_formatter_output(self):
        record = logging.LogRecord("repotree.x", logging.INFO, __file__, 1, "hi %s", ("there",), None)
        payload = json.loads(JsonFormatter().format(record))
        assert payload["message"] == "hi there"
        assert payload["level"] == "info"
        assert payload["logger"] == "repotree.x"
