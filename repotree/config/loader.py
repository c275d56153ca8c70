"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import RepoTreeConfig

# Only these variables may be referenced as ${VAR} in config files.
_ALLOWED_ENV_VARS = frozenset(
    {"GITHUB_TOKEN", "GH_TOKEN", "GITHUB_API_URL", "REPOTREE_LOG_LEVEL"}
)


def load_config(cli_path: str | None = None) -> RepoTreeConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./repotree.yaml"),
        Path.home() / ".repotree" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                raw = _expand_env_vars(raw)
                return RepoTreeConfig(**raw)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e

    return RepoTreeConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand allowlisted ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", _substitute, obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


def _substitute(match: re.Match) -> str:
    name = match.group(1)
    if name not in _ALLOWED_ENV_VARS:
        return match.group(0)
    return os.environ.get(name, "")


# Default YAML template for `repotree config init`
DEFAULT_CONFIG_TEMPLATE = """\
# repotree.yaml

# VCS Provider
vcs:
  provider: "github"
  token_env: "GITHUB_TOKEN"
  # base_url: "https://github.example.com/api/v3"   # GitHub Enterprise

# Tree
tree:
  support_symlinks: true
  max_symlink_depth: 40

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
