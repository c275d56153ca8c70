from pydantic import BaseModel, Field
from typing import Literal


class VCSConfig(BaseModel):
    provider: Literal["github"] = "github"
    token_env: str = "GITHUB_TOKEN"
    base_url: str | None = None


class TreeConfig(BaseModel):
    support_symlinks: bool = True
    max_symlink_depth: int = Field(default=40, ge=1)


class RepoTreeConfig(BaseModel):
    vcs: VCSConfig = Field(default_factory=VCSConfig)
    tree: TreeConfig = Field(default_factory=TreeConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
