"""Pydantic models for VCS data."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class RefKind(str, Enum):
    """Which ref namespace a name lives in."""

    BRANCH = "branch"
    TAG = "tag"

    @property
    def namespace(self) -> str:
        return "tags/" if self is RefKind.TAG else "heads/"


class TreeItem(BaseModel):
    """One entry of a recursive git tree listing."""

    path: str = Field(min_length=1, description="Slash-separated, relative to the repo root")
    mode: str = Field(description="Octal mode string, e.g. '100644'")
    type: Literal["blob", "tree", "commit"]
    sha: str
    size: int | None = None

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        if v.startswith("/"):
            raise ValueError(f"path must be relative, got {v!r}")
        return v

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, v: str) -> str:
        try:
            int(v, 8)
        except ValueError:
            raise ValueError(f"mode must be an octal string, got {v!r}") from None
        return v

    @property
    def mode_bits(self) -> int:
        return int(self.mode, 8)


class ContentsInfo(BaseModel):
    """Subset of the contents API response used for submodule mounts."""

    type: str = "file"
    path: str = ""
    submodule_git_url: str | None = None


class RepoInfo(BaseModel):
    """Metadata for an opened repository."""

    full_name: str = Field(description="Full name including owner (e.g. owner/repo)")
    default_branch: str = "main"
    fork: bool = False
    private: bool = False
    url: str = ""
