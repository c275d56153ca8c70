"""Typed failures raised by tree queries."""

from __future__ import annotations


class TreeError(Exception):
    """Base class for tree query failures. ``code`` mirrors the POSIX errno name."""

    code = "EIO"

    def __init__(self, path: str, message: str | None = None) -> None:
        self.path = path
        super().__init__(message or f"{self.code}: {path}")


class NotFound(TreeError):
    code = "ENOENT"


class NotADirectory(TreeError):
    code = "ENOTDIR"


class Interrupted(TreeError):
    """The refresh backing this query failed; the cache stays dirty."""

    code = "EINTR"


class TreeBuildError(Exception):
    """A tree listing could not be assembled into a hierarchy."""
