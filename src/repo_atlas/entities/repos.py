"""Domain models for discovered and cached repositories."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Vcs(StrEnum):
    """Supported version control systems, ordered alphabetically."""

    GIT = "git"

    @classmethod
    def from_name(cls, name: str) -> Vcs:
        """Parse a lower-case VCS name such as ``"git"``.

        Raises ValueError for unknown or non-lower-case names.
        """
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Failed to parse VCS name {name!r}") from None


class RepoEntry(BaseModel):
    """A repository found on disk by the seeker.

    For git, ``path`` is the ``.git`` directory or the ``*.git`` bare
    repository directory, as an absolute path.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    vcs: Vcs = Vcs.GIT


class RepoCacheEntry(BaseModel):
    """A cached repository, located relative to its collection root.

    Equality of the model compares both fields; cache slots are keyed on
    ``relative_path`` alone (see ``CollectionReposCache``).
    """

    model_config = ConfigDict(frozen=True)

    relative_path: Path = Field(description="Path of the VCS directory below the collection root")
    vcs: Vcs = Vcs.GIT

    @field_validator("relative_path")
    @classmethod
    def ensure_relative(cls, v: Path) -> Path:
        if v.is_absolute():
            raise ValueError(f"relative_path must be relative, got {v}")
        return v

    @property
    def key(self) -> str:
        """Slot key used for deduplication and ordering."""
        return self.relative_path.as_posix()

    @classmethod
    def from_discovered(cls, entry: RepoEntry, root: Path) -> RepoCacheEntry:
        """Relativize a discovered entry against the collection ``root``.

        Every path the seeker yields lies below ``root``, so failing to strip
        the prefix means the seeker is broken.
        """
        try:
            relative = entry.path.relative_to(root)
        except ValueError:
            raise AssertionError(
                f"The repository path {entry.path} must be prefixed by {root}"
            ) from None
        return cls(relative_path=relative, vcs=entry.vcs)
