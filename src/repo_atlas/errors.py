"""Error types raised by repo-atlas.

Every failure the library reports is an ``AtlasError`` subclass carrying the
structured context of the failure as attributes, so callers can branch on the
exception type instead of inspecting messages.
"""

from __future__ import annotations

from pathlib import Path  # noqa: TC003
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from repo_atlas.workflows.refresh import RefreshReport


class AtlasError(Exception):
    """Base class for all repo-atlas errors."""


class CollectionNameError(AtlasError, ValueError):
    """A string is not a valid collection name."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Invalid collection name {name!r}: {reason}")
        self.name = name
        self.reason = reason


class CollectionNotFoundError(AtlasError, KeyError):
    """A collection name is unknown to the registry."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Collection named `{self.name}` does not exist"


class CollectionExistsError(AtlasError):
    """A collection with the same name is already registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Collection `{name}` already exists")
        self.name = name


class NoTargetCollectionError(AtlasError):
    """No collection was given and no default collection is configured."""

    def __init__(self) -> None:
        super().__init__("No target collection specified")


class RootInaccessibleError(AtlasError):
    """A collection root exists but cannot be traversed."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(message)
        self.path = path


class RootBrokenSymlinkError(RootInaccessibleError):
    def __init__(self, path: Path) -> None:
        super().__init__(path, f"Collection directory {path} is a broken symlink")


class RootUnreadableError(RootInaccessibleError):
    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(path, f"Failed to access the collection directory {path}: {cause}")
        self.cause = cause


class TraversalError(AtlasError):
    """A filesystem error happened while walking below a collection root."""

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"Error during directory traversal at {path}: {cause}")
        self.path = path
        self.cause = cause


class NotARepositoryError(AtlasError):
    """A candidate directory could not be opened as a repository."""

    def __init__(self, path: Path, cause: Exception | None = None) -> None:
        super().__init__(f"{path} is neither a git directory nor a bare repository")
        self.path = path
        self.cause = cause


class DestinationUnresolvableError(AtlasError, ValueError):
    """No clone destination can be derived from a repository URI."""

    def __init__(self, uri: str, reason: str) -> None:
        super().__init__(f"Cannot determine destination path for {uri!r}: {reason}")
        self.uri = uri
        self.reason = reason


class VcsUndeterminedError(AtlasError):
    """The VCS of a URI could not be guessed and none was given."""

    def __init__(self, uri: str) -> None:
        super().__init__(f"Failed to get VCS type for URI {uri!r}; specify it explicitly")
        self.uri = uri


class CloneError(AtlasError):
    def __init__(self, uri: str, dest: Path, cause: Exception) -> None:
        super().__init__(f"Failed to clone repository {uri!r} into {dest}: {cause}")
        self.uri = uri
        self.dest = dest
        self.cause = cause


class DecodeError(AtlasError):
    """A persisted file could not be decoded."""

    def __init__(self, path: Path, cause: Exception) -> None:
        super().__init__(f"Failed to decode {path}: {cause}")
        self.path = path
        self.cause = cause


class ConfigError(AtlasError):
    """The collections config file is invalid."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Invalid config file {path}: {reason}")
        self.path = path
        self.reason = reason


class PersistenceError(AtlasError):
    """Reading or writing a persisted file failed."""

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"I/O error on {path}: {cause}")
        self.path = path
        self.cause = cause


class LockError(AtlasError):
    """The advisory lock guarding a file could not be acquired."""

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"Failed to lock {path}: {cause}")
        self.path = path
        self.cause = cause


class RefreshError(AtlasError):
    """One or more collections failed to refresh.

    Raised after the cache has been saved, so the collections that did succeed
    are already persisted. ``failed`` lists the failing collection names in
    processing order.
    """

    def __init__(self, failed: list[str], report: RefreshReport) -> None:
        super().__init__("Refresh failed for these collection(s): " + ", ".join(failed))
        self.failed = failed
        self.report = report
