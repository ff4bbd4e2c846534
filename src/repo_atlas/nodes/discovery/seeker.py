"""Repository discovery: walk a collection directory and find VCS roots."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import TYPE_CHECKING

from repo_atlas.entities import RepoEntry, Vcs
from repo_atlas.errors import (
    NotARepositoryError,
    RootBrokenSymlinkError,
    RootUnreadableError,
    TraversalError,
)
from repo_atlas.vcs.git import open_repository, repo_workdir

if TYPE_CHECKING:
    from git import Repo

logger = logging.getLogger(__name__)

DOT_GIT = ".git"

RepoOpener = Callable[[Path], "Repo"]
ErrorHandler = Callable[[TraversalError], None]


def is_repository_candidate(name: str) -> bool:
    """Return True for ``.git`` and for bare-repository style ``*.git`` names."""
    return name.endswith(DOT_GIT)


class RepoSeeker:
    """Single-pass iterator over the repositories below a root directory.

    Use ``RepoSeeker.open()`` rather than the constructor: it tells an absent
    root (nothing to discover) apart from an inaccessible one.

    The walk is depth-first over directories only and never follows
    symlinks. When a repository is found, its VCS directory is not entered,
    and when the repository's working tree is the directory holding it, the
    rest of that working tree is skipped as well.

    Filesystem errors below the root are wrapped in ``TraversalError`` and
    passed to ``on_error``. Without a handler the error is raised and the
    iteration ends. A handler that returns normally makes the walk skip the
    failing directory and go on.
    """

    def __init__(
        self,
        root: Path,
        opener: RepoOpener = open_repository,
        on_error: ErrorHandler | None = None,
    ) -> None:
        # Normalized absolute root, so yielded paths compare equal to work trees
        self.root = Path(os.path.abspath(root))
        self._opener = opener
        self._on_error = on_error
        self._walker = self._walk()

    @classmethod
    def open(
        cls,
        root: Path,
        opener: RepoOpener = open_repository,
        on_error: ErrorHandler | None = None,
    ) -> RepoSeeker | None:
        """Create a seeker for ``root``.

        Returns:
            None if ``root`` does not exist, a seeker otherwise.

        Raises:
            RootBrokenSymlinkError: ``root`` is a dangling symlink.
            RootUnreadableError: ``root`` exists but cannot be listed.
        """
        if not root.exists():
            try:
                root.lstat()
            except FileNotFoundError:
                return None
            except OSError as e:
                raise RootUnreadableError(root, e) from e
            # lstat() works while exists() does not: a dangling symlink
            raise RootBrokenSymlinkError(root)

        try:
            with os.scandir(root):
                pass
        except OSError as e:
            raise RootUnreadableError(root, e) from e

        return cls(root, opener=opener, on_error=on_error)

    def __iter__(self) -> Iterator[RepoEntry]:
        return self

    def __next__(self) -> RepoEntry:
        return next(self._walker)

    def _walk(self) -> Iterator[RepoEntry]:
        stack = [self.root]
        while stack:
            directory = stack.pop()
            try:
                subdirs = self._list_subdirs(directory)
            except OSError as e:
                self._report(TraversalError(directory, e))
                continue

            descend: list[Path] = []
            for path in subdirs:
                if not is_repository_candidate(path.name):
                    descend.append(path)
                    continue

                repo = self._try_open(path)
                if repo is None:
                    # Coincidentally named directory; walk into it like any other.
                    descend.append(path)
                    continue
                try:
                    owner = repo_workdir(repo)
                finally:
                    repo.close()

                yield RepoEntry(path=path, vcs=Vcs.GIT)

                if owner == directory:
                    logger.debug(
                        "Skipping %s as it is the working directory of %s", directory, path
                    )
                    descend = []
                    break

            stack.extend(reversed(descend))

    def _list_subdirs(self, directory: Path) -> list[Path]:
        """List child directories, with ``.git`` first and the rest by name."""
        with os.scandir(directory) as it:
            names = [entry.name for entry in it if entry.is_dir(follow_symlinks=False)]
        names.sort(key=lambda name: (name != DOT_GIT, name))
        return [directory / name for name in names]

    def _try_open(self, path: Path) -> Repo | None:
        try:
            return self._opener(path)
        except NotARepositoryError as e:
            logger.debug(
                "Directory %s is neither a git directory nor a bare repository: %s",
                path,
                e.cause or e,
            )
            return None

    def _report(self, error: TraversalError) -> None:
        if self._on_error is None:
            raise error
        self._on_error(error)
