"""Git capability: open candidate directories, query work trees, clone."""

from __future__ import annotations

import logging
from pathlib import Path

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo
from git.repo.fun import is_git_dir

from repo_atlas.errors import CloneError, NotARepositoryError

logger = logging.getLogger(__name__)


def open_repository(git_dir: Path) -> Repo:
    """Open ``git_dir`` itself as a repository.

    ``git_dir`` must be a ``.git`` directory or a bare repository. Parent
    directories are not searched and ``/.git`` is never appended, so a working
    tree path is rejected.
    """
    try:
        # Repo() would look for a nested .git on its own; rule that out first.
        if not is_git_dir(str(git_dir)):
            raise NotARepositoryError(git_dir)
        return Repo(git_dir)
    except (InvalidGitRepositoryError, NoSuchPathError, OSError) as e:
        raise NotARepositoryError(git_dir, e) from e


def repo_workdir(repo: Repo) -> Path | None:
    """Return the working tree of an opened repository, ``None`` when bare."""
    if repo.bare or repo.working_tree_dir is None:
        return None
    return Path(repo.working_tree_dir)


def workdir(git_dir: Path) -> Path | None:
    """Return the working tree for the repository at ``git_dir``, if any."""
    repo = open_repository(git_dir)
    try:
        return repo_workdir(repo)
    finally:
        repo.close()


def clone(uri: str, dest: Path, bare: bool = False) -> None:
    """Clone ``uri`` into the local directory ``dest``.

    ``dest`` may already exist as a directory (or a symlink to one); a
    missing ``dest`` is created with its parents.
    """
    logger.debug("Cloning %r into %s", uri, dest)

    try:
        if dest.exists():
            if not dest.is_dir():
                raise NotADirectoryError(f"Destination path {dest} is not a directory")
        else:
            dest.mkdir(parents=True)
        repo = Repo.clone_from(uri, dest, bare=bare)
    except (GitCommandError, OSError) as e:
        raise CloneError(uri, dest, e) from e

    repo.close()
    logger.debug("Successfully cloned %r into %s", uri, dest)
