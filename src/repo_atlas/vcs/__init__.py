"""VCS engines, dispatched by ``Vcs`` kind."""

from __future__ import annotations

from typing import TYPE_CHECKING

from repo_atlas.entities import Vcs
from repo_atlas.vcs import git

if TYPE_CHECKING:
    from pathlib import Path


def workdir(vcs: Vcs, repo_path: Path) -> Path | None:
    """Return the working directory of the repository at ``repo_path``."""
    if vcs is Vcs.GIT:
        return git.workdir(repo_path)
    raise ValueError(f"Unsupported VCS {vcs}")


def clone(vcs: Vcs, uri: str, dest: Path, bare: bool = False) -> None:
    """Clone ``uri`` into ``dest`` with the given VCS."""
    if vcs is Vcs.GIT:
        git.clone(uri, dest, bare=bare)
        return
    raise ValueError(f"Unsupported VCS {vcs}")


__all__ = ["clone", "git", "workdir"]
