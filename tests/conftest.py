"""Shared test fixtures for repo-atlas."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from git import Repo

from repo_atlas.config import AtlasConfig
from repo_atlas.context import AtlasContext

GitRepoFactory = Callable[..., Path]


@pytest.fixture
def git_repo() -> GitRepoFactory:
    """Factory creating real git repositories.

    Returns the VCS directory: ``<path>/.git`` for a working tree, ``path``
    itself for a bare repository.
    """

    def make(path: Path, bare: bool = False) -> Path:
        repo = Repo.init(path, mkdir=True, bare=bare)
        repo.close()
        return path if bare else path / ".git"

    return make


@pytest.fixture
def atlas_config(tmp_path: Path) -> AtlasConfig:
    """Config with every directory inside tmp_path."""
    home = tmp_path / "home"
    home.mkdir()
    return AtlasConfig(
        home_dir=home,
        config_dir=tmp_path / "config",
        cache_dir=tmp_path / "cache",
    )


@pytest.fixture
def context(atlas_config: AtlasConfig) -> AtlasContext:
    return AtlasContext(atlas_config)
