"""List cached repositories without touching the disk."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

from repo_atlas import vcs as vcs_engines
from repo_atlas.entities import Vcs  # noqa: TC001

if TYPE_CHECKING:
    from repo_atlas.memory.cache_file import CacheFile
    from repo_atlas.sync.registry import CollectionRegistry

logger = logging.getLogger(__name__)

WorkdirLookup = Callable[[Vcs, Path], "Path | None"]


class PathBase(StrEnum):
    """Base directory listed paths are made relative to."""

    ROOT = "root"
    COLLECTION = "collection"
    HOME = "home"


@dataclass(frozen=True)
class ListedRepo:
    collection: str
    vcs: Vcs
    path: Path


def try_relativize(path: Path, base: Path) -> Path:
    """Return ``path`` relative to ``base``, or ``path`` itself if not below it."""
    try:
        return path.relative_to(base)
    except ValueError:
        # A working directory may live outside its collection directory.
        logger.debug("Directory %s might not be a descendant of %s", path, base)
        return path


class ListingWorkflow:
    def __init__(
        self,
        registry: CollectionRegistry,
        cache_file: CacheFile,
        home_dir: Path,
        workdir_lookup: WorkdirLookup = vcs_engines.workdir,
    ) -> None:
        self._registry = registry
        self._cache_file = cache_file
        self._home_dir = home_dir
        self._workdir_lookup = workdir_lookup

    def iter_repos(
        self,
        collections: Iterable[str] = (),
        vcs: Iterable[Vcs] = (),
        workdir: bool = False,
        path_base: PathBase = PathBase.ROOT,
    ) -> Iterator[ListedRepo]:
        """Yield cached repositories of ``collections`` (all if empty).

        Args:
            collections: Collection names; unknown names raise
                CollectionNotFoundError when reached.
            vcs: Only yield repositories of these VCS kinds (all if empty).
            workdir: Yield working directories instead of VCS directories;
                repositories without one are skipped.
            path_base: Make yielded paths relative to the filesystem root
                (absolute), the collection directory or the home directory.
        """
        names = list(collections)
        targets = (
            [self._registry.require(name) for name in names]
            if names
            else self._registry.list_all()
        )
        wanted = set(vcs)
        cache = self._cache_file.load_if_needed()

        for collection in targets:
            repos = cache.get(collection.name)
            if repos is None:
                logger.info("No cache found for collection `%s`", collection.name)
                continue
            base_path = collection.abspath(self._home_dir)

            for entry in repos:
                if wanted and entry.vcs not in wanted:
                    continue
                path = base_path / entry.relative_path
                if workdir:
                    work_tree = self._workdir_lookup(entry.vcs, path)
                    if work_tree is None:
                        logger.debug("No working directory for %s repository %s", entry.vcs, path)
                        continue
                    path = work_tree

                if path_base is PathBase.COLLECTION:
                    path = try_relativize(path, base_path)
                elif path_base is PathBase.HOME:
                    path = try_relativize(path, self._home_dir)
                yield ListedRepo(collection=collection.name, vcs=entry.vcs, path=path)
