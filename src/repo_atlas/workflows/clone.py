"""Clone a repository into a collection and record it in the cache."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from repo_atlas import vcs as vcs_engines
from repo_atlas.entities import RepoCacheEntry, Vcs
from repo_atlas.errors import NoTargetCollectionError, VcsUndeterminedError
from repo_atlas.memory.repos_cache import CollectionReposCache
from repo_atlas.nodes.discovery.destination import detect_vcs, resolve_clone_destination

if TYPE_CHECKING:
    from repo_atlas.entities import Collection
    from repo_atlas.memory.cache_file import CacheFile
    from repo_atlas.sync.registry import CollectionRegistry

logger = logging.getLogger(__name__)

Cloner = Callable[[Vcs, str, Path, bool], None]


@dataclass
class CloneResult:
    """Where a repository was cloned and how it was cached."""

    collection: str
    vcs: Vcs
    destination: Path
    entry: RepoCacheEntry


def _default_cloner(vcs: Vcs, uri: str, dest: Path, bare: bool) -> None:
    vcs_engines.clone(vcs, uri, dest, bare=bare)


def _cache_relative_path(vcs: Vcs, dest: Path, bare: bool) -> Path:
    # The cache stores the VCS directory itself, as the seeker would find it.
    if vcs is Vcs.GIT and not bare:
        return dest / ".git"
    return dest


class CloneWorkflow:
    """Clone repositories below collection roots."""

    def __init__(
        self,
        registry: CollectionRegistry,
        cache_file: CacheFile,
        home_dir: Path,
        cloner: Cloner = _default_cloner,
    ) -> None:
        self._registry = registry
        self._cache_file = cache_file
        self._home_dir = home_dir
        self._cloner = cloner

    def _target_collection(self, name: str | None) -> Collection:
        if name is not None:
            return self._registry.require(name)
        default_name = self._registry.default_name
        if default_name is None:
            raise NoTargetCollectionError()
        return self._registry.require(default_name)

    def clone(
        self,
        uri: str,
        collection: str | None = None,
        vcs: Vcs | None = None,
        bare: bool = False,
    ) -> CloneResult:
        """Clone ``uri`` into ``collection`` (or the default collection).

        The destination below the collection root is derived from the URI,
        e.g. ``https://example.com/a/b.git`` goes to ``example.com/a/b``.
        After a successful clone the repository is added to the
        collection's cached repositories.

        Raises:
            NoTargetCollectionError: no collection given and no default set.
            CollectionNotFoundError: the collection is not registered.
            VcsUndeterminedError: ``vcs`` is None and cannot be guessed.
            DestinationUnresolvableError: ``uri`` yields no destination.
            CloneError: the VCS failed to clone.
        """
        target = self._target_collection(collection)

        if vcs is None:
            vcs = detect_vcs(uri)
            if vcs is None:
                raise VcsUndeterminedError(uri)
        logger.debug("Assumed VCS is %s", vcs)

        reldest = Path(resolve_clone_destination(uri, bare, vcs))
        absdest = target.abspath(self._home_dir) / reldest
        logger.debug("Destination directory is %s", absdest)

        self._cloner(vcs, uri, absdest, bare)

        entry = RepoCacheEntry(relative_path=_cache_relative_path(vcs, reldest, bare), vcs=vcs)
        with self._cache_file.update() as cache:
            repos = cache.get(target.name)
            if repos is None:
                repos = CollectionReposCache()
                cache.replace(target.name, repos)
            repos.add(entry)

        logger.info("Cloned %s into %s", uri, absdest)
        return CloneResult(collection=target.name, vcs=vcs, destination=absdest, entry=entry)
