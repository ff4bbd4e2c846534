"""Collection maintenance that keeps the cache in step with the registry.

The config file and the cache file are locked and written separately, the
config first. A crash in between leaves the cache lagging behind the config
until the next refresh.
"""

from __future__ import annotations

import logging
from pathlib import Path  # noqa: TC003
from typing import TYPE_CHECKING

from repo_atlas.memory.repos_cache import CollectionReposCache

if TYPE_CHECKING:
    from repo_atlas.entities import Collection
    from repo_atlas.memory.cache_file import CacheFile
    from repo_atlas.sync.registry import CollectionRegistry

logger = logging.getLogger(__name__)


class CollectionsWorkflow:
    def __init__(self, registry: CollectionRegistry, cache_file: CacheFile) -> None:
        self._registry = registry
        self._cache_file = cache_file

    def add(self, name: str, path: Path) -> Collection:
        """Register a collection and give it an empty cache."""
        collection = self._registry.add(name, path)
        with self._cache_file.update() as cache:
            cache.replace(collection.name, CollectionReposCache())
        return collection

    def remove(self, name: str, allow_missing: bool = False) -> Collection | None:
        """Unregister a collection and forget its cache. No files are deleted."""
        removed = self._registry.remove(name, allow_missing=allow_missing)
        with self._cache_file.update() as cache:
            cache.remove(name)
        return removed

    def rename(self, old_name: str, new_name: str) -> Collection:
        """Rename a collection, carrying its cache over to the new name."""
        renamed = self._registry.rename(old_name, new_name)
        with self._cache_file.update() as cache:
            repos = cache.remove(old_name)
            if repos is not None:
                cache.replace(new_name, repos)
        return renamed

    def set_path(self, name: str, path: Path) -> Collection:
        """Move a collection to another directory.

        The cached repositories described the old directory, so the cache is
        emptied until the next refresh.
        """
        moved = self._registry.set_path(name, path)
        with self._cache_file.update() as cache:
            cache.replace(name, CollectionReposCache())
        logger.debug("Reset the cache of `%s` after moving it", name)
        return moved
