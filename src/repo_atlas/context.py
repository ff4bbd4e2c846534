"""Atlas context: the config and the stores derived from it."""

from __future__ import annotations

import logging
from pathlib import Path  # noqa: TC003

from repo_atlas.config import AtlasConfig
from repo_atlas.memory.cache_file import CacheFile
from repo_atlas.sync.registry import CollectionRegistry
from repo_atlas.workflows import (
    CloneWorkflow,
    CollectionsWorkflow,
    ListingWorkflow,
    RefreshOrchestrator,
)

logger = logging.getLogger(__name__)


class AtlasContext:
    """Bundle of directory config, collection registry and cache file.

    The registry is opened on first access; the cache file object is created
    eagerly but reads nothing until its cache is requested.
    """

    def __init__(self, config: AtlasConfig | None = None) -> None:
        self.config = config or AtlasConfig.from_env()
        self.cache_file = CacheFile(self.config.cache_path)
        self._registry: CollectionRegistry | None = None
        logger.debug("Home directory: %s", self.config.home_dir)
        logger.debug("Config directory: %s", self.config.config_dir)

    @property
    def home_dir(self) -> Path:
        return self.config.home_dir

    @property
    def registry(self) -> CollectionRegistry:
        if self._registry is None:
            self._registry = CollectionRegistry(self.config.config_path)
        return self._registry

    def refresh_orchestrator(self) -> RefreshOrchestrator:
        return RefreshOrchestrator(self.registry, self.cache_file, self.home_dir)

    def clone_workflow(self) -> CloneWorkflow:
        return CloneWorkflow(self.registry, self.cache_file, self.home_dir)

    def listing_workflow(self) -> ListingWorkflow:
        return ListingWorkflow(self.registry, self.cache_file, self.home_dir)

    def collections_workflow(self) -> CollectionsWorkflow:
        return CollectionsWorkflow(self.registry, self.cache_file)
