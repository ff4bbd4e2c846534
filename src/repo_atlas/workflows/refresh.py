"""Refresh orchestration: rediscover collections and rewrite the cache."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path  # noqa: TC003
from typing import TYPE_CHECKING

from repo_atlas.entities import RepoCacheEntry
from repo_atlas.errors import (
    AtlasError,
    CollectionNotFoundError,
    RefreshError,
    RootInaccessibleError,
    TraversalError,
)
from repo_atlas.memory.repos_cache import CollectionReposCache
from repo_atlas.nodes.discovery.seeker import RepoOpener, RepoSeeker
from repo_atlas.vcs.git import open_repository

if TYPE_CHECKING:
    from repo_atlas.entities import Collection
    from repo_atlas.memory.cache_file import CacheFile
    from repo_atlas.sync.registry import CollectionRegistry

logger = logging.getLogger(__name__)


class OutcomeStatus(StrEnum):
    """How the refresh of one collection ended."""

    REFRESHED = "refreshed"
    ABSENT = "absent"  # root directory does not exist; cached as empty
    MISSING = "missing"  # name not registered
    INACCESSIBLE = "inaccessible"  # broken symlink or unreadable root
    INTERRUPTED = "interrupted"  # traversal error without keep-going


_FAILED_STATUSES = frozenset(
    {OutcomeStatus.MISSING, OutcomeStatus.INACCESSIBLE, OutcomeStatus.INTERRUPTED}
)


@dataclass
class CollectionOutcome:
    """Result of refreshing a single collection.

    ``repos`` is the cache to store for the collection, or None when the cache
    must be left as it is.
    """

    name: str
    status: OutcomeStatus
    repos: CollectionReposCache | None = None
    error: AtlasError | None = None
    skipped: list[TraversalError] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.status in _FAILED_STATUSES


@dataclass
class RefreshReport:
    """Outcomes of a refresh, in processing order."""

    outcomes: list[CollectionOutcome] = field(default_factory=list)

    @property
    def failed(self) -> list[str]:
        return [o.name for o in self.outcomes if o.failed]

    @property
    def succeeded(self) -> list[str]:
        return [o.name for o in self.outcomes if not o.failed]

    def get(self, name: str) -> CollectionOutcome | None:
        for outcome in self.outcomes:
            if outcome.name == name:
                return outcome
        return None


class RefreshOrchestrator:
    """Rebuild the cached repository lists of collections.

    A refreshed collection's cache replaces the previous one entirely;
    collections that are not targeted keep their cache untouched. The cache
    file stays locked for the whole refresh and is written once at the end.
    """

    def __init__(
        self,
        registry: CollectionRegistry,
        cache_file: CacheFile,
        home_dir: Path,
        opener: RepoOpener = open_repository,
    ) -> None:
        self._registry = registry
        self._cache_file = cache_file
        self._home_dir = home_dir
        self._opener = opener

    def refresh(
        self,
        collections: Iterable[str] = (),
        keep_going: bool = False,
        verbose: bool = False,
    ) -> RefreshReport:
        """Refresh ``collections`` (every registered collection if empty).

        Without ``keep_going`` the first failure is raised as is and nothing
        is saved. With ``keep_going`` failures are recorded, every target is
        processed, the cache is saved, and then RefreshError is raised naming
        the failed collections.

        Args:
            collections: Names of the collections to refresh.
            keep_going: Continue past failing collections and traversal errors.
            verbose: Log every discovered repository at INFO level.

        Returns:
            RefreshReport when every collection succeeded.
        """
        targets = list(dict.fromkeys(collections))
        if not targets:
            targets = [c.name for c in self._registry.list_all()]
        logger.debug("Refreshing collections %s (keep_going=%s)", targets, keep_going)

        report = RefreshReport()
        with self._cache_file.update() as cache:
            for name in targets:
                outcome = self._refresh_collection(name, keep_going, verbose)
                report.outcomes.append(outcome)

                if outcome.failed:
                    if not keep_going:
                        assert outcome.error is not None
                        raise outcome.error
                    logger.error(
                        "Error happened during refreshing collection `%s`: %s",
                        name,
                        outcome.error,
                    )
                if outcome.repos is not None:
                    cache.replace(name, outcome.repos)

        if report.failed:
            failed = RefreshError(report.failed, report)
            logger.warning("%s", failed)
            raise failed
        return report

    def _refresh_collection(self, name: str, keep_going: bool, verbose: bool) -> CollectionOutcome:
        collection = self._registry.get(name)
        if collection is None:
            return CollectionOutcome(
                name, OutcomeStatus.MISSING, error=CollectionNotFoundError(name)
            )
        logger.debug("Refreshing collection `%s`", name)

        skipped: list[TraversalError] = []

        def skip(error: TraversalError) -> None:
            logger.warning("Error during directory traversal: %s", error)
            skipped.append(error)

        try:
            seeker = RepoSeeker.open(
                collection.abspath(self._home_dir),
                opener=self._opener,
                on_error=skip if keep_going else None,
            )
        except RootInaccessibleError as e:
            # The whole collection is unavailable; its cache is emptied.
            return CollectionOutcome(
                name, OutcomeStatus.INACCESSIBLE, repos=CollectionReposCache(), error=e
            )

        if seeker is None:
            logger.info("Collection directory of `%s` does not exist", name)
            return CollectionOutcome(name, OutcomeStatus.ABSENT, repos=CollectionReposCache())

        try:
            repos = self._collect(collection, seeker, verbose)
        except TraversalError as e:
            return CollectionOutcome(name, OutcomeStatus.INTERRUPTED, error=e)

        return CollectionOutcome(name, OutcomeStatus.REFRESHED, repos=repos, skipped=skipped)

    def _collect(
        self, collection: Collection, seeker: RepoSeeker, verbose: bool
    ) -> CollectionReposCache:
        repos = CollectionReposCache()
        level = logging.INFO if verbose else logging.DEBUG
        for entry in seeker:
            logger.log(level, "Found %s repository %s", entry.vcs, entry.path)
            repos.add(RepoCacheEntry.from_discovered(entry, seeker.root))
        logger.debug("Collection `%s` has %d repositories", collection.name, len(repos))
        return repos
