"""JSON-backed persistence for the repository cache."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path  # noqa: TC003

from pydantic import ValidationError

from repo_atlas.errors import DecodeError
from repo_atlas.memory.locking import atomic_write_text, exclusive_lock, read_bytes_if_exists
from repo_atlas.memory.repos_cache import Cache

logger = logging.getLogger(__name__)


class CacheFile:
    """The cache file of one atlas.

    The cache is read lazily: ``load_if_needed()`` decodes the file on first
    use and keeps the result for the lifetime of this object. A missing file
    is an empty cache, and so is a malformed one (a warning is logged and the
    next save overwrites it).
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._cache: Cache | None = None

    def load_if_needed(self) -> Cache:
        """Return the loaded cache, reading the file on the first call."""
        if self._cache is None:
            with exclusive_lock(self.path):
                self._cache = self._read()
        return self._cache

    def save(self, cache: Cache) -> None:
        """Rewrite the whole cache file with ``cache``."""
        with exclusive_lock(self.path):
            self._write(cache)

    @contextmanager
    def update(self) -> Iterator[Cache]:
        """Read-modify-write the cache under the file lock.

        The cache yielded is a fresh copy of the file content. It is written
        back when the block exits normally; if the block raises, nothing is
        written. The lock is released in both cases.
        """
        with exclusive_lock(self.path):
            cache = self._read()
            yield cache
            self._write(cache)

    def _read(self) -> Cache:
        content = read_bytes_if_exists(self.path)
        if content is None or not content.strip():
            return Cache()
        try:
            return Cache.from_json(content)
        except ValidationError as e:
            error = DecodeError(self.path, e)
            logger.warning("Cache will be reset due to invalid data: %s", error)
            return Cache()

    def _write(self, cache: Cache) -> None:
        atomic_write_text(self.path, cache.to_json())
        self._cache = cache
        logger.debug("Saved cache with %d collections to %s", len(cache), self.path)
