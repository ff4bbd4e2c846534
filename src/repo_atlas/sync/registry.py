"""Registry of collections, persisted in the config file."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from repo_atlas.entities import Collection, validate_collection_name
from repo_atlas.errors import (
    CollectionExistsError,
    CollectionNotFoundError,
    ConfigError,
)
from repo_atlas.memory.locking import atomic_write_text, exclusive_lock, read_bytes_if_exists

logger = logging.getLogger(__name__)


class CollectionsConfig(BaseModel):
    """Content of the collections config file."""

    default_collection: str | None = Field(
        default=None,
        description="Collection used when none is given; may name a collection that no longer exists",
    )
    collections: list[Collection] = Field(default_factory=list)

    @field_validator("collections")
    @classmethod
    def reject_duplicates(cls, v: list[Collection]) -> list[Collection]:
        seen: set[str] = set()
        for collection in v:
            if collection.name in seen:
                raise ValueError(f"collections with duplicate name {collection.name!r}")
            seen.add(collection.name)
        return v


class CollectionRegistry:
    """Registry of named collections.

    The config file is read when the registry is created. Every mutation
    re-reads the file under its lock, applies the change and writes the file
    back, so concurrent processes do not lose each other's edits.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._default: str | None = None
        self._collections: dict[str, Collection] = {}
        with exclusive_lock(self._path):
            self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        """Load the registry from disk; a missing file is an empty registry."""
        content = read_bytes_if_exists(self._path)
        if content is None:
            self._default = None
            self._collections = {}
            return

        try:
            config = CollectionsConfig.model_validate_json(content)
        except ValidationError as e:
            raise ConfigError(self._path, str(e)) from e

        self._default = config.default_collection
        self._collections = {c.name: c for c in config.collections}
        logger.debug("Loaded %d collections from %s", len(self._collections), self._path)

    def _save(self) -> None:
        config = CollectionsConfig(
            default_collection=self._default,
            collections=[self._collections[name] for name in sorted(self._collections)],
        )
        data = config.model_dump(mode="json")
        atomic_write_text(self._path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")
        logger.debug("Saved registry with %d collections", len(self._collections))

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        with exclusive_lock(self._path):
            self._load()
            yield
            self._save()

    def get(self, name: str) -> Collection | None:
        """Get a registered collection."""
        return self._collections.get(name)

    def require(self, name: str) -> Collection:
        """Get a registered collection, raising CollectionNotFoundError if unknown."""
        collection = self._collections.get(name)
        if collection is None:
            raise CollectionNotFoundError(name)
        return collection

    def list_all(self) -> list[Collection]:
        """List all collections, sorted by name."""
        return [self._collections[name] for name in sorted(self._collections)]

    def __contains__(self, name: object) -> bool:
        return name in self._collections

    def __len__(self) -> int:
        return len(self._collections)

    @property
    def default_name(self) -> str | None:
        return self._default

    def default(self) -> Collection | None:
        """Return the default collection.

        A default naming an unregistered collection counts as no default.
        """
        if self._default is None:
            return None
        return self._collections.get(self._default)

    def add(self, name: str, path: Path) -> Collection:
        """Register a new collection."""
        collection = Collection(name=validate_collection_name(name), path=path)
        with self._mutation():
            if name in self._collections:
                raise CollectionExistsError(name)
            self._collections[name] = collection
        logger.info("Added the collection `%s` at %s", name, path)
        return collection

    def remove(self, name: str, allow_missing: bool = False) -> Collection | None:
        """Unregister a collection. Files on disk are never touched.

        With ``allow_missing`` the call is idempotent and returns None for an
        unknown name.
        """
        with self._mutation():
            removed = self._collections.pop(name, None)
            if removed is None:
                if allow_missing:
                    return None
                raise CollectionNotFoundError(name)
            if self._default == name:
                self._default = None
        logger.info("Unregistered the collection `%s`", name)
        return removed

    def rename(self, old_name: str, new_name: str) -> Collection:
        """Rename a collection; the default collection follows the rename."""
        validate_collection_name(new_name)
        with self._mutation():
            collection = self._collections.get(old_name)
            if collection is None:
                raise CollectionNotFoundError(old_name)
            if new_name in self._collections:
                raise CollectionExistsError(new_name)
            del self._collections[old_name]
            renamed = collection.model_copy(update={"name": new_name})
            self._collections[new_name] = renamed
            if self._default == old_name:
                self._default = new_name
        logger.info("Renamed the collection `%s` to `%s`", old_name, new_name)
        return renamed

    def set_path(self, name: str, path: Path) -> Collection:
        """Point a collection at another directory."""
        with self._mutation():
            collection = self._collections.get(name)
            if collection is None:
                raise CollectionNotFoundError(name)
            moved = collection.model_copy(update={"path": path})
            self._collections[name] = moved
        logger.info("Collection `%s` now points at %s", name, path)
        return moved

    def set_default(self, name: str | None) -> None:
        """Set (or clear, with None) the default collection."""
        with self._mutation():
            if name is not None and name not in self._collections:
                raise CollectionNotFoundError(name)
            self._default = name
        logger.info("Default collection set to %s", name)
