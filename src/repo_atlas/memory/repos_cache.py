"""In-memory repository cache for collections."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter

from repo_atlas.entities import RepoCacheEntry


class CollectionReposCache:
    """Repositories of one collection, unique and sorted by relative path.

    Slots are keyed on ``relative_path`` only: adding an entry whose path is
    already present replaces the stored entry, ``vcs`` included.
    """

    def __init__(self, entries: Iterable[RepoCacheEntry] = ()) -> None:
        self._repos: dict[str, RepoCacheEntry] = {}
        self.extend(entries)

    def add(self, entry: RepoCacheEntry) -> RepoCacheEntry | None:
        """Insert ``entry`` and return the entry previously in its slot, if any."""
        previous = self._repos.get(entry.key)
        self._repos[entry.key] = entry
        return previous

    def extend(self, entries: Iterable[RepoCacheEntry]) -> None:
        for entry in entries:
            self.add(entry)

    def remove(self, relative_path: Path | str) -> RepoCacheEntry | None:
        """Remove the entry stored for ``relative_path`` and return it."""
        return self._repos.pop(Path(relative_path).as_posix(), None)

    def get(self, relative_path: Path | str) -> RepoCacheEntry | None:
        return self._repos.get(Path(relative_path).as_posix())

    def __contains__(self, relative_path: object) -> bool:
        if not isinstance(relative_path, (str, Path)):
            return False
        return Path(relative_path).as_posix() in self._repos

    def __iter__(self) -> Iterator[RepoCacheEntry]:
        for key in sorted(self._repos):
            yield self._repos[key]

    def __len__(self) -> int:
        return len(self._repos)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CollectionReposCache):
            return NotImplemented
        return list(self) == list(other)

    def __repr__(self) -> str:
        return f"CollectionReposCache({list(self)!r})"


class _CollectionDocument(BaseModel):
    repos: list[RepoCacheEntry] = Field(default_factory=list)


_CACHE_DOCUMENT = TypeAdapter(dict[str, _CollectionDocument])


class Cache:
    """Repository caches of every collection, keyed by collection name.

    The whole cache is one snapshot: it is decoded from and encoded to a
    single JSON document (see ``to_json``).
    """

    def __init__(self, collections: dict[str, CollectionReposCache] | None = None) -> None:
        self._collections: dict[str, CollectionReposCache] = dict(collections or {})

    def get(self, name: str) -> CollectionReposCache | None:
        return self._collections.get(name)

    def replace(self, name: str, repos: CollectionReposCache) -> CollectionReposCache | None:
        """Set the cache of collection ``name``, returning the old one."""
        previous = self._collections.get(name)
        self._collections[name] = repos
        return previous

    def remove(self, name: str) -> CollectionReposCache | None:
        """Drop the cache of collection ``name``, returning it."""
        return self._collections.pop(name, None)

    def names(self) -> list[str]:
        return sorted(self._collections)

    def copy(self) -> Cache:
        return Cache(
            {name: CollectionReposCache(repos) for name, repos in self._collections.items()}
        )

    def __contains__(self, name: object) -> bool:
        return name in self._collections

    def __len__(self) -> int:
        return len(self._collections)

    def to_dict(self) -> dict[str, Any]:
        """Return the serializable form, omitting empty collections."""
        return {
            name: {"repos": [entry.model_dump(mode="json") for entry in repos]}
            for name, repos in sorted(self._collections.items())
            if len(repos)
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n"

    @classmethod
    def from_json(cls, content: str | bytes) -> Cache:
        """Decode a cache document.

        Raises pydantic.ValidationError for malformed content (invalid JSON
        included).
        """
        documents = _CACHE_DOCUMENT.validate_json(content)
        return cls(
            {name: CollectionReposCache(doc.repos) for name, doc in documents.items()}
        )
