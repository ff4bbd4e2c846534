"""Memory package: the repository cache and its persistence."""

from repo_atlas.memory.cache_file import CacheFile
from repo_atlas.memory.locking import exclusive_lock
from repo_atlas.memory.repos_cache import Cache, CollectionReposCache

__all__ = [
    "Cache",
    "CacheFile",
    "CollectionReposCache",
    "exclusive_lock",
]
