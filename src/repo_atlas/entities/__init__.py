"""Entity models for the repo-atlas domain layer."""

from repo_atlas.entities.collections import Collection, validate_collection_name
from repo_atlas.entities.repos import RepoCacheEntry, RepoEntry, Vcs

__all__ = [
    "Collection",
    "RepoCacheEntry",
    "RepoEntry",
    "Vcs",
    "validate_collection_name",
]
