"""Collection registry kept in sync with the config file."""

from repo_atlas.sync.registry import CollectionRegistry, CollectionsConfig

__all__ = [
    "CollectionRegistry",
    "CollectionsConfig",
]
