"""Directory configuration for repo-atlas."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field

CONFIG_DIR_ENV = "REPO_ATLAS_CONFIG_DIR"
CACHE_DIR_ENV = "REPO_ATLAS_CACHE_DIR"


class AtlasConfig(BaseModel):
    """Where collections are resolved from and where state is stored."""

    home_dir: Path = Field(
        default_factory=Path.home,
        description="Base directory for collections with a relative path",
    )
    config_dir: Path = Field(
        default_factory=lambda: Path.home() / ".repo-atlas",
        description="Directory holding collections.json",
    )
    cache_dir: Path = Field(
        default_factory=lambda: Path.home() / ".repo-atlas" / "cache",
        description="Directory holding cache.json",
    )

    @property
    def config_path(self) -> Path:
        return self.config_dir / "collections.json"

    @property
    def cache_path(self) -> Path:
        return self.cache_dir / "cache.json"

    @classmethod
    def from_env(cls) -> AtlasConfig:
        """Build a config honouring the ``REPO_ATLAS_*_DIR`` overrides."""
        overrides: dict[str, Path] = {}
        if config_dir := os.environ.get(CONFIG_DIR_ENV):
            overrides["config_dir"] = Path(config_dir)
        if cache_dir := os.environ.get(CACHE_DIR_ENV):
            overrides["cache_dir"] = Path(cache_dir)
        return cls(**overrides)


# Default configuration
ATLAS_CONFIG = AtlasConfig()
