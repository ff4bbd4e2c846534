"""Collection models: a named directory that holds repositories."""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from repo_atlas.errors import CollectionNameError

_NAME_CHARS = re.compile(r"[A-Za-z0-9_-]")


def validate_collection_name(name: str) -> str:
    """Check ``name`` against the collection naming rules and return it.

    A name must be non-empty, consist of ASCII alphanumerics, ``_`` and
    ``-`` only, and must not start with ``-``.
    """
    if not name:
        raise CollectionNameError(name, "Empty collection name")
    if name.startswith("-"):
        raise CollectionNameError(name, "Collection name starts with '-'")
    for char in name:
        if not _NAME_CHARS.fullmatch(char):
            raise CollectionNameError(name, f"Invalid character {char!r}")
    return name


class Collection(BaseModel):
    """A registered collection.

    ``path`` may be relative, in which case it is resolved against the home
    directory when used.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Unique collection name")
    path: Path = Field(description="Collection directory, absolute or relative to home")

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        # CollectionNameError is a ValueError, so pydantic reports it as a ValidationError
        return validate_collection_name(v)

    def abspath(self, home_dir: Path) -> Path:
        """Return the absolute collection directory.

        An absolute ``path`` wins over ``home_dir`` when joined.
        """
        return home_dir / self.path
