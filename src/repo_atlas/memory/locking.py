"""Advisory file locking and atomic file replacement.

Each guarded file ``foo.json`` gets a companion ``foo.json.lock``. The lock
is an exclusive ``flock`` held for a whole read-modify-write cycle; it has no
timeout, so a concurrent holder makes the caller wait.
"""

from __future__ import annotations

import fcntl
import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from repo_atlas.errors import LockError, PersistenceError

logger = logging.getLogger(__name__)


def lock_path_for(path: Path) -> Path:
    return path.with_name(path.name + ".lock")


@contextmanager
def exclusive_lock(path: Path) -> Iterator[None]:
    """Hold an exclusive advisory lock for ``path`` while the block runs.

    Raises:
        LockError: the lock file cannot be created or locked.
    """
    lock_path = lock_path_for(path)
    try:
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(lock_path, os.O_CREAT | os.O_RDWR, 0o644)
    except OSError as e:
        raise LockError(lock_path, e) from e

    try:
        logger.debug("Locking %s", lock_path)
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
        except OSError as e:
            raise LockError(lock_path, e) from e
        logger.debug("Locked %s", lock_path)
        try:
            yield
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
            logger.debug("Unlocked %s", lock_path)
    finally:
        os.close(fd)


def read_bytes_if_exists(path: Path) -> bytes | None:
    """Return the content of ``path``, or None if it does not exist."""
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise PersistenceError(path, e) from e


def atomic_write_text(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` in one rename."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise PersistenceError(path, e) from e
