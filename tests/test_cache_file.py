"""Tests for CacheFile persistence and file locking."""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path

import pytest

from repo_atlas.entities import RepoCacheEntry
from repo_atlas.errors import LockError
from repo_atlas.memory import Cache, CacheFile, CollectionReposCache, exclusive_lock
from repo_atlas.memory.locking import atomic_write_text, lock_path_for


def _repos(*paths: str) -> CollectionReposCache:
    return CollectionReposCache(RepoCacheEntry(relative_path=Path(p)) for p in paths)


class TestLoad:
    def test_absent_file_is_empty_cache(self, tmp_path: Path) -> None:
        cache = CacheFile(tmp_path / "cache.json").load_if_needed()
        assert len(cache) == 0

    def test_blank_file_is_empty_cache(self, tmp_path: Path) -> None:
        path = tmp_path / "cache.json"
        path.write_text("  \n")
        assert len(CacheFile(path).load_if_needed()) == 0

    def test_malformed_file_resets_with_warning(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = tmp_path / "cache.json"
        path.write_text("{broken")
        with caplog.at_level(logging.WARNING, logger="repo_atlas.memory.cache_file"):
            cache = CacheFile(path).load_if_needed()
        assert len(cache) == 0
        assert "Cache will be reset due to invalid data" in caplog.text

    def test_loaded_once(self, tmp_path: Path) -> None:
        path = tmp_path / "cache.json"
        cache_file = CacheFile(path)
        first = cache_file.load_if_needed()
        path.write_text(Cache({"w": _repos("a/.git")}).to_json())
        assert cache_file.load_if_needed() is first

    def test_save_then_load(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "cache.json"
        CacheFile(path).save(Cache({"w": _repos("b/.git", "a/.git")}))

        loaded = CacheFile(path).load_if_needed()
        assert [e.key for e in loaded.get("w")] == ["a/.git", "b/.git"]
        assert lock_path_for(path).exists()


class TestUpdate:
    def test_written_on_success(self, tmp_path: Path) -> None:
        path = tmp_path / "cache.json"
        cache_file = CacheFile(path)
        with cache_file.update() as cache:
            cache.replace("w", _repos("a/.git"))

        assert Cache.from_json(path.read_bytes()).names() == ["w"]
        assert cache_file.load_if_needed().names() == ["w"]

    def test_nothing_written_on_error(self, tmp_path: Path) -> None:
        path = tmp_path / "cache.json"
        CacheFile(path).save(Cache({"w": _repos("a/.git")}))
        before = path.read_bytes()

        with pytest.raises(RuntimeError), CacheFile(path).update() as cache:
            cache.remove("w")
            raise RuntimeError("boom")

        assert path.read_bytes() == before

    def test_reads_fresh_content(self, tmp_path: Path) -> None:
        path = tmp_path / "cache.json"
        cache_file = CacheFile(path)
        cache_file.load_if_needed()
        CacheFile(path).save(Cache({"other": _repos("x/.git")}))

        with cache_file.update() as cache:
            cache.replace("w", _repos("a/.git"))

        assert Cache.from_json(path.read_bytes()).names() == ["other", "w"]

    def test_lock_released_after_error(self, tmp_path: Path) -> None:
        path = tmp_path / "cache.json"
        with pytest.raises(RuntimeError), CacheFile(path).update():
            raise RuntimeError("boom")
        # Would block forever if the lock were still held.
        with CacheFile(path).update():
            pass


class TestLocking:
    def test_lock_excludes_other_holders(self, tmp_path: Path) -> None:
        path = tmp_path / "cache.json"
        events: list[str] = []

        def contender() -> None:
            with exclusive_lock(path):
                events.append("contender")

        with exclusive_lock(path):
            thread = threading.Thread(target=contender)
            thread.start()
            time.sleep(0.2)
            events.append("holder")
        thread.join(timeout=5)

        assert events == ["holder", "contender"]

    def test_unusable_lock_location(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("")
        with pytest.raises(LockError), exclusive_lock(blocker / "cache.json"):
            pass

    def test_atomic_write_leaves_no_temp_files(self, tmp_path: Path) -> None:
        path = tmp_path / "data.json"
        atomic_write_text(path, "one")
        atomic_write_text(path, "two")
        assert path.read_text() == "two"
        assert [p.name for p in tmp_path.iterdir()] == ["data.json"]
