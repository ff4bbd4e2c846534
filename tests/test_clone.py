"""Tests for cloning into collections."""

from __future__ import annotations

from pathlib import Path

import pytest
from git import Repo

from repo_atlas import vcs as vcs_engines
from repo_atlas.context import AtlasContext
from repo_atlas.entities import Vcs
from repo_atlas.errors import (
    CloneError,
    CollectionNotFoundError,
    DestinationUnresolvableError,
    NoTargetCollectionError,
    VcsUndeterminedError,
)
from repo_atlas.memory import Cache
from repo_atlas.workflows import CloneWorkflow


class RecordingCloner:
    def __init__(self) -> None:
        self.calls: list[tuple[Vcs, str, Path, bool]] = []

    def __call__(self, vcs: Vcs, uri: str, dest: Path, bare: bool) -> None:
        self.calls.append((vcs, uri, dest, bare))


@pytest.fixture
def cloner() -> RecordingCloner:
    return RecordingCloner()


@pytest.fixture
def workflow(context: AtlasContext, cloner: RecordingCloner) -> CloneWorkflow:
    context.registry.add("work", Path("work"))
    return CloneWorkflow(context.registry, context.cache_file, context.home_dir, cloner=cloner)


def _cached(context: AtlasContext, name: str) -> list[str]:
    cache = Cache.from_json(context.config.cache_path.read_bytes())
    return [e.key for e in cache.get(name)]


class TestCloneWorkflow:
    def test_clone_into_named_collection(
        self, context: AtlasContext, workflow: CloneWorkflow, cloner: RecordingCloner
    ) -> None:
        result = workflow.clone("git@example.com:team/api.git", collection="work")

        dest = context.home_dir / "work" / "example.com" / "team" / "api"
        assert cloner.calls == [(Vcs.GIT, "git@example.com:team/api.git", dest, False)]
        assert result.collection == "work"
        assert result.destination == dest
        assert result.entry.relative_path == Path("example.com/team/api/.git")
        assert _cached(context, "work") == ["example.com/team/api/.git"]

    def test_bare_clone_keeps_suffix(
        self, context: AtlasContext, workflow: CloneWorkflow, cloner: RecordingCloner
    ) -> None:
        result = workflow.clone("https://example.com/team/api.git", collection="work", bare=True)
        assert cloner.calls[0][2] == context.home_dir / "work" / "example.com" / "team" / "api.git"
        assert cloner.calls[0][3] is True
        assert result.entry.relative_path == Path("example.com/team/api.git")

    def test_default_collection(self, context: AtlasContext, workflow: CloneWorkflow) -> None:
        context.registry.set_default("work")
        assert workflow.clone("https://github.com/owner/repo").collection == "work"

    def test_no_target_collection(self, workflow: CloneWorkflow, cloner: RecordingCloner) -> None:
        with pytest.raises(NoTargetCollectionError):
            workflow.clone("https://github.com/owner/repo")
        assert cloner.calls == []

    def test_unknown_collection(self, workflow: CloneWorkflow) -> None:
        with pytest.raises(CollectionNotFoundError):
            workflow.clone("https://github.com/owner/repo", collection="nope")

    def test_undetermined_vcs(self, workflow: CloneWorkflow, cloner: RecordingCloner) -> None:
        with pytest.raises(VcsUndeterminedError):
            workflow.clone("https://example.com/owner/repo", collection="work")
        workflow.clone("https://example.com/owner/repo", collection="work", vcs=Vcs.GIT)
        assert len(cloner.calls) == 1

    def test_unresolvable_destination(
        self, workflow: CloneWorkflow, cloner: RecordingCloner
    ) -> None:
        with pytest.raises(DestinationUnresolvableError):
            workflow.clone("/local/repo.git", collection="work")
        assert cloner.calls == []

    def test_failed_clone_not_cached(self, context: AtlasContext) -> None:
        context.registry.add("work", Path("work"))

        def failing(vcs: Vcs, uri: str, dest: Path, bare: bool) -> None:
            raise CloneError(uri, dest, RuntimeError("network down"))

        workflow = CloneWorkflow(
            context.registry, context.cache_file, context.home_dir, cloner=failing
        )
        with pytest.raises(CloneError):
            workflow.clone("https://github.com/owner/repo", collection="work")
        assert not context.config.cache_path.exists()

    def test_clone_adds_to_existing_cache(
        self, context: AtlasContext, workflow: CloneWorkflow
    ) -> None:
        workflow.clone("https://github.com/a/one", collection="work")
        workflow.clone("https://github.com/a/two", collection="work")
        workflow.clone("https://github.com/a/one", collection="work")
        assert _cached(context, "work") == ["github.com/a/one/.git", "github.com/a/two/.git"]


class TestGitClone:
    @pytest.fixture
    def source(self, tmp_path: Path) -> Path:
        path = tmp_path / "source"
        repo = Repo.init(path, mkdir=True)
        (path / "README").write_text("hello\n")
        repo.index.add(["README"])
        repo.index.commit("initial")
        repo.close()
        return path

    def test_clone_creates_destination(self, tmp_path: Path, source: Path) -> None:
        dest = tmp_path / "deep" / "dest"
        vcs_engines.clone(Vcs.GIT, str(source), dest)
        assert (dest / ".git").is_dir()
        assert (dest / "README").read_text() == "hello\n"
        assert vcs_engines.workdir(Vcs.GIT, dest / ".git") == dest

    def test_bare_clone(self, tmp_path: Path, source: Path) -> None:
        dest = tmp_path / "dest.git"
        vcs_engines.clone(Vcs.GIT, str(source), dest, bare=True)
        assert vcs_engines.workdir(Vcs.GIT, dest) is None

    def test_destination_is_a_file(self, tmp_path: Path, source: Path) -> None:
        dest = tmp_path / "file"
        dest.write_text("")
        with pytest.raises(CloneError):
            vcs_engines.clone(Vcs.GIT, str(source), dest)

    def test_bad_source(self, tmp_path: Path) -> None:
        with pytest.raises(CloneError):
            vcs_engines.clone(Vcs.GIT, str(tmp_path / "missing"), tmp_path / "dest")

    def test_workflow_with_real_clone(self, context: AtlasContext, source: Path) -> None:
        context.registry.add("work", Path("work"))

        def local_cloner(vcs: Vcs, uri: str, dest: Path, bare: bool) -> None:
            # Clone the local source in place of the remote URI.
            vcs_engines.clone(vcs, str(source), dest, bare=bare)

        workflow = CloneWorkflow(
            context.registry, context.cache_file, context.home_dir, cloner=local_cloner
        )
        result = workflow.clone("https://example.com/team/source.git", collection="work")

        assert (result.destination / "README").exists()
        # A refresh rediscovers exactly what the clone recorded.
        before = _cached(context, "work")
        context.refresh_orchestrator().refresh(["work"])
        assert _cached(context, "work") == before
