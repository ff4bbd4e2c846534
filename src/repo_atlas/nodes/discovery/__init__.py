"""Repository discovery and clone destination resolution."""

from repo_atlas.nodes.discovery.destination import detect_vcs, resolve_clone_destination
from repo_atlas.nodes.discovery.seeker import RepoSeeker, is_repository_candidate

__all__ = [
    "RepoSeeker",
    "detect_vcs",
    "is_repository_candidate",
    "resolve_clone_destination",
]
