"""Workflows package."""

from repo_atlas.workflows.clone import CloneResult, CloneWorkflow
from repo_atlas.workflows.collections import CollectionsWorkflow
from repo_atlas.workflows.listing import ListedRepo, ListingWorkflow, PathBase
from repo_atlas.workflows.refresh import (
    CollectionOutcome,
    OutcomeStatus,
    RefreshOrchestrator,
    RefreshReport,
)

__all__ = [
    "CloneResult",
    "CloneWorkflow",
    "CollectionOutcome",
    "CollectionsWorkflow",
    "ListedRepo",
    "ListingWorkflow",
    "OutcomeStatus",
    "PathBase",
    "RefreshOrchestrator",
    "RefreshReport",
]
