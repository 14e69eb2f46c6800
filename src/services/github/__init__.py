"""GitHub service."""

from src.services.github.client import (
    GitHubSession,
    assign_reviewers,
    fetch_changed_files,
    fetch_policy,
    fetch_review_info,
    filter_out_reviewers_by_individuals,
    remove_reviewers,
)

__all__ = [
    "GitHubSession",
    "assign_reviewers",
    "fetch_changed_files",
    "fetch_policy",
    "fetch_review_info",
    "filter_out_reviewers_by_individuals",
    "remove_reviewers",
]
