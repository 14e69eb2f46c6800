"""Reviewer assignment engine."""

from src.services.reviewers.author_rules import identify_reviewers_by_author
from src.services.reviewers.file_rules import identify_reviewers_by_changed_files
from src.services.reviewers.groups import fetch_other_group_members, replace_groups_with_individuals
from src.services.reviewers.policy import parse_policy
from src.services.reviewers.selection import (
    fetch_default_reviewers,
    randomly_pick_reviewers,
    should_request_review,
)

__all__ = [
    "fetch_default_reviewers",
    "fetch_other_group_members",
    "identify_reviewers_by_author",
    "identify_reviewers_by_changed_files",
    "parse_policy",
    "randomly_pick_reviewers",
    "replace_groups_with_individuals",
    "should_request_review",
]
