"""Reviewer identification from the PR author."""

from src.core.exceptions import ConfigurationMissingError
from src.core.logging import get_logger
from src.services.reviewers.groups import dedupe, replace_groups_with_individuals
from src.services.reviewers.schemas import Policy

logger = get_logger("reviewers.author_rules")


def _rule_matches_author(rule_key: str, author: str, policy: Policy) -> bool:
    """A rule key matches the author directly or through a group."""
    if rule_key == author:
        return True
    return author in replace_groups_with_individuals([rule_key], policy)


def identify_reviewers_by_author(author: str, policy: Policy) -> list[str]:
    """Return reviewers configured in `reviewers.per_author` for the author.

    Rule keys may be group names, so several rules can match one author;
    their reviewers are combined. The author is never returned.
    """
    try:
        author_rules = policy.require("author_rules")
    except ConfigurationMissingError as e:
        logger.info(f"{e}; returning no reviewers for the author")
        return []

    matching_keys = [key for key in author_rules if _rule_matches_author(key, author, policy)]
    if matching_keys:
        logger.info(f"Author {author} matched rules: {', '.join(matching_keys)}")

    reviewers = [
        reviewer
        for key in matching_keys
        for reviewer in replace_groups_with_individuals(author_rules[key], policy)
    ]
    return [reviewer for reviewer in dedupe(reviewers) if reviewer != author]
