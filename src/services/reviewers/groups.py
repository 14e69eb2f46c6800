"""Group expansion and group co-membership."""

from typing import Iterable

from src.core.logging import get_logger
from src.services.reviewers.schemas import Policy

logger = get_logger("reviewers.groups")


def dedupe(identifiers: Iterable[str]) -> list[str]:
    """Drop repeated identifiers, keeping first occurrences in order."""
    return list(dict.fromkeys(identifiers))


def replace_groups_with_individuals(
    reviewers: Iterable[str],
    policy: Policy,
    excludes: Iterable[str] = (),
) -> list[str]:
    """Expand group names into their members.

    Names that are not groups pass through unchanged. Expansion is a single
    level; Policy rejects groups that list other groups.

    Args:
        reviewers: Individuals and/or group names
        policy: Policy holding the group definitions
        excludes: Individuals to drop from the result

    Returns:
        Deduplicated individual identifiers
    """
    excluded = set(excludes)
    individuals = []
    for reviewer in reviewers:
        members = policy.groups.get(reviewer)
        individuals.extend(members if members is not None else [reviewer])

    return [individual for individual in dedupe(individuals) if individual not in excluded]


def fetch_other_group_members(author: str, policy: Policy) -> list[str]:
    """Return the author's teammates from every group the author is in.

    Opt-in through `options.enable_group_assignment`; returns nothing
    otherwise.
    """
    if not policy.options.enable_group_assignment:
        logger.info("Group assignment feature is disabled")
        return []

    logger.info("Group assignment feature is enabled")

    belonging_groups = [name for name, members in policy.groups.items() if author in members]
    other_members = [
        member
        for name in belonging_groups
        for member in policy.groups[name]
        if member != author
    ]
    return dedupe(other_members)
