"""Request gating, default reviewers and random sampling."""

import random
from typing import Iterable, Optional

from src.core.exceptions import ConfigurationMissingError
from src.core.logging import get_logger
from src.services.reviewers.groups import replace_groups_with_individuals
from src.services.reviewers.schemas import Policy, PolicyOptions

logger = get_logger("reviewers.selection")


def should_request_review(
    title: Optional[str],
    is_draft: bool,
    options: Optional[PolicyOptions] = None,
) -> bool:
    """Decide whether reviews should be requested for a PR at all.

    Drafts are skipped unless `ignore_draft` is turned off, and titles
    containing any of `ignored_keywords` (case-sensitive) are skipped.
    """
    options = options or PolicyOptions()

    if options.ignore_draft and is_draft:
        logger.info("Pull request is a draft; skipping review request")
        return False

    title = title or ""
    ignored = [keyword for keyword in options.ignored_keywords if keyword in title]
    if ignored:
        logger.info(f"Title contains ignored keywords: {', '.join(ignored)}")
        return False

    return True


def fetch_default_reviewers(policy: Policy, excludes: Iterable[str] = ()) -> list[str]:
    """Return the fallback reviewers from `reviewers.defaults`."""
    try:
        defaults = policy.require("defaults")
    except ConfigurationMissingError as e:
        logger.info(f"{e}; no default reviewers")
        return []

    return replace_groups_with_individuals(defaults, policy, excludes)


def randomly_pick_reviewers(
    reviewers: list[str],
    options: Optional[PolicyOptions] = None,
    rng: Optional[random.Random] = None,
) -> list[str]:
    """Sample `number_of_reviewers` reviewers without replacement.

    Returns the input unchanged when the option is unset. The sample size is
    capped at the number of reviewers available.
    """
    options = options or PolicyOptions()
    if options.number_of_reviewers is None:
        return reviewers

    size = max(0, min(options.number_of_reviewers, len(reviewers)))
    rng = rng or random.Random()
    picked = rng.sample(reviewers, size)
    logger.info(f"Randomly picked {size} of {len(reviewers)} reviewers")
    return picked
