"""Reviewer service - orchestration layer."""

import random
from typing import Optional

from src.core.exceptions import PolicyNotFoundError
from src.core.logging import get_logger
from src.services.github.client import (
    GitHubSession,
    assign_reviewers,
    fetch_changed_files,
    fetch_policy,
    fetch_review_info,
    filter_out_reviewers_by_individuals,
    get_pull_request_info,
    remove_reviewers,
)
from src.services.reviewers.author_rules import identify_reviewers_by_author
from src.services.reviewers.file_rules import identify_reviewers_by_changed_files
from src.services.reviewers.groups import dedupe, fetch_other_group_members
from src.services.reviewers.schemas import (
    AssignmentDecision,
    AssignmentResult,
    ChangedFiles,
    Policy,
    PolicyOptions,
    PullRequestInfo,
    ReviewInfo,
)
from src.services.reviewers.selection import (
    fetch_default_reviewers,
    randomly_pick_reviewers,
    should_request_review,
)

logger = get_logger("reviewers.service")


def _reverted_only_reviewers(
    policy: Policy,
    could_be_removed: list[str],
    changed_files: ChangedFiles,
    still_wanted: list[str],
    author: str,
) -> list[str]:
    """Reviewers matched only because of files the last commit reverted."""
    if not could_be_removed:
        return []

    # Reviewers whose rules still match something in the PR diff
    whole_pr = identify_reviewers_by_changed_files(
        policy, ChangedFiles.single_commit(changed_files.total), excludes=[author]
    )
    wanted = set(still_wanted)
    wanted.update(whole_pr.must_be_added)
    wanted.update(whole_pr.should_be_added)

    return [reviewer for reviewer in could_be_removed if reviewer not in wanted]


def _remaining_slots(options: PolicyOptions, already_involved: int) -> PolicyOptions:
    # Reviewers already on the PR count towards number_of_reviewers
    if options.number_of_reviewers is None:
        return options
    remaining = max(0, options.number_of_reviewers - already_involved)
    return options.model_copy(update={"number_of_reviewers": remaining})


def decide_reviewers(
    policy: Policy,
    pull_request: PullRequestInfo,
    changed_files: ChangedFiles,
    review_info: Optional[ReviewInfo] = None,
    rng: Optional[random.Random] = None,
) -> AssignmentDecision:
    """Work out which reviewers to request and withdraw for a PR.

    Pure: every input is already fetched. Reviewers matched only through
    files the last commit reverted are never requested. When `review_info`
    is given, reviewers already pending or approved are not requested again,
    and pending reviewers matched only through reverted files are withdrawn.
    Matching reviewers already on the PR count towards `number_of_reviewers`,
    so only the remaining slots are sampled.
    """
    author = pull_request.author

    if not should_request_review(pull_request.title, pull_request.is_draft, policy.options):
        return AssignmentDecision(should_request=False, reason="Matched the ignoring rules")

    logger.info("Identifying reviewers based on the changed files")
    by_files = identify_reviewers_by_changed_files(policy, changed_files, excludes=[author])

    logger.info("Identifying reviewers based on the author")
    by_author = identify_reviewers_by_author(author, policy)

    logger.info("Adding other group members to reviewers if group assignment feature is on")
    teammates = fetch_other_group_members(author, policy)

    reverted_only = _reverted_only_reviewers(
        policy,
        by_files.could_be_removed,
        changed_files,
        still_wanted=[*by_author, *teammates],
        author=author,
    )

    reviewers = [
        reviewer
        for reviewer in dedupe([*by_files.matched, *by_author, *teammates])
        if reviewer not in reverted_only
    ]
    reason = "Matched reviewer rules"

    if not reviewers:
        logger.info("Matched no reviewers")
        reviewers = fetch_default_reviewers(policy, excludes=[author])
        if not reviewers:
            logger.info("No default reviewers are matched")
            reason = "No reviewers matched"
        else:
            logger.info("Falling back to the default reviewers")
            reason = "Fell back to the default reviewers"

    if review_info is None:
        reviewers = randomly_pick_reviewers(reviewers, policy.options, rng=rng)
        return AssignmentDecision(to_request=reviewers, reason=reason)

    already_involved = set(review_info.pending) | set(review_info.approved)
    candidates = [reviewer for reviewer in reviewers if reviewer not in already_involved]
    to_request = randomly_pick_reviewers(
        candidates,
        _remaining_slots(policy.options, len(reviewers) - len(candidates)),
        rng=rng,
    )

    pending = set(review_info.pending)
    to_remove = [reviewer for reviewer in reverted_only if reviewer in pending]

    return AssignmentDecision(to_request=to_request, to_remove=to_remove, reason=reason)


def assign_pull_request_reviewers(owner: str, repo: str, pr_number: int) -> AssignmentResult:
    """Fetch PR state, decide reviewers and apply the decision on GitHub."""
    pr_ref = f"{owner}/{repo}#{pr_number}"
    logger.info(f"Starting reviewer assignment: {pr_ref}")

    with GitHubSession.create(owner, repo, pr_number) as session:
        try:
            policy = fetch_policy(session)
        except PolicyNotFoundError as e:
            logger.warning(f"{e.message}; terminating the process")
            return AssignmentResult(pr=pr_ref, message="No reviewer policy found")

        pull_request = get_pull_request_info(session)

        if not should_request_review(pull_request.title, pull_request.is_draft, policy.options):
            logger.info("Matched the ignoring rules; terminating the process")
            return AssignmentResult(pr=pr_ref, message="Matched the ignoring rules")

        logger.info("Fetching changed files in the pull request")
        changed_files = fetch_changed_files(session)
        review_info = fetch_review_info(session)

        decision = decide_reviewers(policy, pull_request, changed_files, review_info)

        requested = filter_out_reviewers_by_individuals(
            session, decision.to_request, [pull_request.author]
        )
        if requested:
            logger.info(f"Requesting review to {', '.join(requested)}")
            assign_reviewers(session, requested)
        else:
            logger.info("No new reviewers to request")

        if decision.to_remove:
            logger.info(f"Withdrawing review requests from {', '.join(decision.to_remove)}")
            remove_reviewers(session, decision.to_remove)

    return AssignmentResult(
        pr=pr_ref,
        requested=requested,
        removed=decision.to_remove,
        message=decision.reason,
    )
