"""GitHub service - business logic layer."""

from fastapi import BackgroundTasks

from src.core.logging import get_logger
from src.services.github.schemas import (
    SUPPORTED_ACTIONS,
    ActionNotSupportedResponse,
    WebhookResponse,
)
from src.services.reviewers.schemas import AssignmentResult, PullRequestInfo

logger = get_logger("github.service")


def handle_pull_request_event(
    payload: dict,
    background_tasks: BackgroundTasks,
) -> WebhookResponse | ActionNotSupportedResponse:
    """Handle pull_request webhook events."""
    action = payload.get("action")
    repo = payload.get("repository", {})

    owner = repo.get("owner", {}).get("login")
    repo_name = repo.get("name")
    pull_request = PullRequestInfo.from_payload(payload.get("pull_request", {}))
    pr_ref = f"{owner}/{repo_name}#{pull_request.number}"

    logger.info(f"PR event: {action} on {pr_ref}")

    if action not in SUPPORTED_ACTIONS:
        return ActionNotSupportedResponse(message=f"Action {action} not handled")

    background_tasks.add_task(run_assignment, owner, repo_name, pull_request.number)

    return WebhookResponse(message="Reviewer assignment started", pr=pr_ref, action=action)


def run_assignment(owner: str, repo: str, pr_number: int) -> AssignmentResult:
    """Run the reviewer assignment in background."""
    from src.services.reviewers.service import assign_pull_request_reviewers

    try:
        result = assign_pull_request_reviewers(owner, repo, pr_number)
        logger.info(f"Assignment completed: {result.message}")
        return result
    except Exception as e:
        logger.error(f"Assignment failed: {e}")
        raise
