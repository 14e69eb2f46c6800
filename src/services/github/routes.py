"""GitHub webhook and manual trigger routes."""

from fastapi import APIRouter, BackgroundTasks, Request
from loguru import logger

from src.core.schemas.responses import ApiResponse
from src.core.security import require_github_signature
from src.services.github.schemas import ManualAssignRequest, PingResponse, WebhookResponse
from src.services.github.service import handle_pull_request_event
from src.services.reviewers.schemas import AssignmentResult
from src.services.reviewers.service import assign_pull_request_reviewers

router = APIRouter()


@router.post("/webhook/github")
async def github_webhook(request: Request, background_tasks: BackgroundTasks):
    """Handle GitHub webhook events."""
    event = request.headers.get("X-GitHub-Event")
    signature = request.headers.get("X-Hub-Signature-256", "")
    delivery_id = request.headers.get("X-GitHub-Delivery")

    logger.info(f"Webhook received: event={event}, delivery={delivery_id}")

    body = await request.body()
    require_github_signature(body, signature)

    payload = await request.json()

    if event == "pull_request":
        return handle_pull_request_event(payload, background_tasks)
    elif event == "ping":
        return PingResponse(zen=payload.get("zen", ""))
    else:
        logger.info(f"Unhandled event type: {event}")
        return WebhookResponse(message=f"Event {event} not handled")


@router.post("/reviewers/assign", response_model=ApiResponse[AssignmentResult])
def assign_reviewers_manually(body: ManualAssignRequest) -> ApiResponse[AssignmentResult]:
    """Run reviewer assignment for a PR and return what was done."""
    result = assign_pull_request_reviewers(body.owner, body.repo, body.pr_number)
    return ApiResponse(data=result, message=result.message)
