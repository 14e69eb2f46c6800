"""Pydantic schemas for GitHub service."""

from pydantic import BaseModel

SUPPORTED_ACTIONS = ["opened", "reopened", "ready_for_review", "synchronize"]


class ManualAssignRequest(BaseModel):
    """Request schema for manually triggering reviewer assignment."""

    owner: str
    repo: str
    pr_number: int


class PingResponse(BaseModel):
    """Response schema for GitHub ping event."""

    message: str = "pong"
    zen: str = ""


class WebhookResponse(BaseModel):
    """Response schema for other webhook events."""

    message: str
    pr: str | None = None
    action: str | None = None


class ActionNotSupportedResponse(BaseModel):
    """Response schema for pull_request actions that do not trigger assignment."""

    message: str
    supported_actions: list[str] = SUPPORTED_ACTIONS
