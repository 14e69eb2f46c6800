"""Shared response schemas for API endpoints."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

SERVICE_NAME = "reviewer-assigner"
SERVICE_VERSION = "0.1.0"


class ApiResponse(BaseModel, Generic[T]):
    """Standard API success response wrapper."""

    success: bool = True
    data: T | None = None
    message: str | None = None


class ErrorResponse(BaseModel):
    """Standard API error response."""

    success: bool = False
    error: str
    details: dict | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    service: str = SERVICE_NAME


class ServiceInfoResponse(BaseModel):
    """Root endpoint response: what is running and where policies come from."""

    service: str = SERVICE_NAME
    version: str = SERVICE_VERSION
    status: str = "running"
    policy_path: str
    policy_source: str  # "local" or "repository"
