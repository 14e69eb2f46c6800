"""Core schemas for API responses."""

from src.core.schemas.responses import (
    ApiResponse,
    ErrorResponse,
    HealthResponse,
    ServiceInfoResponse,
)

__all__ = ["ApiResponse", "ErrorResponse", "HealthResponse", "ServiceInfoResponse"]
