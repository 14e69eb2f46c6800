"""Reviewer Assigner - FastAPI entry point."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from github import GithubException

from src.config import settings
from src.core.exceptions import ApiException, ExternalServiceError
from src.core.logging import get_logger
from src.core.schemas.responses import (
    SERVICE_VERSION,
    ErrorResponse,
    HealthResponse,
    ServiceInfoResponse,
)
from src.services.github.routes import router as github_router

logger = get_logger("main")

app = FastAPI(
    title="Reviewer Assigner",
    description="Requests pull request reviewers from a declarative policy",
    version=SERVICE_VERSION,
)


def _error_response(exc: ApiException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.message,
            details=exc.details if exc.details else None,
        ).model_dump(),
    )


@app.exception_handler(ApiException)
async def api_exception_handler(request: Request, exc: ApiException) -> JSONResponse:
    """Handle custom API exceptions and return structured error response."""
    logger.warning(f"API error: {exc.message} (status={exc.status_code})")
    return _error_response(exc)


@app.exception_handler(GithubException)
async def github_exception_handler(request: Request, exc: GithubException) -> JSONResponse:
    """Report GitHub API failures as 502s."""
    message = exc.data.get("message") if isinstance(exc.data, dict) else None
    logger.error(f"GitHub API error: status={exc.status} message={message}")
    return _error_response(ExternalServiceError("GitHub", message or f"status {exc.status}"))


# Include routes
app.include_router(github_router, prefix="/api")


@app.get("/", response_model=ServiceInfoResponse)
async def root() -> ServiceInfoResponse:
    """Root endpoint."""
    return ServiceInfoResponse(
        policy_path=settings.reviewer_config_path,
        policy_source="local" if settings.use_local_config else "repository",
    )


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse()


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting Reviewer Assigner on {settings.host}:{settings.port}")
    uvicorn.run(
        "src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
