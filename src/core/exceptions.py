"""Custom exceptions for the application."""


class ApiException(Exception):
    """Base exception for all API errors."""

    def __init__(
        self,
        status_code: int,
        message: str,
        details: dict | None = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class NotFoundError(ApiException):
    """Resource not found exception."""

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(404, f"{resource} not found: {identifier}")


class UnauthorizedError(ApiException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(401, message)


class ValidationError(ApiException):
    """Request validation error."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(422, message, details)


class ExternalServiceError(ApiException):
    """External service (GitHub) error."""

    def __init__(self, service: str, message: str) -> None:
        super().__init__(502, f"{service} error: {message}")


class SignatureVerificationError(UnauthorizedError):
    """Webhook signature verification failed."""

    def __init__(self, source: str = "webhook") -> None:
        super().__init__(f"Invalid {source} signature")


class PolicyNotFoundError(NotFoundError):
    """Reviewer policy file does not exist on the requested ref."""

    def __init__(self, path: str, ref: str | None = None) -> None:
        identifier = f"{path}@{ref}" if ref else path
        super().__init__("Reviewer policy", identifier)
        self.path = path


LOCAL_FILE_MISSING = "Local file missing"


class LocalPolicyMissingError(ApiException):
    """Local policy file is missing or empty."""

    def __init__(self, path: str) -> None:
        super().__init__(404, LOCAL_FILE_MISSING, {"path": path})
        self.path = path


class PolicyValidationError(ValidationError):
    """Reviewer policy document could not be turned into a Policy."""


class ConfigurationMissingError(Exception):
    """A policy feature is not configured.

    Never surfaced to callers: matchers catch it and return an empty result.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f'A "{key}" key does not exist in config')


class InvalidPolicyShapeError(Exception):
    """A policy section has the wrong type.

    Treated the same as a missing section.
    """

    def __init__(self, key: str, expected: str, actual: object) -> None:
        self.key = key
        super().__init__(
            f'"{key}" should be {expected}, got {type(actual).__name__}'
        )
