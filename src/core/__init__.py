"""Shared library utilities."""

from src.core.logging import get_logger
from src.core.security import require_github_signature, verify_github_signature

__all__ = [
    "get_logger",
    "require_github_signature",
    "verify_github_signature",
]
