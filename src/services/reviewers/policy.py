"""Reviewer policy parsing."""

import yaml
from pydantic import ValidationError as PydanticValidationError

from src.core.exceptions import InvalidPolicyShapeError, PolicyValidationError
from src.core.logging import get_logger
from src.services.reviewers.schemas import Policy

logger = get_logger("reviewers.policy")


def parse_policy(content: str, source: str = "<string>") -> Policy:
    """Parse a YAML policy document.

    Args:
        content: Raw YAML text
        source: Where the text came from, for error messages

    Returns:
        The parsed Policy

    Raises:
        PolicyValidationError: If the text is not YAML, is not a mapping,
            or describes an invalid policy (e.g. nested groups)
    """
    try:
        document = yaml.safe_load(content)
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse {source}: {e}")
        raise PolicyValidationError(f"{source} is not valid YAML", {"error": str(e)}) from e

    try:
        policy = Policy.from_document(document)
    except InvalidPolicyShapeError as e:
        raise PolicyValidationError(f"Invalid policy in {source}: {e}") from e
    except PydanticValidationError as e:
        errors = [err["msg"] for err in e.errors()]
        raise PolicyValidationError(f"Invalid policy in {source}", {"errors": errors}) from e

    logger.debug(
        f"Loaded policy from {source}: {len(policy.groups)} groups, "
        f"{len(policy.file_rules or {})} file rules, "
        f"{len(policy.author_rules or {})} author rules"
    )
    return policy
