"""Pydantic schemas for the reviewer assignment engine."""

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from src.core.exceptions import ConfigurationMissingError, InvalidPolicyShapeError
from src.core.logging import get_logger

logger = get_logger("reviewers.schemas")

DEFAULT_IGNORED_KEYWORDS = ["DO NOT REVIEW"]

# Policy attribute -> key used in the YAML document
DOCUMENT_KEYS = {
    "groups": "groups",
    "file_rules": "files",
    "author_rules": "per_author",
    "defaults": "defaults",
    "options": "options",
}


def _as_reviewer_list(value: Any, key: str) -> list[str]:
    """Coerce a YAML reviewer list into identifier strings.

    YAML turns an empty entry into None and numeric logins into ints,
    both of which are accepted here.
    """
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise InvalidPolicyShapeError(key, "a list", value)
    return [str(item) for item in value if item is not None]


def _as_reviewer_mapping(value: Any, key: str) -> dict[str, list[str]]:
    """Coerce a mapping of name -> reviewer list, dropping malformed entries."""
    if not isinstance(value, dict):
        raise InvalidPolicyShapeError(key, "a mapping", value)

    mapping = {}
    for name, reviewers in value.items():
        try:
            mapping[str(name)] = _as_reviewer_list(reviewers, f"{key}.{name}")
        except InvalidPolicyShapeError as e:
            logger.warning(f"{e}; ignoring entry")
    return mapping


class PolicyOptions(BaseModel):
    """Behaviour switches from the `options` section of the policy."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    enable_group_assignment: bool = False
    last_files_match_only: bool = False
    ignore_draft: bool = True
    ignored_keywords: list[str] = Field(default_factory=lambda: list(DEFAULT_IGNORED_KEYWORDS))
    number_of_reviewers: int | None = None

    @field_validator("ignored_keywords", mode="before")
    @classmethod
    def _default_keywords(cls, value: Any) -> Any:
        if value is None:
            return list(DEFAULT_IGNORED_KEYWORDS)
        if isinstance(value, str):
            return [value]
        if isinstance(value, (list, tuple)):
            return [str(keyword) for keyword in value if keyword is not None]
        return value

    @classmethod
    def from_section(cls, section: dict) -> "PolicyOptions":
        """Validate an `options` section, falling back to the default of any malformed value."""
        try:
            return cls.model_validate(section)
        except PydanticValidationError as e:
            invalid = {}
            for error in e.errors():
                if error["loc"]:
                    invalid.setdefault(error["loc"][0], error["msg"])

        for name, message in invalid.items():
            shape_error = InvalidPolicyShapeError(f"options.{name}", "a valid value", section.get(name))
            logger.warning(f"{shape_error} ({message}); using the default")
        return cls.model_validate({k: v for k, v in section.items() if k not in invalid})


class Policy(BaseModel):
    """Reviewer assignment policy.

    Built once per run and never mutated by the engine. Sections that are
    absent stay None so matchers can tell "not configured" apart from
    "configured but empty".
    """

    model_config = ConfigDict(frozen=True)

    groups: dict[str, list[str]] = Field(default_factory=dict)
    file_rules: dict[str, list[str]] | None = None
    author_rules: dict[str, list[str]] | None = None
    defaults: list[str] | None = None
    options: PolicyOptions = Field(default_factory=PolicyOptions)

    @classmethod
    def from_document(cls, document: Any) -> "Policy":
        """Build a policy from the parsed YAML document.

        Expected shape:
            reviewers:
              defaults: [...]
              groups: {name: [...]}
              per_author: {author_or_group: [...]}
            files:
              'glob': [...]
            options: {...}
        """
        if document is None:
            document = {}
        if not isinstance(document, dict):
            raise InvalidPolicyShapeError("policy", "a mapping", document)

        reviewers = document.get("reviewers") or {}
        if not isinstance(reviewers, dict):
            logger.warning(str(InvalidPolicyShapeError("reviewers", "a mapping", reviewers)))
            reviewers = {}

        fields = {
            "groups": reviewers.get("groups"),
            "author_rules": reviewers.get("per_author"),
            "defaults": reviewers.get("defaults"),
            "file_rules": document.get("files"),
            "options": document.get("options"),
        }
        return cls(**{name: value for name, value in fields.items() if value is not None})

    @field_validator("groups", mode="before")
    @classmethod
    def _lenient_groups(cls, value: Any) -> Any:
        if value is None:
            return {}
        try:
            return _as_reviewer_mapping(value, "groups")
        except InvalidPolicyShapeError as e:
            logger.warning(f"{e}; ignoring groups")
            return {}

    @field_validator("file_rules", "author_rules", mode="before")
    @classmethod
    def _lenient_rules(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return None
        key = DOCUMENT_KEYS[info.field_name]
        try:
            return _as_reviewer_mapping(value, key)
        except InvalidPolicyShapeError as e:
            logger.warning(f"{e}; treating it as not configured")
            return None

    @field_validator("defaults", mode="before")
    @classmethod
    def _lenient_defaults(cls, value: Any) -> Any:
        if value is None:
            return None
        try:
            return _as_reviewer_list(value, "defaults")
        except InvalidPolicyShapeError as e:
            logger.warning(f"{e}; treating it as not configured")
            return None

    @field_validator("options", mode="before")
    @classmethod
    def _lenient_options(cls, value: Any) -> Any:
        if value is None:
            return PolicyOptions()
        if isinstance(value, PolicyOptions):
            return value
        if not isinstance(value, dict):
            logger.warning(f"{InvalidPolicyShapeError('options', 'a mapping', value)}; using defaults")
            return PolicyOptions()
        return PolicyOptions.from_section(value)

    @model_validator(mode="after")
    def _reject_nested_groups(self) -> "Policy":
        # Groups expand a single level, so members must be individuals
        for name, members in self.groups.items():
            nested = [member for member in members if member in self.groups]
            if nested:
                raise ValueError(
                    f'Group "{name}" references other groups ({", ".join(nested)}); '
                    "groups may only list individuals"
                )
        return self

    def require(self, section: str) -> Any:
        """Return a configured section or raise ConfigurationMissingError."""
        value = getattr(self, section)
        if value is None:
            raise ConfigurationMissingError(DOCUMENT_KEYS[section])
        return value


class FileChanges(BaseModel):
    """Filenames touched by a diff, split by change kind."""

    model_config = ConfigDict(frozen=True)

    added: list[str] = []
    removed: list[str] = []
    modified: list[str] = []

    @property
    def all(self) -> list[str]:
        return [*self.added, *self.removed, *self.modified]

    @property
    def added_or_removed(self) -> list[str]:
        return [*self.added, *self.removed]


class ChangedFiles(BaseModel):
    """Changes across the whole PR (`total`) and in its latest commit (`last`)."""

    model_config = ConfigDict(frozen=True)

    total: FileChanges = FileChanges()
    last: FileChanges = FileChanges()

    @classmethod
    def single_commit(cls, total: FileChanges) -> "ChangedFiles":
        """A PR with one commit: the last commit is the whole PR."""
        return cls(total=total, last=total)

    @property
    def reverted(self) -> list[str]:
        """Files changed in the last commit that no longer differ from the base."""
        in_total = set(self.total.all)
        return [filename for filename in self.last.all if filename not in in_total]


class ReviewInfo(BaseModel):
    """Current review state of a PR."""

    pending: list[str] = []
    approved: list[str] = []
    commented: list[str] = []
    changes_requested: list[str] = []


class PullRequestInfo(BaseModel):
    """The PR attributes the engine looks at."""

    number: int
    author: str
    title: str = ""
    is_draft: bool = False

    @classmethod
    def from_payload(cls, payload: dict) -> "PullRequestInfo":
        """Build from a `pull_request` webhook/REST payload."""
        return cls(
            number=payload.get("number", 0),
            author=(payload.get("user") or {}).get("login", ""),
            title=payload.get("title") or "",
            is_draft=bool(payload.get("draft", False)),
        )


class ReviewerClassification(BaseModel):
    """File-rule matches split into actionable buckets."""

    matched: list[str] = []  # rules matching any file in the last commit
    must_be_added: list[str] = []  # added or removed in the last commit
    should_be_added: list[str] = []  # modified in the last commit
    could_be_removed: list[str] = []  # reverted in the last commit


class AssignmentDecision(BaseModel):
    """What the orchestrator should do on the platform."""

    should_request: bool = True
    to_request: list[str] = []
    to_remove: list[str] = []
    reason: str = ""


class AssignmentResult(BaseModel):
    """Result of running an assignment against a PR."""

    success: bool = True
    pr: str
    requested: list[str] = []
    removed: list[str] = []
    message: str = ""
