"""GitHub API client - data layer."""

from functools import cached_property
from pathlib import Path
from typing import Iterable, Optional

from github import Auth, Github, UnknownObjectException
from github.PullRequest import PullRequest
from github.Repository import Repository
from loguru import logger

from src.config import settings
from src.core.exceptions import (
    LocalPolicyMissingError,
    PolicyNotFoundError,
    PolicyValidationError,
)
from src.services.reviewers.policy import parse_policy
from src.services.reviewers.schemas import (
    ChangedFiles,
    FileChanges,
    Policy,
    PullRequestInfo,
    ReviewInfo,
)

GITHUB_TEAM_PREFIX = "team:"


def create_github_client() -> Github:
    """Create an authenticated GitHub client from settings.

    A plain token wins over GitHub App credentials.
    """
    if settings.github_token:
        return Github(auth=Auth.Token(settings.github_token))

    if not all([settings.github_app_id, settings.github_private_key, settings.github_installation_id]):
        raise ValueError("GitHub credentials not configured")

    private_key = settings.github_private_key.replace("\\n", "\n")
    app_auth = Auth.AppAuth(int(settings.github_app_id), private_key)
    installation_auth = app_auth.get_installation_auth(int(settings.github_installation_id))

    logger.info("GitHub App client initialized")
    return Github(auth=installation_auth)


class GitHubSession:
    """Everything needed to talk to GitHub about one pull request.

    Created once per assignment run and passed to every call below.
    """

    def __init__(self, client: Github, owner: str, repo: str, pr_number: int) -> None:
        self.client = client
        self.owner = owner
        self.repo = repo
        self.pr_number = pr_number

    @classmethod
    def create(cls, owner: str, repo: str, pr_number: int) -> "GitHubSession":
        return cls(create_github_client(), owner, repo, pr_number)

    @cached_property
    def repository(self) -> Repository:
        return self.client.get_repo(f"{self.owner}/{self.repo}")

    @cached_property
    def pull_request(self) -> PullRequest:
        return self.repository.get_pull(self.pr_number)

    def reset(self) -> None:
        """Forget fetched repository and PR objects."""
        self.__dict__.pop("repository", None)
        self.__dict__.pop("pull_request", None)

    def close(self) -> None:
        self.reset()
        self.client.close()

    def __enter__(self) -> "GitHubSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"GitHubSession({self.owner}/{self.repo}#{self.pr_number})"


def has_team_prefix(individual_or_team: str) -> bool:
    return individual_or_team.startswith(GITHUB_TEAM_PREFIX)


def team_with_prefix_to_team_slug(team_with_prefix: str) -> str:
    return team_with_prefix[len(GITHUB_TEAM_PREFIX):]


def team_slug_to_team_with_prefix(team_slug: str) -> str:
    return f"{GITHUB_TEAM_PREFIX}{team_slug}"


def partition_teams(reviewers: Iterable[str]) -> tuple[list[str], list[str]]:
    """Split reviewers into (individuals, team slugs)."""
    individuals = []
    team_slugs = []
    for reviewer in reviewers:
        if has_team_prefix(reviewer):
            team_slugs.append(team_with_prefix_to_team_slug(reviewer))
        else:
            individuals.append(reviewer)
    return individuals, team_slugs


def get_pull_request_info(session: GitHubSession) -> PullRequestInfo:
    """Fetch the PR attributes the engine needs."""
    pr = session.pull_request
    return PullRequestInfo(
        number=pr.number,
        author=pr.user.login if pr.user else "",
        title=pr.title or "",
        is_draft=bool(pr.draft),
    )


def _read_local_policy(path: str) -> str:
    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        logger.debug(f"Error when reading local file: {e}")
        raise LocalPolicyMissingError(path) from e

    if not content:
        raise LocalPolicyMissingError(path)
    return content


def fetch_policy(session: GitHubSession, ref: Optional[str] = None) -> Policy:
    """Load the reviewer policy.

    Reads the local file when `use_local_config` is set, otherwise the file
    on `ref` (default: the PR's base branch).
    """
    path = settings.reviewer_config_path

    if settings.use_local_config:
        return parse_policy(_read_local_policy(path), source=path)

    ref = ref or session.pull_request.base.ref
    try:
        content = session.repository.get_contents(path, ref=ref)
    except UnknownObjectException as e:
        raise PolicyNotFoundError(path, ref) from e

    if isinstance(content, list):
        raise PolicyValidationError(f"Path {path} is a directory, not a file")

    return parse_policy(content.decoded_content.decode("utf-8"), source=f"{path}@{ref}")


def collect_file_changes(files) -> FileChanges:
    """Bucket GitHub file entries by status.

    Renames count as removing the old name and adding the new one; copies
    count as additions. Anything else that is not added/removed is treated
    as a modification.
    """
    added, removed, modified = [], [], []
    for f in files:
        if f.status in ("added", "copied"):
            added.append(f.filename)
        elif f.status == "removed":
            removed.append(f.filename)
        elif f.status == "renamed":
            if f.previous_filename:
                removed.append(f.previous_filename)
            added.append(f.filename)
        else:
            modified.append(f.filename)
    return FileChanges(added=added, removed=removed, modified=modified)


def fetch_changed_files(session: GitHubSession) -> ChangedFiles:
    """Fetch changes of the whole PR and of its last commit."""
    pr = session.pull_request
    total = collect_file_changes(pr.get_files())

    commits = list(pr.get_commits())
    if len(commits) <= 1:
        return ChangedFiles.single_commit(total)

    prev, last = commits[-2:]
    comparison = session.repository.compare(prev.sha, last.sha)
    logger.info(f"Compared last commit {last.sha[:7]} against {prev.sha[:7]}")
    return ChangedFiles(total=total, last=collect_file_changes(comparison.files))


def fetch_review_info(session: GitHubSession) -> ReviewInfo:
    """Fetch submitted reviews and pending review requests."""
    pr = session.pull_request
    states = {
        "APPROVED": [],
        "COMMENTED": [],
        "CHANGES_REQUESTED": [],
    }

    for review in pr.get_reviews():
        if review.user is None or review.state not in states:
            continue
        if review.user.login not in states[review.state]:
            states[review.state].append(review.user.login)

    users, teams = pr.get_review_requests()
    pending = [user.login for user in users]
    pending.extend(team_slug_to_team_with_prefix(team.slug) for team in teams)

    return ReviewInfo(
        pending=pending,
        approved=states["APPROVED"],
        commented=states["COMMENTED"],
        changes_requested=states["CHANGES_REQUESTED"],
    )


def assign_reviewers(session: GitHubSession, reviewers: list[str]) -> None:
    """Request reviews from individuals and `team:`-prefixed teams."""
    individuals, team_slugs = partition_teams(reviewers)
    session.pull_request.create_review_request(
        reviewers=individuals,
        team_reviewers=team_slugs,
    )
    logger.info(f"Requested {len(individuals)} reviewers and {len(team_slugs)} teams")


def remove_reviewers(session: GitHubSession, reviewers: list[str]) -> None:
    """Withdraw pending review requests."""
    individuals, team_slugs = partition_teams(reviewers)
    session.pull_request.delete_review_request(
        reviewers=individuals,
        team_reviewers=team_slugs,
    )
    logger.info(f"Removed {len(individuals)} reviewers and {len(team_slugs)} teams")


def fetch_team_members(session: GitHubSession, team_slug: str) -> list[str]:
    organization = session.client.get_organization(session.owner)
    team = organization.get_team_by_slug(team_slug)
    return [member.login for member in team.get_members(role="all")]


def filter_out_reviewers_by_individuals(
    session: GitHubSession,
    individuals_and_teams: list[str],
    individuals_to_exclude: list[str],
) -> list[str]:
    """Drop excluded individuals, and teams any of them belong to."""
    excluded = set(individuals_to_exclude)
    results = [
        reviewer
        for reviewer in individuals_and_teams
        if not has_team_prefix(reviewer) and reviewer not in excluded
    ]

    for team in individuals_and_teams:
        if not has_team_prefix(team):
            continue

        members = fetch_team_members(session, team_with_prefix_to_team_slug(team))
        if excluded.intersection(members):
            logger.info(f"Skipping {team}: it includes an excluded individual")
            continue
        results.append(team)

    return results
