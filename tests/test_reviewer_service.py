"""Tests for reviewer assignment orchestration."""

import random
from unittest.mock import MagicMock, patch

import pytest

from src.core.exceptions import PolicyNotFoundError
from src.services.reviewers.schemas import (
    AssignmentDecision,
    ChangedFiles,
    FileChanges,
    Policy,
    PolicyOptions,
    PullRequestInfo,
    ReviewInfo,
)
from src.services.reviewers.service import assign_pull_request_reviewers, decide_reviewers

GROUPS = {
    "backend": ["alice", "bob"],
    "docs": ["carol"],
}


def make_pr(author="alice", title="Add feature", is_draft=False) -> PullRequestInfo:
    return PullRequestInfo(number=7, author=author, title=title, is_draft=is_draft)


def modified(*filenames) -> ChangedFiles:
    return ChangedFiles.single_commit(FileChanges(modified=list(filenames)))


class TestDecideReviewers:
    """Tests for decide_reviewers function."""

    def test_ignored_pr(self):
        """Drafts produce no request at all."""
        policy = Policy(file_rules={"**": ["bob"]})

        decision = decide_reviewers(policy, make_pr(is_draft=True), modified("a.py"))

        assert decision.should_request is False
        assert decision.to_request == []

    def test_combines_files_author_and_teammates(self):
        """Reviewers from every source are merged without duplicates or the author."""
        policy = Policy(
            groups=GROUPS,
            file_rules={"src/**": ["backend", "dave"]},
            author_rules={"backend": ["carol", "dave"]},
            options=PolicyOptions(enable_group_assignment=True),
        )

        decision = decide_reviewers(policy, make_pr(author="alice"), modified("src/app.py"))

        assert decision.should_request is True
        assert decision.to_request == ["bob", "dave", "carol"]

    def test_falls_back_to_defaults(self):
        """Defaults are used when no rule matches."""
        policy = Policy(
            groups=GROUPS,
            file_rules={"docs/**": ["docs"]},
            defaults=["backend"],
        )

        decision = decide_reviewers(policy, make_pr(author="alice"), modified("src/app.py"))

        assert decision.to_request == ["bob"]
        assert decision.reason == "Fell back to the default reviewers"

    def test_nothing_matched(self):
        """No rules and no defaults means nobody to request."""
        decision = decide_reviewers(Policy(), make_pr(), modified("src/app.py"))

        assert decision == AssignmentDecision(reason="No reviewers matched")

    def test_sampling(self):
        """number_of_reviewers limits the request to a random subset."""
        policy = Policy(
            file_rules={"**": ["bob", "carol", "dave", "erin"]},
            options=PolicyOptions(number_of_reviewers=2),
        )

        decision = decide_reviewers(policy, make_pr(), modified("a.py"), rng=random.Random(3))

        assert len(decision.to_request) == 2
        assert set(decision.to_request) <= {"bob", "carol", "dave", "erin"}

    @pytest.mark.parametrize("seed", range(10))
    def test_sampling_counts_reviewers_already_involved(self, seed):
        """Only the slots left after pending reviewers are sampled."""
        policy = Policy(
            file_rules={"**": ["bob", "carol", "dave", "erin"]},
            options=PolicyOptions(number_of_reviewers=3),
        )
        review_info = ReviewInfo(pending=["bob", "carol"])

        decision = decide_reviewers(
            policy, make_pr(), modified("a.py"), review_info, rng=random.Random(seed)
        )

        assert len(decision.to_request) == 1
        assert decision.to_request[0] in {"dave", "erin"}

    def test_sampling_slots_already_filled(self):
        """Nobody new is requested once enough reviewers are on the PR."""
        policy = Policy(
            file_rules={"**": ["bob", "carol", "dave", "erin"]},
            options=PolicyOptions(number_of_reviewers=2),
        )
        review_info = ReviewInfo(pending=["bob"], approved=["carol"])

        decision = decide_reviewers(policy, make_pr(), modified("a.py"), review_info)

        assert decision.to_request == []

    def test_skips_pending_and_approved(self):
        """Reviewers already requested or who approved are not requested again."""
        policy = Policy(file_rules={"**": ["bob", "carol", "dave"]})
        review_info = ReviewInfo(pending=["bob"], approved=["carol"], commented=["dave"])

        decision = decide_reviewers(policy, make_pr(), modified("a.py"), review_info)

        assert decision.to_request == ["dave"]

    def test_reverted_only_reviewers_are_withdrawn(self):
        """Pending reviewers wanted only for reverted files are withdrawn."""
        policy = Policy(file_rules={"docs/**": ["carol"], "src/**": ["bob"]})
        changed_files = ChangedFiles(
            total=FileChanges(modified=["src/app.py"]),
            last=FileChanges(modified=["docs/guide.md", "src/app.py"]),
        )
        review_info = ReviewInfo(pending=["carol"])

        decision = decide_reviewers(policy, make_pr(), changed_files, review_info)

        assert decision.to_request == ["bob"]
        assert decision.to_remove == ["carol"]

    def test_reverted_reviewer_still_wanted_elsewhere(self):
        """A reviewer still matched by the PR diff is kept."""
        policy = Policy(file_rules={"docs/**": ["carol"], "**/*.md": ["carol"]})
        changed_files = ChangedFiles(
            total=FileChanges(modified=["README.md"]),
            last=FileChanges(modified=["docs/guide.md"]),
        )
        review_info = ReviewInfo(pending=["carol"])

        decision = decide_reviewers(policy, make_pr(), changed_files, review_info)

        assert decision.to_remove == []

    def test_reverted_reviewers_not_requested(self):
        """Reviewers wanted only for reverted files are not newly requested."""
        policy = Policy(file_rules={"docs/**": ["carol"]}, defaults=["erin"])
        changed_files = ChangedFiles(
            total=FileChanges(modified=["src/app.py"]),
            last=FileChanges(modified=["docs/guide.md"]),
        )

        decision = decide_reviewers(policy, make_pr(), changed_files)

        assert decision.to_request == ["erin"]

    def test_never_requests_author(self):
        """The author is excluded from every source."""
        policy = Policy(
            groups=GROUPS,
            file_rules={"**": ["backend"]},
            author_rules={"alice": ["alice", "backend"]},
            defaults=["alice"],
            options=PolicyOptions(enable_group_assignment=True),
        )

        decision = decide_reviewers(policy, make_pr(author="alice"), modified("a.py"))

        assert "alice" not in decision.to_request


class TestAssignPullRequestReviewers:
    """Tests for assign_pull_request_reviewers function."""

    def _patch(self, name, **kwargs):
        return patch(f"src.services.reviewers.service.{name}", **kwargs)

    def test_no_policy(self):
        """A missing policy ends the run without touching the PR."""
        with (
            self._patch("GitHubSession") as mock_session_cls,
            self._patch("fetch_policy", side_effect=PolicyNotFoundError(".github/x.yml", "main")),
            self._patch("assign_reviewers") as mock_assign,
        ):
            result = assign_pull_request_reviewers("acme", "app", 7)

        assert result.message == "No reviewer policy found"
        assert result.requested == []
        mock_assign.assert_not_called()
        mock_session_cls.create.return_value.__exit__.assert_called_once()

    def test_ignored_pr_skips_fetching_changes(self):
        """The request gate runs before any diff is fetched."""
        with (
            self._patch("GitHubSession"),
            self._patch("fetch_policy", return_value=Policy(file_rules={"**": ["bob"]})),
            self._patch("get_pull_request_info", return_value=make_pr(is_draft=True)),
            self._patch("fetch_changed_files") as mock_changed,
        ):
            result = assign_pull_request_reviewers("acme", "app", 7)

        assert result.message == "Matched the ignoring rules"
        mock_changed.assert_not_called()

    def test_requests_and_withdraws(self):
        """The decision is applied to the PR through the session."""
        policy = Policy(file_rules={"docs/**": ["carol"], "src/**": ["bob", "team:core"]})
        changed_files = ChangedFiles(
            total=FileChanges(modified=["src/app.py"]),
            last=FileChanges(modified=["docs/guide.md", "src/app.py"]),
        )

        with (
            self._patch("GitHubSession") as mock_session_cls,
            self._patch("fetch_policy", return_value=policy),
            self._patch("get_pull_request_info", return_value=make_pr()),
            self._patch("fetch_changed_files", return_value=changed_files),
            self._patch("fetch_review_info", return_value=ReviewInfo(pending=["carol"])),
            self._patch(
                "filter_out_reviewers_by_individuals",
                side_effect=lambda session, reviewers, excluded: reviewers,
            ) as mock_filter,
            self._patch("assign_reviewers") as mock_assign,
            self._patch("remove_reviewers") as mock_remove,
        ):
            session = MagicMock()
            mock_session_cls.create.return_value.__enter__.return_value = session

            result = assign_pull_request_reviewers("acme", "app", 7)

        mock_session_cls.create.assert_called_once_with("acme", "app", 7)
        mock_filter.assert_called_once_with(session, ["bob", "team:core"], ["alice"])
        mock_assign.assert_called_once_with(session, ["bob", "team:core"])
        mock_remove.assert_called_once_with(session, ["carol"])
        assert result.pr == "acme/app#7"
        assert result.requested == ["bob", "team:core"]
        assert result.removed == ["carol"]

    def test_nothing_new_to_request(self):
        """No review request is sent when everyone is already pending."""
        with (
            self._patch("GitHubSession"),
            self._patch("fetch_policy", return_value=Policy(file_rules={"**": ["bob"]})),
            self._patch("get_pull_request_info", return_value=make_pr()),
            self._patch("fetch_changed_files", return_value=modified("a.py")),
            self._patch("fetch_review_info", return_value=ReviewInfo(pending=["bob"])),
            self._patch("filter_out_reviewers_by_individuals", return_value=[]),
            self._patch("assign_reviewers") as mock_assign,
            self._patch("remove_reviewers") as mock_remove,
        ):
            result = assign_pull_request_reviewers("acme", "app", 7)

        mock_assign.assert_not_called()
        mock_remove.assert_not_called()
        assert result.requested == []
