"""Tests for group expansion and co-membership."""

from src.services.reviewers.groups import (
    dedupe,
    fetch_other_group_members,
    replace_groups_with_individuals,
)
from src.services.reviewers.schemas import Policy, PolicyOptions

GROUPS = {
    "backend": ["alice", "bob"],
    "frontend": ["bob", "carol"],
    "empty": [],
}


class TestReplaceGroupsWithIndividuals:
    """Tests for replace_groups_with_individuals function."""

    def test_individuals_pass_through(self):
        """Names that are not groups are returned unchanged."""
        policy = Policy(groups=GROUPS)

        assert replace_groups_with_individuals(["dave", "erin"], policy) == ["dave", "erin"]

    def test_groups_are_expanded(self):
        """Group names are replaced by their members."""
        policy = Policy(groups=GROUPS)

        result = replace_groups_with_individuals(["backend", "dave"], policy)

        assert result == ["alice", "bob", "dave"]

    def test_overlapping_groups_are_deduplicated(self):
        """Members shared by several groups appear once."""
        policy = Policy(groups=GROUPS)

        result = replace_groups_with_individuals(["backend", "frontend", "alice"], policy)

        assert result == ["alice", "bob", "carol"]

    def test_excludes_are_removed(self):
        """Excluded individuals never appear, even via a group."""
        policy = Policy(groups=GROUPS)

        result = replace_groups_with_individuals(["backend", "carol"], policy, excludes=["bob", "carol"])

        assert result == ["alice"]

    def test_empty_group_expands_to_nothing(self):
        """An empty group contributes no reviewers."""
        policy = Policy(groups=GROUPS)

        assert replace_groups_with_individuals(["empty"], policy) == []

    def test_without_groups(self):
        """A policy without groups leaves every name as is."""
        assert replace_groups_with_individuals(["backend"], Policy()) == ["backend"]

    def test_idempotent_on_expanded_list(self):
        """Expanding an already expanded list changes nothing."""
        policy = Policy(groups=GROUPS)

        once = replace_groups_with_individuals(["backend", "frontend", "dave"], policy)
        twice = replace_groups_with_individuals(once, policy)

        assert twice == once

    def test_team_identifiers_are_opaque(self):
        """Team-prefixed identifiers are treated like any other name."""
        policy = Policy(groups={"owners": ["team:core", "alice"]})

        assert replace_groups_with_individuals(["owners"], policy) == ["team:core", "alice"]


class TestDedupe:
    """Tests for dedupe helper."""

    def test_keeps_first_occurrence_order(self):
        assert dedupe(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    def test_empty(self):
        assert dedupe([]) == []


class TestFetchOtherGroupMembers:
    """Tests for fetch_other_group_members function."""

    def test_disabled_by_default(self):
        """Return nothing unless group assignment is enabled."""
        policy = Policy(groups=GROUPS)

        assert fetch_other_group_members("alice", policy) == []

    def test_returns_teammates(self):
        """Return the other members of the author's group."""
        policy = Policy(groups=GROUPS, options=PolicyOptions(enable_group_assignment=True))

        assert fetch_other_group_members("alice", policy) == ["bob"]

    def test_author_in_several_groups(self):
        """Members of every group the author is in are combined and deduplicated."""
        policy = Policy(
            groups={**GROUPS, "platform": ["bob", "alice", "dave"]},
            options=PolicyOptions(enable_group_assignment=True),
        )

        assert fetch_other_group_members("bob", policy) == ["alice", "carol", "dave"]

    def test_never_includes_author(self):
        """The author is excluded from the result."""
        policy = Policy(groups=GROUPS, options=PolicyOptions(enable_group_assignment=True))

        assert "carol" not in fetch_other_group_members("carol", policy)

    def test_author_without_group(self):
        """An author in no group has no teammates."""
        policy = Policy(groups=GROUPS, options=PolicyOptions(enable_group_assignment=True))

        assert fetch_other_group_members("zoe", policy) == []
