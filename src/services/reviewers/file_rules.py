"""Reviewer identification from changed files.

Each glob rule in the policy's `files` section is evaluated against the
changes of the last commit and yields a RuleMatch. The matches are folded
into four buckets:

- matched: the rule matched any file changed in the last commit
- must_be_added: the rule matched a file added or removed in the last commit
- should_be_added: the rule matched a file modified in the last commit
- could_be_removed: the rule matched a file the last commit reverted, i.e.
  changed in the last commit but no longer part of the PR diff

With `options.last_files_match_only`, `matched` holds only the reviewers of
the last matching rule in policy order, so a specific rule placed after a
broad one overrides it.
"""

from dataclasses import dataclass
from functools import reduce
from typing import Iterable

import pathspec

from src.core.exceptions import ConfigurationMissingError
from src.core.logging import get_logger
from src.services.reviewers.groups import replace_groups_with_individuals
from src.services.reviewers.schemas import ChangedFiles, Policy, ReviewerClassification

logger = get_logger("reviewers.file_rules")

BUCKETS = ("matched", "must_be_added", "should_be_added", "could_be_removed")


@dataclass(frozen=True)
class RuleMatch:
    """Which buckets one glob rule contributes its reviewers to."""

    pattern: str
    reviewers: tuple[str, ...]
    matched: bool = False
    must_be_added: bool = False
    should_be_added: bool = False
    could_be_removed: bool = False


@dataclass(frozen=True)
class _Buckets:
    matched: tuple[str, ...] = ()
    must_be_added: tuple[str, ...] = ()
    should_be_added: tuple[str, ...] = ()
    could_be_removed: tuple[str, ...] = ()

    def merge(self, match: RuleMatch, last_files_match_only: bool = False) -> "_Buckets":
        """Return new buckets with the rule's reviewers added where it matched."""
        merged = {}
        for name in BUCKETS:
            current = getattr(self, name)
            if not getattr(match, name):
                merged[name] = current
            elif name == "matched" and last_files_match_only:
                merged[name] = match.reviewers
            else:
                merged[name] = current + match.reviewers
        return _Buckets(**merged)


@dataclass(frozen=True)
class Glob:
    """A compiled glob rule. `!pattern` matches every path `pattern` does not."""

    spec: pathspec.PathSpec
    negated: bool = False

    def match_file(self, path: str) -> bool:
        return self.spec.match_file(path) != self.negated


def compile_glob(pattern: str) -> Glob | None:
    """Compile a glob rule, anchored at the repository root.

    `*` and `?` stay within one path segment, `**` spans segments and a
    leading `!` negates the rest of the pattern.
    Returns None for patterns that cannot be compiled.
    """
    pattern = pattern.strip()
    negated = pattern.startswith("!")
    body = pattern[1:].strip() if negated else pattern
    if not body:
        if pattern:
            logger.warning(f"Ignoring glob pattern {pattern!r} with nothing to match")
        return None

    anchored = body if body.startswith("/") else f"/{body}"
    try:
        spec = pathspec.PathSpec.from_lines("gitwildmatch", [anchored])
    except ValueError as e:
        logger.warning(f"Ignoring invalid glob pattern {pattern!r}: {e}")
        return None
    return Glob(spec, negated)


def evaluate_rule(pattern: str, reviewers: Iterable[str], changed_files: ChangedFiles) -> RuleMatch:
    """Evaluate a single glob rule against the changed files."""
    glob = compile_glob(pattern)

    def has_matches(filenames: Iterable[str]) -> bool:
        return glob is not None and any(glob.match_file(f) for f in filenames)

    return RuleMatch(
        pattern=pattern,
        reviewers=tuple(reviewers),
        matched=has_matches(changed_files.last.all),
        must_be_added=has_matches(changed_files.last.added_or_removed),
        should_be_added=has_matches(changed_files.last.modified),
        could_be_removed=has_matches(changed_files.reverted),
    )


def identify_reviewers_by_changed_files(
    policy: Policy,
    changed_files: ChangedFiles,
    excludes: Iterable[str] = (),
) -> ReviewerClassification:
    """Classify reviewers whose file rules match the changed files.

    Args:
        policy: Reviewer policy
        changed_files: Changes of the whole PR and of its last commit
        excludes: Individuals never to return (usually the PR author)

    Returns:
        ReviewerClassification with groups expanded and excludes removed;
        empty when the policy has no `files` section
    """
    try:
        file_rules = policy.require("file_rules")
    except ConfigurationMissingError as e:
        logger.info(f"{e}; returning no reviewers for changed files")
        return ReviewerClassification()

    matches = [
        evaluate_rule(pattern, reviewers, changed_files)
        for pattern, reviewers in file_rules.items()
    ]
    last_files_match_only = policy.options.last_files_match_only
    buckets = reduce(
        lambda acc, match: acc.merge(match, last_files_match_only),
        matches,
        _Buckets(),
    )

    for match in matches:
        if match.matched:
            logger.debug(f"Rule {match.pattern!r} matched: {', '.join(match.reviewers)}")

    excludes = list(excludes)
    return ReviewerClassification(
        **{
            name: replace_groups_with_individuals(getattr(buckets, name), policy, excludes)
            for name in BUCKETS
        }
    )
