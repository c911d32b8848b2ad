"""Merge-commit filtering for push summaries."""

from __future__ import annotations

from typing import Iterable

from keybase_notify.schemas import Commit

MERGE_PREFIX = "Merge "


def is_merge_commit(commit: Commit) -> bool:
    """A merge commit either says so in its subject or is not distinct to this push."""
    return commit.message.startswith(MERGE_PREFIX) or commit.distinct is False


def filter_merge_commits(commits: Iterable[Commit]) -> tuple[Commit, ...]:
    """Return the non-merge commits in their original order, as a new tuple."""
    return tuple(commit for commit in commits if not is_merge_commit(commit))
