"""
Webhook payload schemas.

Only the fields the notifier reads are declared; everything else GitHub sends
is ignored. Decoding through these models is what turns a missing field into
a single validation error at the classifier boundary.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class _Model(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class GitHubUser(_Model):
    login: str


class Repository(_Model):
    full_name: str
    html_url: str = ""


class Commit(_Model):
    """A single entry of a push event's ``commits`` list."""

    id: str = ""
    message: str = ""
    distinct: bool = True


class PushPayload(_Model):
    ref: str
    compare: str
    forced: bool = False
    commits: List[Commit] = []
    repository: Repository
    sender: GitHubUser


class WatchPayload(_Model):
    action: str
    repository: Repository
    sender: GitHubUser


class PullRequest(_Model):
    number: int
    title: str = ""
    body: Optional[str] = None
    html_url: str
    # Omitted for some draft PRs; only an explicit True means merged.
    merged: Optional[bool] = None


class PullRequestPayload(_Model):
    action: str
    number: Optional[int] = None
    pull_request: PullRequest
    repository: Repository
    sender: GitHubUser


class Issue(_Model):
    number: int
    title: str = ""
    html_url: str


class IssuesPayload(_Model):
    action: str
    issue: Issue
    repository: Repository
    sender: GitHubUser


class Comment(_Model):
    body: str = ""
    html_url: str
    user: Optional[GitHubUser] = None
    commit_id: str = ""


class IssueCommentPayload(_Model):
    action: str
    issue: Issue
    comment: Comment
    repository: Repository
    sender: GitHubUser


class CommitCommentPayload(_Model):
    comment: Comment
    repository: Repository
    sender: Optional[GitHubUser] = None
