"""Classification of GitHub webhook events into notification kinds."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, ClassVar, Mapping, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from keybase_notify.errors import EventPayloadError
from keybase_notify.schemas import (
    Commit,
    CommitCommentPayload,
    IssueCommentPayload,
    IssuesPayload,
    PullRequestPayload,
    PushPayload,
    WatchPayload,
)

logger = logging.getLogger(__name__)

SHORT_SHA_LENGTH = 7

PULL_REQUEST_STATES = {
    "opened": "opened",
    "closed": "closed",
    "reopened": "reopened",
    "synchronize": "updated",
}
ISSUE_STATES = {
    "opened": "opened",
    "edited": "updated",
    "closed": "closed",
    "reopened": "reopened",
}
COMMENT_STATES = {
    "created": "New",
    "edited": "Updated",
    "deleted": "Deleted",
}


class EventKind(str, Enum):
    PUSH = "push"
    STAR = "star"
    PULL_REQUEST = "pull_request"
    ISSUE = "issue"
    ISSUE_COMMENT = "issue_comment"
    COMMIT_COMMENT = "commit_comment"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class Unsupported:
    """Anything the notifier does not announce."""

    kind: ClassVar[EventKind] = EventKind.UNSUPPORTED
    event_name: str
    action: str = ""


@dataclass(frozen=True)
class _Notice:
    repo: str
    actor_login: str
    url: str


@dataclass(frozen=True)
class PushEvent(_Notice):
    kind: ClassVar[EventKind] = EventKind.PUSH
    ref: str
    forced: bool
    commits: tuple[Commit, ...]


@dataclass(frozen=True)
class StarEvent(_Notice):
    kind: ClassVar[EventKind] = EventKind.STAR


@dataclass(frozen=True)
class PullRequestEvent(_Notice):
    kind: ClassVar[EventKind] = EventKind.PULL_REQUEST
    number: int
    title: str
    state: str
    body: str = ""


@dataclass(frozen=True)
class IssueEvent(_Notice):
    kind: ClassVar[EventKind] = EventKind.ISSUE
    number: int
    title: str
    state: str


@dataclass(frozen=True)
class IssueCommentEvent(_Notice):
    kind: ClassVar[EventKind] = EventKind.ISSUE_COMMENT
    number: int
    state: str
    body: str


@dataclass(frozen=True)
class CommitCommentEvent(_Notice):
    kind: ClassVar[EventKind] = EventKind.COMMIT_COMMENT
    short_sha: str
    body: str


Notice = Union[
    PushEvent,
    StarEvent,
    PullRequestEvent,
    IssueEvent,
    IssueCommentEvent,
    CommitCommentEvent,
]
Event = Union[Notice, Unsupported]

M = TypeVar("M", bound=BaseModel)


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "payload"
        parts.append(f"{location}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)


def _decode(model: Type[M], event_name: str, payload: Mapping[str, Any]) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise EventPayloadError(event_name, _describe(exc)) from exc


def _action(payload: Mapping[str, Any]) -> str:
    action = payload.get("action")
    return action if isinstance(action, str) else ""


def _classify_push(event_name: str, payload: Mapping[str, Any]) -> Event:
    data = _decode(PushPayload, event_name, payload)
    return PushEvent(
        repo=data.repository.full_name,
        actor_login=data.sender.login,
        url=data.compare,
        ref=data.ref,
        forced=data.forced,
        commits=tuple(data.commits),
    )


def _classify_watch(event_name: str, payload: Mapping[str, Any]) -> Event:
    action = _action(payload)
    if action != "started":
        return Unsupported(event_name, action)
    data = _decode(WatchPayload, event_name, payload)
    return StarEvent(
        repo=data.repository.full_name,
        actor_login=data.sender.login,
        url=data.repository.html_url,
    )


def _classify_pull_request(event_name: str, payload: Mapping[str, Any]) -> Event:
    action = _action(payload)
    state = PULL_REQUEST_STATES.get(action)
    if state is None:
        return Unsupported(event_name, action)
    data = _decode(PullRequestPayload, event_name, payload)
    pr = data.pull_request
    if action == "closed" and pr.merged is True:
        state = "merged"
    return PullRequestEvent(
        repo=data.repository.full_name,
        actor_login=data.sender.login,
        url=pr.html_url,
        number=data.number if data.number is not None else pr.number,
        title=pr.title,
        state=state,
        body=pr.body or "",
    )


def _classify_issues(event_name: str, payload: Mapping[str, Any]) -> Event:
    action = _action(payload)
    state = ISSUE_STATES.get(action)
    if state is None:
        return Unsupported(event_name, action)
    data = _decode(IssuesPayload, event_name, payload)
    return IssueEvent(
        repo=data.repository.full_name,
        actor_login=data.sender.login,
        url=data.issue.html_url,
        number=data.issue.number,
        title=data.issue.title,
        state=state,
    )


def _classify_issue_comment(event_name: str, payload: Mapping[str, Any]) -> Event:
    action = _action(payload)
    state = COMMENT_STATES.get(action)
    if state is None:
        return Unsupported(event_name, action)
    data = _decode(IssueCommentPayload, event_name, payload)
    comment = data.comment
    # New comments credit the author; edits and deletions credit whoever acted.
    if action == "created" and comment.user is not None:
        actor_login = comment.user.login
    else:
        actor_login = data.sender.login
    return IssueCommentEvent(
        repo=data.repository.full_name,
        actor_login=actor_login,
        url=comment.html_url,
        number=data.issue.number,
        state=state,
        body=comment.body,
    )


def _classify_commit_comment(event_name: str, payload: Mapping[str, Any]) -> Event:
    data = _decode(CommitCommentPayload, event_name, payload)
    comment = data.comment
    author = comment.user or data.sender
    return CommitCommentEvent(
        repo=data.repository.full_name,
        actor_login=author.login if author else "",
        url=comment.html_url,
        short_sha=comment.commit_id[:SHORT_SHA_LENGTH],
        body=comment.body,
    )


Classifier = Callable[[str, Mapping[str, Any]], Event]

CLASSIFIERS: dict[str, Classifier] = {
    "push": _classify_push,
    "watch": _classify_watch,
    "pull_request": _classify_pull_request,
    "issues": _classify_issues,
    "issue_comment": _classify_issue_comment,
    "commit_comment": _classify_commit_comment,
}


def classify(event_name: str | None, payload: Mapping[str, Any] | None) -> Event:
    """
    Map a GitHub event name and its payload to exactly one event variant.

    Unknown event names and unknown actions of known events both come back as
    :class:`Unsupported`. A known event/action whose payload lacks required
    fields raises :class:`EventPayloadError`.
    """
    event_key = (event_name or "").strip().lower()
    payload = payload if isinstance(payload, Mapping) else {}
    classifier = CLASSIFIERS.get(event_key)
    if classifier is None:
        event: Event = Unsupported(event_key, _action(payload))
    else:
        event = classifier(event_key, payload)
    logger.debug("Classified %r event as %s", event_key, event.kind.value)
    return event
