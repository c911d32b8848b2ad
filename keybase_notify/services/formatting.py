"""Keybase chat messages for classified GitHub events."""

from __future__ import annotations

from typing import Callable

from keybase_notify.services.actors import ActorHandle, actor_display
from keybase_notify.services.events import (
    CommitCommentEvent,
    EventKind,
    IssueCommentEvent,
    IssueEvent,
    Notice,
    PullRequestEvent,
    PushEvent,
    StarEvent,
)
from keybase_notify.utils import first_line

Renderer = Callable[[Notice, ActorHandle, str], str]

# Star messages carry no link, so no shortening is needed for them.
LINKLESS_KINDS = frozenset({EventKind.STAR})


def _repo_line(repo: str) -> str:
    return f"> _repo: {repo}_"


def _render_push(event: PushEvent, actor: ActorHandle, url: str) -> str:
    verb = "*force-pushed*" if event.forced else "*pushed*"
    lines = [
        f"{actor_display(actor)} {verb} {len(event.commits)} commit(s)"
        f" to `{event.ref}` - {url}",
        _repo_line(event.repo),
    ]
    lines.extend(f"> - {first_line(commit.message)}" for commit in event.commits)
    return "\n".join(lines)


def _render_star(event: StarEvent, actor: ActorHandle, _url: str) -> str:
    return f"Repository `{event.repo}` starred by {actor_display(actor)} :+1: :star:"


def _render_pull_request(event: PullRequestEvent, actor: ActorHandle, url: str) -> str:
    lines = [
        f"PR #{event.number} *{event.state}* by {actor_display(actor)} - {url}",
        _repo_line(event.repo),
        f"> Title: *{event.title}*",
    ]
    if event.body and event.state == "opened":
        lines.append(f"> {event.body}")
    return "\n".join(lines)


def _render_issue(event: IssueEvent, actor: ActorHandle, url: str) -> str:
    return "\n".join(
        [
            f"Issue #{event.number} *{event.state}* by {actor_display(actor)} - {url}",
            _repo_line(event.repo),
            f"> Title: *{event.title}*",
        ]
    )


def _render_issue_comment(event: IssueCommentEvent, actor: ActorHandle, url: str) -> str:
    preposition = "by" if event.state == "Deleted" else "from"
    return "\n".join(
        [
            f"*{event.state}* comment on Issue #{event.number}"
            f" {preposition} {actor_display(actor)}. {url}",
            _repo_line(event.repo),
            f"> {event.body}",
        ]
    )


def _render_commit_comment(event: CommitCommentEvent, actor: ActorHandle, url: str) -> str:
    return (
        f"New comment on `{event.repo}@{event.short_sha}` by {actor_display(actor)} - {url}\n"
        f"> {event.body}"
    )


RENDERERS: dict[EventKind, Renderer] = {
    EventKind.PUSH: _render_push,
    EventKind.STAR: _render_star,
    EventKind.PULL_REQUEST: _render_pull_request,
    EventKind.ISSUE: _render_issue,
    EventKind.ISSUE_COMMENT: _render_issue_comment,
    EventKind.COMMIT_COMMENT: _render_commit_comment,
}


def needs_link(event: Notice) -> bool:
    return event.kind not in LINKLESS_KINDS


def format_message(event: Notice, actor: ActorHandle, short_url: str = "") -> str:
    """Render ``event`` credited to ``actor``; a pure function of its arguments."""
    renderer = RENDERERS.get(event.kind)
    if renderer is None:
        raise ValueError(f"No message format for {event.kind.value!r} events")
    return renderer(event, actor, short_url)
