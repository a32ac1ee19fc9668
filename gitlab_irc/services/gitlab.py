"""Chat lines for GitLab webhook events."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

from gitlab_irc.errors import RenderFailure
from gitlab_irc.schemas import (
    Commit,
    IssueEvent,
    JobEvent,
    MergeEvent,
    PipelineEvent,
    ProjectIdentity,
    PushEvent,
)
from gitlab_irc.templating import Color, MessageKind, paint, render
from gitlab_irc.utils import (
    branch_from_ref,
    commit_message,
    format_duration,
    is_null_commit,
    short_hash,
)

logger = logging.getLogger(__name__)

MAX_COMMITS = 3  # Commit lines shown per push before summarizing the rest.
HASH_WIDTH = 7

JOB_STATUS: dict[str, str] = {
    "pending": "is " + paint("pending", Color.SILVER),
    "created": "was " + paint("created", Color.SILVER),
    "running": "is " + paint("running", Color.ORANGE),
    "failed": "has " + paint("failed", Color.RED),
    "success": "has " + paint("succeeded", Color.GREEN),
}

HOOK_ACTIONS: dict[str, str] = {
    "open": "opened",
    "update": "updated",
    "close": "closed",
    "reopen": "reopened",
    "merge": "merged",
}

COMPLETED_STATUSES = frozenset({"success", "failed"})


@dataclass(frozen=True)
class RenderedMessage:
    text: str
    identity: ProjectIdentity


@dataclass(frozen=True)
class CommitLine:
    """Per-commit projection used by the commit template."""

    short_id: str
    message: str
    added: int
    modified: int
    removed: int
    author: str

    @classmethod
    def from_commit(cls, commit: Commit, hash_width: int = HASH_WIDTH) -> "CommitLine":
        return cls(
            short_id=short_hash(commit.id, hash_width),
            message=commit_message(commit.message),
            added=len(commit.added),
            modified=len(commit.modified),
            removed=len(commit.removed),
            author=commit.author.name,
        )


def colorize_status(status: str | None) -> str:
    """Display phrase for a pipeline/job status; unknown statuses pass through."""
    status = status or ""
    return JOB_STATUS.get(status, status)


def action_verb(action: str | None) -> str:
    """Past-tense verb for an issue/merge action; unknown actions pass through."""
    action = action or ""
    return HOOK_ACTIONS.get(action, action)


class _Lines:
    """Collects rendered lines for one event; a failed line is logged and skipped."""

    def __init__(self, identity: ProjectIdentity):
        self.identity = identity
        self.messages: list[RenderedMessage] = []
        self.failed = 0

    def add(self, kind: MessageKind, **context: Any) -> None:
        try:
            text = render(kind, **context)
        except RenderFailure as exc:
            self.failed += 1
            logger.error("Dropping %s line for %s: %s", kind.value, self.identity.full_name, exc)
            return
        self.messages.append(RenderedMessage(text, self.identity))

    def result(self) -> list[RenderedMessage]:
        """The rendered lines. Raises RenderFailure if every planned line failed."""
        if self.failed and not self.messages:
            raise RenderFailure(
                f"none of {self.failed} line(s) for {self.identity.full_name} rendered"
            )
        return self.messages


def plan_push(
    event: PushEvent,
    *,
    hash_width: int = HASH_WIDTH,
    max_commits: int = MAX_COMMITS,
) -> list[RenderedMessage]:
    lines = _Lines(event.identity)
    project = event.project
    branch = branch_from_ref(event.ref)
    common = {"project": project.name, "user": event.user_name, "branch": branch}

    # The null-commit checks run on the full hashes, before any shortening.
    if is_null_commit(event.after):
        lines.add(MessageKind.BRANCH_DELETE, **common)
        return lines.result()

    created = is_null_commit(event.before)
    if created:
        lines.add(MessageKind.BRANCH_CREATE, **common)

    total = event.total_commits_count
    if created and total <= 0:
        return lines.result()

    # a compare link from the null commit would be meaningless
    if created:
        lines.add(
            MessageKind.PUSH_COMMIT_LOG, total=total, web_url=project.web_url, **common
        )
    else:
        lines.add(
            MessageKind.PUSH_COMPARE,
            total=total,
            web_url=project.web_url,
            before=short_hash(event.before, hash_width),
            after=short_hash(event.after, hash_width),
            **common,
        )

    for commit in event.commits[:max_commits]:
        lines.add(MessageKind.COMMIT, **asdict(CommitLine.from_commit(commit, hash_width)))

    if total > max_commits:
        lines.add(MessageKind.MORE_COMMITS, remaining=total - max_commits)
    return lines.result()


def plan_issue(event: IssueEvent, **_options: Any) -> list[RenderedMessage]:
    lines = _Lines(event.identity)
    issue = event.object_attributes
    lines.add(
        MessageKind.ISSUE,
        project=event.project.name,
        user=event.user.name,
        action=action_verb(issue.action),
        iid=issue.iid,
        title=issue.title,
        url=issue.url,
    )
    return lines.result()


def plan_merge(event: MergeEvent, **_options: Any) -> list[RenderedMessage]:
    lines = _Lines(event.identity)
    merge = event.object_attributes
    lines.add(
        MessageKind.MERGE,
        project=event.project.name,
        user=event.user.name,
        action=action_verb(merge.action),
        iid=merge.iid,
        title=merge.title,
        url=merge.url,
    )
    return lines.result()


def plan_pipeline(
    event: PipelineEvent, *, hash_width: int = HASH_WIDTH, **_options: Any
) -> list[RenderedMessage]:
    pipeline = event.object_attributes
    if pipeline.status == "pending":
        logger.info("Skipping noisy pipeline event with status: %s", pipeline.status)
        return []

    if pipeline.status == "running":
        kind = MessageKind.PIPELINE_STARTED
    elif pipeline.status in COMPLETED_STATUSES:
        kind = MessageKind.PIPELINE_COMPLETED
    else:
        logger.info("Skipping pipeline event with status: %s", pipeline.status)
        return []

    lines = _Lines(event.identity)
    lines.add(
        kind,
        project=event.project.name,
        commit=short_hash(pipeline.sha, hash_width),
        status=colorize_status(pipeline.status),
        duration=format_duration(pipeline.duration),
        web_url=event.project.web_url,
        pipeline_id=pipeline.id,
    )
    return lines.result()


def plan_job(
    event: JobEvent, *, hash_width: int = HASH_WIDTH, **_options: Any
) -> list[RenderedMessage]:
    if event.build_status not in COMPLETED_STATUSES:
        logger.info("Skipping noisy job event with status: %s", event.build_status)
        return []

    lines = _Lines(event.identity)
    lines.add(
        MessageKind.JOB_COMPLETED,
        project=event.repository.name,
        job=event.build_name,
        commit=short_hash(event.sha, hash_width),
        status=colorize_status(event.build_status),
        duration=format_duration(event.build_duration),
        homepage=event.repository.homepage,
        job_id=event.build_id,
    )
    return lines.result()
