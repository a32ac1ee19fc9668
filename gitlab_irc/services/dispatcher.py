"""Event dispatch: label → decode → render → resolve → deliver."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Protocol

from pydantic import BaseModel

from gitlab_irc.errors import (
    DeliveryError,
    MalformedPayload,
    RenderFailure,
    UnrecognizedEventType,
)
from gitlab_irc.schemas import IssueEvent, JobEvent, MergeEvent, PipelineEvent, PushEvent
from gitlab_irc.services.gitlab import (
    HASH_WIDTH,
    MAX_COMMITS,
    RenderedMessage,
    plan_issue,
    plan_job,
    plan_merge,
    plan_pipeline,
    plan_push,
)
from gitlab_irc.services.routing import RoutingTable, resolve

logger = logging.getLogger(__name__)


class EventKind(enum.Enum):
    PUSH = "push"
    ISSUE = "issue"
    MERGE = "merge"
    PIPELINE = "pipeline"
    JOB = "job"
    UNKNOWN = "unknown"

    @classmethod
    def from_label(cls, label: Optional[str]) -> "EventKind":
        """Map an ``X-Gitlab-Event`` header value to a kind (exact match)."""
        return EVENT_LABELS.get(label or "", cls.UNKNOWN)


EVENT_LABELS: Mapping[str, EventKind] = MappingProxyType(
    {
        "Push Hook": EventKind.PUSH,
        "Push Event": EventKind.PUSH,
        "Issue Hook": EventKind.ISSUE,
        "Issue Event": EventKind.ISSUE,
        "Merge Request Hook": EventKind.MERGE,
        "Merge Request Event": EventKind.MERGE,
        "Pipeline Hook": EventKind.PIPELINE,
        "Job Hook": EventKind.JOB,
    }
)

Planner = Callable[..., list[RenderedMessage]]


@dataclass(frozen=True)
class Handler:
    model: type[BaseModel]
    plan: Planner


HANDLERS: Mapping[EventKind, Handler] = MappingProxyType(
    {
        EventKind.PUSH: Handler(PushEvent, plan_push),
        EventKind.ISSUE: Handler(IssueEvent, plan_issue),
        EventKind.MERGE: Handler(MergeEvent, plan_merge),
        EventKind.PIPELINE: Handler(PipelineEvent, plan_pipeline),
        EventKind.JOB: Handler(JobEvent, plan_job),
    }
)


class DeliverySink(Protocol):
    async def start(self) -> None: ...

    async def join(self, channels: list[str]) -> None: ...

    async def deliver(self, channel: str, text: str) -> None: ...

    async def close(self) -> None: ...


class Outcome(str, enum.Enum):
    DELIVERED = "delivered"
    DROPPED = "dropped"
    FAILED = "failed"


@dataclass(frozen=True)
class DispatchResult:
    outcome: Outcome
    kind: EventKind
    delivered: int = 0
    failed: int = 0


def decode(kind: EventKind, body: bytes) -> Any:
    """Validate the raw JSON body against the schema for ``kind``."""
    handler = HANDLERS.get(kind)
    if handler is None:
        raise UnrecognizedEventType(kind.value)
    try:
        return handler.model.model_validate_json(body)
    except ValueError as exc:  # includes pydantic.ValidationError
        raise MalformedPayload(kind.value, str(exc)) from exc


class Dispatcher:
    """
    Turns one webhook call into chat lines and hands them to the sink.

    The routing table and templates are read-only, so a single instance is
    shared by all concurrent requests.
    """

    def __init__(
        self,
        table: RoutingTable,
        sink: DeliverySink,
        *,
        hash_width: int = HASH_WIDTH,
        max_commits: int = MAX_COMMITS,
    ):
        self.table = table
        self.sink = sink
        self.hash_width = hash_width
        self.max_commits = max_commits

    def messages(self, label: Optional[str], body: bytes) -> list[RenderedMessage]:
        """Decode and render without delivering. Raises MalformedPayload."""
        kind = EventKind.from_label(label)
        if kind is EventKind.UNKNOWN:
            raise UnrecognizedEventType(label)
        event = decode(kind, body)
        return HANDLERS[kind].plan(
            event, hash_width=self.hash_width, max_commits=self.max_commits
        )

    async def handle(self, label: Optional[str], body: bytes) -> DispatchResult:
        """
        Process one webhook call.

        Unknown labels and filtered events come back as ``DROPPED``; an event
        none of whose lines rendered, or whose every delivery failed, as ``FAILED``.
        ``MalformedPayload`` propagates to the caller; nothing is delivered.
        """
        kind = EventKind.from_label(label)
        logger.info("Got a hook for a %s event (%r)", kind.value, label)
        try:
            messages = self.messages(label, body)
        except UnrecognizedEventType:
            logger.warning("Unknown event: %r", label)
            return DispatchResult(Outcome.DROPPED, kind)
        except RenderFailure as exc:
            logger.error("Could not render %s event: %s", kind.value, exc)
            return DispatchResult(Outcome.FAILED, kind)

        if not messages:
            return DispatchResult(Outcome.DROPPED, kind)

        delivered = failed = 0
        for message in messages:
            # resolved per line; cheap and deterministic
            for channel in resolve(message.identity, self.table):
                try:
                    await self.sink.deliver(channel, message.text)
                except DeliveryError as exc:
                    failed += 1
                    logger.error("Delivery to %s failed: %s", channel, exc)
                else:
                    delivered += 1

        outcome = Outcome.FAILED if failed and not delivered else Outcome.DELIVERED
        return DispatchResult(outcome, kind, delivered=delivered, failed=failed)
