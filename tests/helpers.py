"""Payload builders and async helpers shared by the test suite."""

from __future__ import annotations

import asyncio
import json
import typing as typ

from gitlab_irc.errors import DeliveryError

NULL = "0" * 40
BEFORE = "1111111" + "a" * 33
AFTER = "2222222" + "b" * 33
WEB_URL = "https://gitlab.example.com/acme/widgets"


def run_async(coro: typ.Awaitable[typ.Any]) -> typ.Any:
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


def project(namespace: str = "acme", name: str = "widgets") -> dict[str, str]:
    return {
        "name": name,
        "namespace": namespace,
        "web_url": f"https://gitlab.example.com/{namespace}/{name}",
        "path_with_namespace": f"{namespace}/{name}",
    }


def commit(index: int, message: str = "Fix things", author: str = "Jane Doe") -> dict:
    return {
        "id": f"{index:07d}" + "c" * 33,
        "message": message,
        "timestamp": "2024-01-01T00:00:00+00:00",
        "added": ["a.py"],
        "modified": ["b.py", "c.py"],
        "removed": [],
        "author": {"name": author, "email": "jane@example.com"},
    }


def push_payload(
    *,
    commits: int = 1,
    total: int | None = None,
    before: str = BEFORE,
    after: str = AFTER,
    ref: str = "refs/heads/main",
    namespace: str = "acme",
    name: str = "widgets",
) -> dict:
    return {
        "object_kind": "push",
        "user_name": "Jane Doe",
        "before": before,
        "after": after,
        "ref": ref,
        "total_commits_count": commits if total is None else total,
        "project": project(namespace, name),
        "commits": [commit(i + 1) for i in range(commits)],
    }


def issue_payload(action: str | None = "open", namespace: str = "acme") -> dict:
    return {
        "object_kind": "issue",
        "user": {"name": "Jane Doe", "username": "jane"},
        "project": project(namespace),
        "object_attributes": {
            "iid": 12,
            "action": action,
            "title": "Crash on start",
            "url": f"{WEB_URL}/-/issues/12",
            "description": "steps",
        },
    }


def merge_payload(action: str | None = "merge") -> dict:
    return {
        "object_kind": "merge_request",
        "user": {"name": "Jane Doe"},
        "project": project(),
        "object_attributes": {
            "iid": 7,
            "action": action,
            "title": "Add widgets",
            "url": f"{WEB_URL}/-/merge_requests/7",
        },
    }


def pipeline_payload(status: str, duration: float | None = 42.0) -> dict:
    return {
        "object_kind": "pipeline",
        "project": project(),
        "object_attributes": {
            "id": 99,
            "sha": AFTER,
            "status": status,
            "duration": duration,
        },
    }


def job_payload(status: str = "success") -> dict:
    return {
        "object_kind": "build",
        "build_id": 314,
        "build_name": "test",
        "build_status": status,
        "build_duration": 12.5,
        "sha": AFTER,
        "repository": {
            "name": "widgets",
            "homepage": WEB_URL,
            "url": "git@gitlab.example.com:acme/widgets.git",
        },
    }


def body(payload: dict) -> bytes:
    return json.dumps(payload).encode()


class RecordingSink:
    """Delivery sink that remembers every call."""

    def __init__(self, fail_channels: typ.Iterable[str] = ()):
        self.fail_channels = set(fail_channels)
        self.sent: list[tuple[str, str]] = []
        self.joined: list[str] = []
        self.started = False
        self.closed = False

    async def start(self) -> None:
        self.started = True

    async def join(self, channels: typ.Iterable[str]) -> None:
        self.joined.extend(channels)

    async def deliver(self, channel: str, text: str) -> None:
        if channel in self.fail_channels:
            msg = f"{channel} unreachable"
            raise DeliveryError(msg)
        self.sent.append((channel, text))

    async def close(self) -> None:
        self.closed = True
