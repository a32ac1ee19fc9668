"""Centralized Jinja2 message templates.

Every chat line is rendered from one of the templates below. They are compiled
once at import time and kept in a read-only registry. Colors use mIRC control
codes: ``\\x03NN`` starts a colored segment and a bare ``\\x03`` resets it. In
templates a segment is written as ``{{ value|color('blue') }}``.
"""

from __future__ import annotations

import enum
import re
from types import MappingProxyType
from typing import Any, Mapping

from jinja2 import Environment, Template, TemplateError

from gitlab_irc.errors import RenderFailure

COLOR = "\x03"


class Color(str, enum.Enum):
    GREEN = "03"
    RED = "04"
    MAROON = "05"
    PURPLE = "06"
    ORANGE = "07"
    YELLOW = "08"
    BLUE = "12"
    SILVER = "15"


def paint(text: Any, color: Color | str, prefix: str = "") -> str:
    """Wrap ``prefix + text`` in a colored segment closed by a color reset."""
    if not isinstance(color, Color):
        color = Color[str(color).upper()]
    return f"{COLOR}{color.value}{prefix}{text}{COLOR}"


_CONTROL_CODES = re.compile(r"\x03(?:\d{1,2}(?:,\d{1,2})?)?|[\x02\x0f\x16\x1d\x1f]")


def strip_colors(text: str) -> str:
    """Remove mIRC formatting codes, for sinks that cannot display them."""
    return _CONTROL_CODES.sub("", text or "")


class MessageKind(str, enum.Enum):
    PUSH_COMPARE = "push_compare"
    PUSH_COMMIT_LOG = "push_commit_log"
    BRANCH_CREATE = "branch_create"
    BRANCH_DELETE = "branch_delete"
    COMMIT = "commit"
    MORE_COMMITS = "more_commits"
    ISSUE = "issue"
    MERGE = "merge"
    PIPELINE_STARTED = "pipeline_started"
    PIPELINE_COMPLETED = "pipeline_completed"
    JOB_COMPLETED = "job_completed"


_PROJECT = "[{{ project|color('blue') }}]"

TEMPLATE_SOURCES: Mapping[MessageKind, str] = MappingProxyType(
    {
        MessageKind.PUSH_COMPARE: (
            _PROJECT + " {{ user }} pushed {{ total }} commits to {{ branch|color('maroon') }}"
            " {{ web_url }}/compare/{{ before }}...{{ after }}"
        ),
        MessageKind.PUSH_COMMIT_LOG: (
            _PROJECT + " {{ user }} pushed {{ total }} commits to {{ branch|color('maroon') }}"
            " {{ web_url }}/commits/{{ branch }}"
        ),
        MessageKind.BRANCH_CREATE: (
            _PROJECT + " {{ user }} created the branch {{ branch|color('maroon') }}"
        ),
        MessageKind.BRANCH_DELETE: (
            _PROJECT + " {{ user }} deleted the branch {{ branch|color('maroon') }}"
        ),
        MessageKind.COMMIT: (
            "{{ short_id|color('silver') }}"
            " ({{ added|color('green', '+') }}|{{ modified|color('yellow', '±') }}"
            "|{{ removed|color('red', '-') }})"
            " {{ author|color('purple') }}: {{ message }}"
        ),
        MessageKind.MORE_COMMITS: "and {{ remaining }} more commits.",
        MessageKind.ISSUE: (
            _PROJECT + " {{ user }} {{ action }} issue {{ iid|color('yellow', '#') }}:"
            " {{ title }} {{ url }}"
        ),
        MessageKind.MERGE: (
            _PROJECT + " {{ user }} {{ action }} merge request {{ iid|color('yellow', '#') }}:"
            " {{ title }} {{ url }}"
        ),
        MessageKind.PIPELINE_STARTED: (
            _PROJECT + " Pipeline for commit {{ commit }} {{ status }}"
            " {{ web_url }}/pipelines/{{ pipeline_id }}"
        ),
        MessageKind.PIPELINE_COMPLETED: (
            _PROJECT + " Pipeline for commit {{ commit }} {{ status }}"
            " in {{ duration }} seconds {{ web_url }}/pipelines/{{ pipeline_id }}"
        ),
        MessageKind.JOB_COMPLETED: (
            _PROJECT + " Job {{ job|color('yellow') }} for commit {{ commit }} {{ status }}"
            " in {{ duration }} seconds {{ homepage }}/-/jobs/{{ job_id }}"
        ),
    }
)

# Plain text out, so no HTML autoescaping. Undefined values render as "".
_env = Environment(autoescape=False)
_env.filters["color"] = paint


def _compile() -> Mapping[MessageKind, Template]:
    return MappingProxyType(
        {kind: _env.from_string(source) for kind, source in TEMPLATE_SOURCES.items()}
    )


TEMPLATES = _compile()


def render(kind: MessageKind, **context: Any) -> str:
    """Render one chat line. ``None`` values render as empty strings."""
    clean = {key: ("" if value is None else value) for key, value in context.items()}
    try:
        return TEMPLATES[kind].render(**clean)
    except (TemplateError, KeyError) as exc:
        raise RenderFailure(f"{kind.value}: {exc}") from exc
