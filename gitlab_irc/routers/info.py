"""Health and help pages."""

from __future__ import annotations

from textwrap import dedent

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from gitlab_irc.services.dispatcher import EVENT_LABELS
from gitlab_irc.services.routing import RoutingTable

router = APIRouter()

HTTP_HELP_TEXT = dedent(
    """
GitLab → IRC Notifier (HTTP Help)

Endpoints
---------
- GET  /        : Health check
- GET  /help    : This text
- POST /notify  : GitLab webhook (header X-Gitlab-Event)

Handled events
--------------
{events}

Delivery
--------
- sink: {sink}
- channel mapping: {mapping}
"""
).strip()


def render_routing_text(table: RoutingTable | None) -> str:
    """Plain-text dump of the loaded channel mapping."""
    if table is None:
        return "Channel mapping not loaded."
    lines = ["Channel mapping", "---------------", f"default: {table.default}"]
    for title, section in (("groups", table.groups), ("explicit", table.explicit)):
        lines.append(f"{title}:")
        if not section:
            lines.append("  -")
        for key, channels in sorted(section.items()):
            lines.append(f"  {key}: {', '.join(channels)}")
    return "\n".join(lines)


@router.get("/", response_class=PlainTextResponse)
def health():
    return "ok"


@router.get("/help", response_class=PlainTextResponse)
def http_help(request: Request):
    config = request.app.state.config
    text = HTTP_HELP_TEXT.format(
        events="\n".join(f"- {label}" for label in EVENT_LABELS),
        sink=config.sink,
        mapping=config.channel_mapping,
    )
    table = getattr(request.app.state, "routing_table", None)
    return text + "\n\n" + render_routing_text(table)
