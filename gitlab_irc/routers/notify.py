"""GitLab hook endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Header, HTTPException, Request
from fastapi.responses import PlainTextResponse

from gitlab_irc.errors import MalformedPayload
from gitlab_irc.services.dispatcher import Dispatcher, Outcome

logger = logging.getLogger(__name__)

router = APIRouter(tags=["gitlab"])


@router.post("/notify", response_class=PlainTextResponse)
async def gitlab_webhook(
    request: Request,
    x_gitlab_event: str | None = Header(None),
):
    """
    GitLab webhook endpoint.

    The `X-Gitlab-Event` header selects the payload schema. Unknown or missing
    event types are accepted and ignored; a body that does not match the schema
    is rejected with 400 and nothing is sent.
    """
    body = await request.body()
    dispatcher: Dispatcher = request.app.state.dispatcher

    try:
        result = await dispatcher.handle(x_gitlab_event, body)
    except MalformedPayload as exc:
        logger.warning("Rejecting %s hook: %s", x_gitlab_event, exc.reason)
        raise HTTPException(400, f"Malformed {exc.event} payload") from exc

    if result.outcome is Outcome.FAILED:
        if not result.failed:
            raise HTTPException(502, f"{result.kind.value} event could not be rendered")
        raise HTTPException(502, f"{result.failed} line(s) could not be delivered")
    if result.outcome is Outcome.DROPPED:
        return "ignored"
    return "ok"
