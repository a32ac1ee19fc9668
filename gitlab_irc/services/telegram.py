"""Telegram sink, for chats instead of IRC channels."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

import httpx

from gitlab_irc.errors import DeliveryError
from gitlab_irc.templating import strip_colors

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"
HTTP_TIMEOUT_SECONDS = 15
MESSAGE_LIMIT = 4096

JSONDict = dict[str, Any]


def _check(resp: httpx.Response) -> JSONDict:
    try:
        data = resp.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        raise DeliveryError(f"Telegram error: unexpected reply {resp.text}")
    if resp.status_code >= 300 or not data.get("ok", True):
        raise DeliveryError(f"Telegram error: {resp.status_code} {resp.text}")
    return data


async def send_message(
    client: httpx.AsyncClient,
    token: str,
    chat_id: int | str,
    text: str,
    *,
    disable_web_page_preview: bool = True,
) -> JSONDict:
    """Send one plain-text message via the Bot API."""
    api = f"{TELEGRAM_API_BASE}/bot{token}/sendMessage"
    payload: JSONDict = {
        "chat_id": chat_id,
        "text": text[:MESSAGE_LIMIT],
        "disable_web_page_preview": disable_web_page_preview,
    }
    try:
        resp = await client.post(api, json=payload)
    except httpx.HTTPError as exc:
        raise DeliveryError(f"Telegram request failed: {exc}") from exc
    return _check(resp)


async def get_me(client: httpx.AsyncClient, token: str) -> JSONDict:
    """Get bot info (JSON); used to validate the token at startup."""
    try:
        resp = await client.get(f"{TELEGRAM_API_BASE}/bot{token}/getMe")
    except httpx.HTTPError as exc:
        raise DeliveryError(f"Telegram request failed: {exc}") from exc
    return _check(resp)


class TelegramSink:
    """
    Delivers chat lines to Telegram chats.

    Destinations in the channel mapping are chat ids ('-100…' or '@channel').
    mIRC colors are stripped since Telegram cannot display them.
    """

    def __init__(self, token: str, *, client: Optional[httpx.AsyncClient] = None):
        if not token:
            raise DeliveryError("TELEGRAM_BOT_TOKEN is not set")
        self.token = token
        self._client = client or httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS)

    async def start(self) -> None:
        data = await get_me(self._client, self.token)
        username = (data.get("result") or {}).get("username", "?")
        logger.info("Telegram bot @%s ready", username)

    async def join(self, channels: Iterable[str]) -> None:
        # bots cannot join chats on their own; they must be added by a member
        logger.debug("Telegram destinations: %s", ", ".join(channels))

    async def deliver(self, channel: str, text: str) -> None:
        await send_message(self._client, self.token, channel, strip_colors(text))

    async def close(self) -> None:
        await self._client.aclose()
