"""Delivery sink selection."""

from __future__ import annotations

import logging
from typing import Iterable

from gitlab_irc.config import Settings
from gitlab_irc.errors import DeliveryError
from gitlab_irc.services.dispatcher import DeliverySink
from gitlab_irc.services.irc import IRCClient
from gitlab_irc.services.telegram import TelegramSink
from gitlab_irc.templating import strip_colors

logger = logging.getLogger(__name__)


class LogSink:
    """Writes every line to the log instead of a chat network."""

    async def start(self) -> None:
        logger.info("Log sink ready; messages will not leave this process")

    async def join(self, channels: Iterable[str]) -> None:
        for name in channels:
            logger.info("Joining %s", name)

    async def deliver(self, channel: str, text: str) -> None:
        logger.info("%s <- %s", channel, strip_colors(text))

    async def close(self) -> None:
        return None


def build_sink(settings: Settings) -> DeliverySink:
    """Pick the sink named by ``settings.sink``."""
    if settings.sink == "irc":
        return IRCClient(
            settings.irc_host,
            settings.irc_port,
            settings.irc_nickname,
            settings.irc_gecos,
            use_tls=settings.irc_use_tls,
            cafile=settings.irc_cafile,
        )
    if settings.sink == "telegram":
        return TelegramSink(settings.telegram_bot_token)
    if settings.sink == "log":
        return LogSink()
    raise DeliveryError(f"unknown delivery sink: {settings.sink!r}")
