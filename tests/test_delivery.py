"""Tests for sink selection, the log sink and logging setup."""

from __future__ import annotations

import dataclasses
import logging

import pytest

from gitlab_irc.config import Settings, configure_logging
from gitlab_irc.errors import DeliveryError
from gitlab_irc.services.delivery import LogSink, build_sink
from gitlab_irc.services.irc import IRCClient
from gitlab_irc.services.telegram import TelegramSink
from tests.helpers import run_async


class TestBuildSink:
    def test_irc(self) -> None:
        config = Settings(sink="irc", irc_host="irc.example.org", irc_port=6667, irc_use_tls=False)
        sink = build_sink(config)
        assert isinstance(sink, IRCClient)
        assert (sink.host, sink.port, sink.use_tls) == ("irc.example.org", 6667, False)

    def test_telegram(self) -> None:
        assert isinstance(build_sink(Settings(sink="telegram", telegram_bot_token="1:x")), TelegramSink)

    def test_log(self) -> None:
        assert isinstance(build_sink(Settings(sink="log")), LogSink)

    def test_unknown(self) -> None:
        with pytest.raises(DeliveryError, match="unknown delivery sink"):
            build_sink(Settings(sink="carrier-pigeon"))


def test_log_sink_logs_plain_lines(caplog: pytest.LogCaptureFixture) -> None:
    sink = LogSink()
    with caplog.at_level(logging.INFO, logger="gitlab_irc.services.delivery"):
        run_async(sink.deliver("#a", "\x0303+1\x03 added"))
        run_async(sink.deliver("#a", "second"))
    assert not hasattr(sink, "sent")
    assert "#a <- +1 added" in caplog.text


def test_settings_are_frozen() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        Settings().sink = "log"  # type: ignore[misc]


def test_configure_logging_is_idempotent() -> None:
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    try:
        configure_logging("WARNING")
        configure_logging("DEBUG")
        added = [h for h in root.handlers if h not in before]
        assert len(added) <= 1
        assert root.level == logging.DEBUG
    finally:
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
        root.setLevel(level)
