"""Runtime settings, read from the environment (and an optional .env file)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """App Settings"""

    irc_host: str = os.getenv("IRC_HOST", "irc.hackint.org")
    irc_port: int = int(os.getenv("IRC_PORT", "6697"))
    irc_nickname: str = os.getenv("IRC_NICKNAME", "go-gitlab-irc")
    irc_gecos: str = os.getenv("IRC_GECOS", "go-gitlab-irc")
    # empty string means "use the system trust store"
    irc_cafile: str = os.getenv("IRC_CAFILE", "hackint-rootca.crt")
    irc_use_tls: bool = _env_bool("IRC_USE_TLS", "true")
    channel_mapping: str = os.getenv("CHANNEL_MAPPING", "channelmapping.yml")
    sink: str = os.getenv("DELIVERY_SINK", "irc").strip().lower()
    telegram_bot_token: str = os.getenv("TELEGRAM_BOT_TOKEN", "")
    hash_width: int = int(os.getenv("HASH_WIDTH", "7"))
    max_commits: int = int(os.getenv("MAX_COMMITS", "3"))
    listen_host: str = os.getenv("LISTEN_HOST", "0.0.0.0")
    listen_port: int = int(os.getenv("LISTEN_PORT", "8084"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()


def configure_logging(level: str | int = "INFO") -> None:
    """Install a stream handler on the root logger (once) and set its level."""
    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
