"""Run the notifier with uvicorn: ``python -m gitlab_irc``."""

from __future__ import annotations

import uvicorn

from gitlab_irc.config import settings


def main() -> None:
    uvicorn.run(
        "gitlab_irc.app:app",
        host=settings.listen_host,
        port=settings.listen_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
