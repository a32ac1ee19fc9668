"""GitLab webhook receiver and IRC relay, wired together here."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI

from gitlab_irc.config import Settings, configure_logging, settings
from gitlab_irc.routers import info, notify
from gitlab_irc.services.delivery import build_sink
from gitlab_irc.services.dispatcher import DeliverySink, Dispatcher
from gitlab_irc.services.routing import all_destinations, load_routing_table

logger = logging.getLogger(__name__)

SinkFactory = Callable[[Settings], DeliverySink]


def create_app(
    config: Settings = settings, sink_factory: Optional[SinkFactory] = None
) -> FastAPI:
    """
    Build the FastAPI app.

    Startup loads the channel mapping, connects the delivery sink and joins
    every mapped destination. Any failure there aborts startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(config.log_level)
        table = load_routing_table(config.channel_mapping)
        sink = (sink_factory or build_sink)(config)
        await sink.start()
        await sink.join(all_destinations(table))

        app.state.config = config
        app.state.routing_table = table
        app.state.dispatcher = Dispatcher(
            table,
            sink,
            hash_width=config.hash_width,
            max_commits=config.max_commits,
        )
        try:
            yield
        finally:
            await sink.close()

    application = FastAPI(title="GitLab → IRC notifier", lifespan=lifespan)
    application.include_router(info.router)
    application.include_router(notify.router)
    return application


app = create_app()
