"""
Server entrypoint: connect to MongoDB, then serve HTTP, then seed. Run from project root:

  python -m library_api.server

or through the installed `library-api` script. Exits 1 when the configuration
is invalid or the database cannot be reached; the port is never bound then.
"""

import logging
import socket
import sys

import uvicorn
from dotenv import load_dotenv
from pydantic import ValidationError

from library_api.core.config import Settings, get_settings
from library_api.core.context import AppContext, StartupState
from library_api.core.database import DatabaseConnectionError, connect, ensure_indexes, get_database
from library_api.main import create_app

logger = logging.getLogger(__name__)


class LibraryServer(uvicorn.Server):
    """uvicorn server that starts the seed task once the socket is listening."""

    def __init__(self, config: uvicorn.Config, context: AppContext) -> None:
        super().__init__(config)
        self.context = context

    async def startup(self, sockets: list[socket.socket] | None = None) -> None:
        await super().startup(sockets=sockets)
        if self.should_exit:
            return
        self.context.state = StartupState.LISTENING
        logger.info("Server running at http://localhost:%s", self.config.port)
        self.context.start_seed()

    async def shutdown(self, sockets: list[socket.socket] | None = None) -> None:
        await super().shutdown(sockets=sockets)
        await self.context.finish_seed()


def run(settings: Settings) -> int:
    """Drive the startup sequence to completion; returns the process exit status."""
    logger.info("Startup state: %s", StartupState.CONNECTING.value)
    try:
        client = connect(settings)
    except DatabaseConnectionError as e:
        logger.error("Startup state: %s (%s)", StartupState.FAILED.value, e.message)
        return 1
    logger.info("Connected to MongoDB")

    db = get_database(client, settings)
    ensure_indexes(db)
    context = AppContext(settings=settings, client=client, db=db)
    try:
        config = uvicorn.Config(
            create_app(context),
            host=settings.HOST,
            port=settings.PORT,
            log_level=settings.LOG_LEVEL.lower(),
            log_config=None,
        )
        server = LibraryServer(config, context)
        server.run()
    finally:
        context.close()
    if not server.started:
        logger.error("Server stopped before it started serving")
        return 1
    return 0


def main() -> int:
    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )
    try:
        settings = get_settings()
    except ValidationError as e:
        logger.error("Invalid configuration: %s", e)
        return 1
    logging.getLogger().setLevel(settings.LOG_LEVEL.upper())
    return run(settings)


if __name__ == "__main__":
    sys.exit(main())
