"""Application context shared by the startup sequence and request handlers."""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum

from fastapi import Request
from pymongo import MongoClient
from pymongo.database import Database

from library_api.core.config import Settings
from library_api.services.seed import SeedOutcome, seed_librarian

logger = logging.getLogger(__name__)


class StartupState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    LISTENING = "listening"
    SEEDED = "seeded"
    FAILED = "failed"


@dataclass
class AppContext:
    """
    Everything a running server owns: settings, the Mongo client and database,
    the startup state and the background seed task.

    Built once by the entry point after the database connection succeeds and
    attached to the FastAPI app as app.state.context.
    """

    settings: Settings
    client: MongoClient
    db: Database
    state: StartupState = StartupState.CONNECTED
    seed_task: "asyncio.Task[SeedOutcome] | None" = field(default=None, repr=False)

    def start_seed(self) -> "asyncio.Task[SeedOutcome]":
        """Schedule the librarian seed on a worker thread. Must run inside the event loop."""
        if self.seed_task is None:
            self.seed_task = asyncio.create_task(
                asyncio.to_thread(seed_librarian, self.db),
                name="seed-librarian",
            )
            self.seed_task.add_done_callback(self._on_seed_done)
        return self.seed_task

    def _on_seed_done(self, task: "asyncio.Task[SeedOutcome]") -> None:
        self.state = StartupState.SEEDED
        if task.cancelled():
            logger.error("Seed routine was cancelled before finishing")
        elif task.exception() is not None:
            logger.error("Seed routine crashed", exc_info=task.exception())
        else:
            logger.info("Seed routine finished: %s", task.result().value)

    async def wait_until_seeded(self) -> SeedOutcome | None:
        """Await the seed task; None if seeding was never started."""
        if self.seed_task is None:
            return None
        return await self.seed_task

    async def finish_seed(self) -> None:
        """Wait for an in-flight seed so the client is not closed under it."""
        if self.seed_task is not None and not self.seed_task.done():
            await asyncio.wait({self.seed_task})

    def close(self) -> None:
        self.client.close()


def get_context(request: Request) -> AppContext:
    """Dependency: the AppContext of the app serving this request."""
    return request.app.state.context


def get_db(request: Request) -> Database:
    """Dependency: the shared MongoDB database handle."""
    return get_context(request).db


def get_app_settings(request: Request) -> Settings:
    """Dependency: the settings the server was started with."""
    return get_context(request).settings
