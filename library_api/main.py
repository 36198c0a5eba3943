"""FastAPI application factory. No business logic; only wiring and middleware."""

from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles

from library_api import __version__
from library_api.api import router as api_router
from library_api.core.context import AppContext
from library_api.core.cors import OriginGateMiddleware, OriginPolicy
from library_api.services.uploads import UPLOADS_URL_PREFIX


def create_app(context: AppContext) -> FastAPI:
    """Build the app around an already-connected context."""
    settings = context.settings
    app = FastAPI(
        title="Library API",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.context = context

    # Added first so it sits inside the origin gate.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        OriginGateMiddleware,
        policy=OriginPolicy.from_origins(
            settings.ALLOWED_ORIGINS,
            require_origin=settings.CORS_REQUIRE_ORIGIN,
        ),
    )

    uploads_dir = Path(settings.UPLOADS_DIR)
    uploads_dir.mkdir(parents=True, exist_ok=True)
    app.mount(UPLOADS_URL_PREFIX, StaticFiles(directory=uploads_dir), name="uploads")

    @app.get("/hello", response_class=PlainTextResponse)
    def hello() -> str:
        return "Hello world!"

    app.include_router(api_router, prefix=settings.API_PREFIX)
    return app
