import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lunchbell.config import get_settings
from lunchbell.infrastructure.database import engine, initialize_database
from lunchbell.infrastructure.notifications import StreamRegistry
from lunchbell.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the tables and stream registry on startup, release them on shutdown."""

    initialize_database()
    app.state.stream_registry = StreamRegistry()
    yield
    registry: StreamRegistry = app.state.stream_registry
    logger.info("Closing %d notification streams", registry.active_count())
    registry.close_all()
    engine.dispose()


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Lunchbell", lifespan=lifespan)

    # Browser clients call the API from the ordering front end.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
