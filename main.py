from contextlib import asynccontextmanager

from fastapi import FastAPI

from notification_engine.infrastructure.database import engine, initialize_database
from notification_engine.interfaces.api.routes import register_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup and release connections on shutdown."""

    initialize_database()
    yield
    engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(title="Notification Engine", lifespan=lifespan)
    register_routes(app)
    return app


app = create_app()
