"""
Credential & Session Service - registration, login and token checks for the itinerary services
"""
from contextlib import asynccontextmanager
from typing import Optional
import logging

import anyio.to_thread
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .auth import Authenticator
from .config import Settings, get_settings
from .db import Store
from .errors import register_error_handlers
from .routes import credentials, health
from .utils.event_logger import configure_event_log

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    configure_event_log(settings.LOG_DIR)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Size the worker pool and create tables on startup"""
    # sync handlers (and the slow hash inside them) run on this pool
    anyio.to_thread.current_default_thread_limiter().total_tokens = app.state.settings.WORKER_THREADS
    app.state.store.init_db()
    yield
    app.state.store.dispose()


def create_app(settings: Optional[Settings] = None, store: Optional[Store] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Credential Service",
        description="Credential & Session Service for the itinerary platform",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.store = store or Store.from_settings(settings)
    app.state.authenticator = Authenticator(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.URL_CORS],
        allow_methods=["GET", "POST", "PATCH"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_error_handlers(app)
    app.include_router(credentials.router)
    app.include_router(health.router)
    return app


app = create_app()


def run() -> None:
    settings = app.state.settings
    logger.info("Listening on port %s", settings.PORT_AUTH)
    uvicorn.run(app, host=settings.HOST_AUTH, port=settings.PORT_AUTH, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
