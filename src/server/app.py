"""FastAPI application bootstrap."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.work_record import Config, EntryStore, create_backend

from .routes import (
    register_health_routes,
    register_log_routes,
    register_summary_routes,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    await app.state.backend.aclose()


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    The summary backend is built once here and shared by every request;
    its connections are closed when the application shuts down.
    """
    config = config or Config.load()

    app = FastAPI(title="Work Record API", version="0.1.0", lifespan=lifespan)
    app.state.config = config
    app.state.entry_store = EntryStore(config.storage_path)
    app.state.backend = create_backend(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_health_routes(app)
    register_log_routes(app)
    register_summary_routes(app)

    return app
