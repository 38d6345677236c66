"""Dependency helpers shared across FastAPI routes.

Configuration and the entry store live on ``app.state`` (set by ``create_app``);
so does the summary backend, which is shared across requests.
"""

from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request

from src.work_record import (
    BackendError,
    Config,
    ConfigurationError,
    EntryStore,
    InvalidRangeError,
    MissingDateError,
    NoLogsError,
    NotFoundError,
    SummaryBackend,
    SummaryPipeline,
    TransportError,
)

logger = logging.getLogger(__name__)


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_entry_store(request: Request) -> EntryStore:
    return request.app.state.entry_store


def get_backend(request: Request) -> SummaryBackend:
    """Shared backend built by create_app."""
    return request.app.state.backend


def get_pipeline(
    config: Config = Depends(get_config),
    store: EntryStore = Depends(get_entry_store),
    backend: SummaryBackend = Depends(get_backend),
) -> SummaryPipeline:
    return SummaryPipeline(store, backend, config.output_path)


def _status_for(exc: Exception) -> int:
    if isinstance(exc, (NotFoundError, NoLogsError)):
        return 404
    if isinstance(exc, (InvalidRangeError, MissingDateError, ValueError)):
        return 400
    if isinstance(exc, (BackendError, TransportError)):
        return 502
    return 500


def to_http_error(exc: Exception, action: str) -> HTTPException:
    """Convert a work-record error into an HTTPException with a typed payload."""
    status_code = _status_for(exc)
    if status_code >= 500:
        logger.exception("Failed to %s: %s", action, exc)
    else:
        logger.info("Rejected %s: %s", action, exc)

    detail = {"error": type(exc).__name__, "message": str(exc)}
    if isinstance(exc, NoLogsError):
        detail["code"] = "no_logs"
    if isinstance(exc, BackendError) and exc.status_code is not None:
        detail["backend_status"] = exc.status_code
    if isinstance(exc, ConfigurationError) and exc.backend:
        detail["backend"] = exc.backend
    return HTTPException(status_code=status_code, detail=detail)


__all__ = [
    "get_backend",
    "get_config",
    "get_entry_store",
    "get_pipeline",
    "to_http_error",
]
