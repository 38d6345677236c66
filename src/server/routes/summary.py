"""Summary generation endpoints."""

from __future__ import annotations

import json
from typing import AsyncIterator

from fastapi import Depends, FastAPI
from fastapi.responses import StreamingResponse

from src.work_record import SummaryConfig, SummaryPipeline, WorkRecordError

from ..dependencies import get_pipeline, to_http_error
from ..schemas import SummaryRequest, SummaryResponse


def _to_config(request: SummaryRequest) -> SummaryConfig:
    return SummaryConfig(
        kind=request.kind,
        start_date=request.start_date,
        end_date=request.end_date,
        title=request.title,
    )


def register_summary_routes(app: FastAPI) -> None:
    """Register summary endpoints (buffered and streaming)."""

    @app.post("/api/summary", response_model=SummaryResponse)
    async def generate_summary(
        request: SummaryRequest, pipeline: SummaryPipeline = Depends(get_pipeline)
    ) -> SummaryResponse:
        """Generate a summary and return the full text."""
        try:
            artifact = await pipeline.generate(_to_config(request))
        except WorkRecordError as exc:
            raise to_http_error(exc, "generate summary") from exc
        return SummaryResponse.from_artifact(artifact)

    @app.post("/api/summary/stream")
    async def stream_summary(
        request: SummaryRequest, pipeline: SummaryPipeline = Depends(get_pipeline)
    ) -> StreamingResponse:
        """Stream progress events as newline-delimited JSON.

        Events arrive as start, processing, chunk*, then one complete or error.
        """
        config = _to_config(request)

        async def _events() -> AsyncIterator[str]:
            async for event in pipeline.iter_events(config):
                yield json.dumps(event.to_dict(), ensure_ascii=False) + "\n"

        return StreamingResponse(_events(), media_type="application/x-ndjson")
