"""Work log endpoints."""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Dict

from fastapi import Depends, FastAPI, HTTPException

from src.work_record import EntryStore, LogEntry, RangeAggregator, WorkRecordError

from ..dependencies import get_entry_store, to_http_error
from ..schemas import (
    LogEntryCreateRequest,
    LogEntryModel,
    LogFilesResponse,
    RawLogsResponse,
)


def register_log_routes(app: FastAPI) -> None:
    """Register work log CRUD endpoints."""

    @app.get("/api/logs/files", response_model=LogFilesResponse)
    async def list_log_files(store: EntryStore = Depends(get_entry_store)) -> LogFilesResponse:
        """List partition files, newest first."""
        try:
            files = await asyncio.to_thread(store.list_files)
            return LogFilesResponse(files=files)
        except WorkRecordError as exc:
            raise to_http_error(exc, "list log files") from exc

    @app.get("/api/logs", response_model=RawLogsResponse)
    async def get_raw_logs(
        start_date: date,
        end_date: date,
        store: EntryStore = Depends(get_entry_store),
    ) -> RawLogsResponse:
        """Return entries grouped by date for a range, without summarizing."""
        try:
            logs = await asyncio.to_thread(
                RangeAggregator(store).collect, start_date, end_date
            )
        except WorkRecordError as exc:
            raise to_http_error(exc, "collect logs") from exc
        return RawLogsResponse(
            start_date=start_date,
            end_date=end_date,
            logs={
                day: [LogEntryModel.from_entry(entry) for entry in entries]
                for day, entries in logs.items()
            },
        )

    @app.get("/api/logs/{entry_date}", response_model=list[LogEntryModel])
    async def get_log_entries(
        entry_date: date, store: EntryStore = Depends(get_entry_store)
    ) -> list[LogEntryModel]:
        """Entries recorded on one date, in insertion order."""
        try:
            entries = await asyncio.to_thread(store.entries_for_date, entry_date)
        except WorkRecordError as exc:
            raise to_http_error(exc, "read log entries") from exc
        return [LogEntryModel.from_entry(entry) for entry in entries]

    @app.post("/api/logs", response_model=LogEntryModel)
    async def add_log_entry(
        request: LogEntryCreateRequest, store: EntryStore = Depends(get_entry_store)
    ) -> LogEntryModel:
        """Add a new entry."""
        try:
            entry = LogEntry.create(
                request.content, request.source, request.tags, on_date=request.date
            )
            await asyncio.to_thread(store.add_entry, entry)
        except (ValueError, WorkRecordError) as exc:
            raise to_http_error(exc, "add log entry") from exc
        return LogEntryModel.from_entry(entry)

    @app.put("/api/logs/{entry_id}", response_model=LogEntryModel)
    async def update_log_entry(
        entry_id: str,
        request: LogEntryModel,
        store: EntryStore = Depends(get_entry_store),
    ) -> LogEntryModel:
        """Replace an existing entry in place."""
        if request.id != entry_id:
            raise HTTPException(status_code=400, detail="Entry id does not match path")
        try:
            await asyncio.to_thread(store.update_entry, request.to_entry())
        except (ValueError, WorkRecordError) as exc:
            raise to_http_error(exc, "update log entry") from exc
        return request

    @app.delete("/api/logs/{entry_date}/{entry_id}")
    async def delete_log_entry(
        entry_date: date,
        entry_id: str,
        store: EntryStore = Depends(get_entry_store),
    ) -> Dict[str, bool]:
        """Delete an entry; the partition file goes away with its last entry."""
        try:
            await asyncio.to_thread(store.delete_entry, entry_id, entry_date)
        except WorkRecordError as exc:
            raise to_http_error(exc, "delete log entry") from exc
        return {"deleted": True}
