"""Pydantic schemas for the FastAPI server."""

from __future__ import annotations

import datetime as dt
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from src.work_record import LogEntry, SummaryArtifact, SummaryKind


class HealthResponse(BaseModel):
    """Response for health check endpoint."""

    status: str


class LogEntryModel(BaseModel):
    """Single work log entry as stored on disk."""

    id: str
    content: str = Field(..., min_length=1)
    created_at: str = Field(..., description="RFC 3339 timestamp with offset")
    source: str = "manual"
    tags: List[str] = Field(default_factory=list)
    timestamp: Optional[str] = None

    @classmethod
    def from_entry(cls, entry: LogEntry) -> "LogEntryModel":
        return cls(**entry.to_dict())

    def to_entry(self) -> LogEntry:
        return LogEntry.from_dict(self.model_dump())


class LogEntryCreateRequest(BaseModel):
    """Request body for adding a log entry."""

    content: str = Field(..., min_length=1, description="Log text")
    source: str = Field(default="manual", description="Provenance tag (manual, git-commit, ...)")
    tags: List[str] = Field(default_factory=list)
    date: Optional[dt.date] = Field(
        default=None, description="Record on this local date instead of today"
    )


class LogFilesResponse(BaseModel):
    """Partition file names, newest first."""

    files: List[str]


class RawLogsResponse(BaseModel):
    """Entries grouped by date for a range, without summarization."""

    start_date: dt.date
    end_date: dt.date
    logs: Dict[str, List[LogEntryModel]]


class SummaryRequest(BaseModel):
    """Request body for summary generation."""

    kind: SummaryKind = Field(default=SummaryKind.WEEKLY)
    start_date: Optional[dt.date] = Field(default=None, description="Required for custom")
    end_date: Optional[dt.date] = Field(default=None, description="Required for custom")
    title: str = ""


class SummaryResponse(BaseModel):
    """Generated summary and where it was saved."""

    text: str
    filename: str
    path: str
    saved: bool
    save_error: Optional[str] = None
    start_date: dt.date
    end_date: dt.date

    @classmethod
    def from_artifact(cls, artifact: SummaryArtifact) -> "SummaryResponse":
        return cls(
            text=artifact.text,
            filename=artifact.filename,
            path=str(artifact.path),
            saved=artifact.saved,
            save_error=artifact.save_error,
            start_date=artifact.start_date,
            end_date=artifact.end_date,
        )
