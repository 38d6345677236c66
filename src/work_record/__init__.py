"""Work log recording and period summaries shared across the CLI and server."""

from .aggregator import RangeAggregator, format_raw_logs
from .backends import LocalModelBackend, RemoteApiBackend, SummaryBackend, create_backend
from .config import Config
from .entry_store import EntryStore
from .exceptions import (
    BackendError,
    BackendResponseError,
    ConfigurationError,
    InvalidRangeError,
    MissingDateError,
    NoLogsError,
    NotFoundError,
    StorageError,
    TransportError,
    WorkRecordError,
)
from .models import LogEntry, SummaryArtifact, SummaryConfig, SummaryEvent, SummaryKind
from .pipeline import SummaryPipeline

__all__ = [
    "BackendError",
    "BackendResponseError",
    "Config",
    "ConfigurationError",
    "EntryStore",
    "InvalidRangeError",
    "LocalModelBackend",
    "LogEntry",
    "MissingDateError",
    "NoLogsError",
    "NotFoundError",
    "RangeAggregator",
    "RemoteApiBackend",
    "StorageError",
    "SummaryArtifact",
    "SummaryBackend",
    "SummaryConfig",
    "SummaryEvent",
    "SummaryKind",
    "SummaryPipeline",
    "TransportError",
    "WorkRecordError",
    "create_backend",
    "format_raw_logs",
]
