"""期間内の作業ログを日付ごとに集約"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Dict, List

from .entry_store import DateLike, EntryStore, coerce_date
from .exceptions import InvalidRangeError
from .models import LogEntry

logger = logging.getLogger(__name__)


class RangeAggregator:
    """開始日から終了日（両端含む）までのログを {YYYY-MM-DD: [LogEntry]} に集める

    ログの無い日は結果に含めない。
    """

    def __init__(self, store: EntryStore):
        self.store = store

    def collect(self, start_date: DateLike, end_date: DateLike) -> Dict[str, List[LogEntry]]:
        start = coerce_date(start_date)
        end = coerce_date(end_date)
        if start > end:
            raise InvalidRangeError(start, end)

        result: Dict[str, List[LogEntry]] = {}
        current = start
        while current <= end:
            entries = self.store.entries_for_date(current)
            if entries:
                result[current.isoformat()] = entries
            current += timedelta(days=1)

        logger.debug(
            f"Collected {sum(len(v) for v in result.values())} entries "
            f"over {len(result)} days ({start.isoformat()} - {end.isoformat()})"
        )
        return result


def format_raw_logs(logs: Dict[str, List[LogEntry]], title: str = "") -> str:
    """集約結果をそのまま読める形に整形（新しい日付が先）"""
    lines: List[str] = []
    if title:
        lines.append(f"# {title}")
        lines.append("")

    for day in sorted(logs, reverse=True):
        lines.append(f"## {day}")
        for entry in logs[day]:
            tag_str = f" [{', '.join(entry.tags)}]" if entry.tags else ""
            lines.append(f"- {entry.content}{tag_str}")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n" if lines else ""


def count_entries(logs: Dict[str, List[LogEntry]]) -> int:
    return sum(len(entries) for entries in logs.values())


def date_span(start: date, end: date) -> int:
    """両端を含む日数"""
    return (end - start).days + 1
