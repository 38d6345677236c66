"""RangeAggregator と整形関数のテスト"""

from datetime import date, datetime

import pytest

from src.work_record.aggregator import RangeAggregator, count_entries, date_span, format_raw_logs
from src.work_record.entry_store import EntryStore
from src.work_record.exceptions import InvalidRangeError
from src.work_record.models import LogEntry


def make_entry(day: date, content: str, entry_id: str, tags=None) -> LogEntry:
    moment = datetime(day.year, day.month, day.day, 10).astimezone()
    return LogEntry(id=entry_id, content=content, created_at=moment.isoformat(), tags=tags or [])


@pytest.fixture
def store(tmp_path):
    store = EntryStore(tmp_path)
    store.add_entry(make_entry(date(2024, 6, 1), "範囲外", "a"))
    store.add_entry(make_entry(date(2024, 6, 3), "資料作成", "b"))
    store.add_entry(make_entry(date(2024, 6, 3), "レビュー", "c", tags=["review"]))
    store.add_entry(make_entry(date(2024, 6, 5), "リリース", "d"))
    return store


def test_collect_is_sparse_and_ascending(store):
    logs = RangeAggregator(store).collect(date(2024, 6, 2), date(2024, 6, 5))

    assert list(logs) == ["2024-06-03", "2024-06-05"]
    assert [e.content for e in logs["2024-06-03"]] == ["資料作成", "レビュー"]
    assert count_entries(logs) == 3


def test_collect_includes_both_ends(store):
    logs = RangeAggregator(store).collect("2024-06-01", "2024-06-01")
    assert list(logs) == ["2024-06-01"]


def test_collect_empty_range(store):
    assert RangeAggregator(store).collect(date(2024, 7, 1), date(2024, 7, 31)) == {}


def test_collect_rejects_inverted_range(tmp_path):
    missing_dir = tmp_path / "never-created"
    with pytest.raises(InvalidRangeError):
        RangeAggregator(EntryStore(missing_dir)).collect(date(2024, 6, 5), date(2024, 6, 1))
    assert not missing_dir.exists()


def test_format_raw_logs_newest_first(store):
    logs = RangeAggregator(store).collect(date(2024, 6, 1), date(2024, 6, 5))
    text = format_raw_logs(logs, title="6月第1週")

    assert text.startswith("# 6月第1週\n")
    assert text.index("## 2024-06-05") < text.index("## 2024-06-03") < text.index("## 2024-06-01")
    assert "- レビュー [review]" in text


def test_format_raw_logs_empty():
    assert format_raw_logs({}) == ""


def test_date_span():
    assert date_span(date(2024, 6, 8), date(2024, 6, 15)) == 8
    assert date_span(date(2024, 6, 15), date(2024, 6, 15)) == 1
