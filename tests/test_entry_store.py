"""EntryStore の動作テスト"""

import json
import threading
from datetime import date, datetime

import pytest

from src.work_record.entry_store import EntryStore
from src.work_record.exceptions import (
    DuplicateEntryError,
    NotFoundError,
    PartitionFormatError,
)
from src.work_record.models import LogEntry


def make_entry(day: date, content: str, entry_id: str, hour: int = 12, **kwargs) -> LogEntry:
    """指定日のローカル時刻で LogEntry を作成"""
    moment = datetime(day.year, day.month, day.day, hour).astimezone()
    return LogEntry(id=entry_id, content=content, created_at=moment.isoformat(), **kwargs)


def test_entries_for_missing_date_is_empty(tmp_path):
    store = EntryStore(tmp_path / "logs")
    assert store.entries_for_date(date(2024, 6, 10)) == []
    assert store.list_partitions() == []


def test_add_keeps_insertion_order(tmp_path):
    store = EntryStore(tmp_path)
    day = date(2024, 6, 10)

    store.add_entry(make_entry(day, "設計レビュー", "1", hour=15))
    store.add_entry(make_entry(day, "朝会", "2", hour=9))
    store.add_entry(make_entry(day, "実装", "3", hour=11, tags=["api"]))

    entries = store.entries_for_date(day)
    assert [e.id for e in entries] == ["1", "2", "3"]
    assert entries[2].tags == ["api"]
    assert (tmp_path / "2024-06-10.json").exists()


def test_round_trip_preserves_fields(tmp_path):
    store = EntryStore(tmp_path)
    day = date(2024, 6, 10)
    entry = make_entry(day, "ドキュメント更新", "42", source="git-commit", tags=["a", "b"])

    store.add_entry(entry)

    assert store.entries_for_date("2024-06-10") == [entry]
    raw = json.loads((tmp_path / "2024-06-10.json").read_text(encoding="utf-8"))
    assert raw == [entry.to_dict()]


def test_update_replaces_in_place(tmp_path):
    store = EntryStore(tmp_path)
    day = date(2024, 6, 10)
    for i in range(3):
        store.add_entry(make_entry(day, f"作業{i}", str(i)))

    original = store.entries_for_date(day)[1]
    changed = LogEntry.from_dict({**original.to_dict(), "content": "修正後"})
    store.update_entry(changed)

    entries = store.entries_for_date(day)
    assert [e.id for e in entries] == ["0", "1", "2"]
    assert entries[1].content == "修正後"
    assert entries[1].created_at == original.created_at


def test_update_unknown_id_leaves_file_untouched(tmp_path):
    store = EntryStore(tmp_path)
    day = date(2024, 6, 10)
    store.add_entry(make_entry(day, "作業", "1"))
    path = store.partition_path(day)
    before = path.read_bytes()

    with pytest.raises(NotFoundError) as excinfo:
        store.update_entry(make_entry(day, "存在しない", "999"))

    assert excinfo.value.entry_id == "999"
    assert excinfo.value.date == day
    assert path.read_bytes() == before


def test_update_missing_partition_raises(tmp_path):
    store = EntryStore(tmp_path)
    with pytest.raises(NotFoundError) as excinfo:
        store.update_entry(make_entry(date(2024, 6, 10), "作業", "1"))
    assert excinfo.value.entry_id is None


def test_delete_last_entry_removes_partition(tmp_path):
    store = EntryStore(tmp_path)
    day = date(2024, 6, 10)
    store.add_entry(make_entry(day, "一件目", "1"))
    store.add_entry(make_entry(day, "二件目", "2"))

    store.delete_entry("1", day)
    assert [e.id for e in store.entries_for_date(day)] == ["2"]

    store.delete_entry("2", day)
    assert not store.partition_path(day).exists()
    assert store.list_files() == []


def test_delete_unknown_id_raises(tmp_path):
    store = EntryStore(tmp_path)
    day = date(2024, 6, 10)
    store.add_entry(make_entry(day, "作業", "1"))

    with pytest.raises(NotFoundError):
        store.delete_entry("2", day)
    with pytest.raises(NotFoundError):
        store.delete_entry("1", date(2024, 6, 11))
    assert len(store.entries_for_date(day)) == 1


def test_list_partitions_newest_first(tmp_path):
    store = EntryStore(tmp_path)
    for day in (date(2024, 6, 9), date(2024, 6, 11), date(2024, 5, 30)):
        store.add_entry(make_entry(day, "作業", day.isoformat()))
    (tmp_path / "notes.json").write_text("[]", encoding="utf-8")
    (tmp_path / "2024-06-12.txt").write_text("", encoding="utf-8")

    assert store.list_partitions() == ["2024-06-11", "2024-06-09", "2024-05-30"]
    assert store.list_files() == ["2024-06-11.json", "2024-06-09.json", "2024-05-30.json"]


def test_corrupt_partition_raises_on_read_and_add(tmp_path):
    store = EntryStore(tmp_path)
    day = date(2024, 6, 10)
    path = store.partition_path(day)
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(PartitionFormatError):
        store.entries_for_date(day)
    with pytest.raises(PartitionFormatError):
        store.add_entry(make_entry(day, "作業", "1"))

    assert path.read_text(encoding="utf-8") == "{not json"


def test_non_array_partition_is_malformed(tmp_path):
    store = EntryStore(tmp_path)
    store.partition_path(date(2024, 6, 10)).write_text('{"id": "1"}', encoding="utf-8")

    with pytest.raises(PartitionFormatError):
        store.entries_for_date(date(2024, 6, 10))


def test_duplicate_id_rejected(tmp_path):
    store = EntryStore(tmp_path)
    day = date(2024, 6, 10)
    store.add_entry(make_entry(day, "作業", "1"))

    with pytest.raises(DuplicateEntryError):
        store.add_entry(make_entry(day, "別の作業", "1"))
    assert len(store.entries_for_date(day)) == 1


def test_concurrent_adds_are_not_lost(tmp_path):
    store = EntryStore(tmp_path)
    day = date(2024, 6, 10)
    errors = []

    def worker(index: int) -> None:
        try:
            store.add_entry(make_entry(day, f"並行{index}", str(index)))
        except Exception as exc:  # pragma: no cover - 失敗時の診断用
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(20)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert sorted(int(e.id) for e in store.entries_for_date(day)) == list(range(20))
    assert list(tmp_path.glob(".*.tmp")) == []
