"""データモデルのテスト"""

from datetime import date, datetime, timezone

import pytest

from src.work_record.models import (
    LogEntry,
    SummaryEvent,
    SummaryEventType,
    SummaryKind,
    parse_timestamp,
)


def test_create_sets_identity_and_timestamps():
    now = datetime(2024, 6, 10, 3, 0, tzinfo=timezone.utc)
    entry = LogEntry.create("朝会", tags=["meeting"], now=now)

    assert entry.id == str(int(now.timestamp() * 1000))
    assert parse_timestamp(entry.created_at) == now
    assert entry.created_at.endswith("+00:00")
    assert entry.source == "manual"
    assert entry.tags == ["meeting"]
    assert parse_timestamp(entry.timestamp) == now


def test_create_on_date_uses_that_local_date():
    entry = LogEntry.create("過去の作業", on_date=date(2024, 1, 15))
    assert entry.partition_date() == date(2024, 1, 15)


def test_partition_date_follows_local_time():
    moment = datetime(2024, 6, 10, 23, 30).astimezone()
    entry = LogEntry(id="1", content="深夜作業", created_at=moment.astimezone(timezone.utc).isoformat())
    assert entry.partition_date() == date(2024, 6, 10)


def test_empty_content_rejected():
    with pytest.raises(ValueError):
        LogEntry(id="1", content="   ", created_at="2024-06-10T00:00:00+00:00")


def test_dict_round_trip_and_optional_timestamp():
    data = {
        "id": 1718000000000,
        "content": "作業",
        "created_at": "2024-06-10T06:13:20Z",
    }
    entry = LogEntry.from_dict(data)

    assert entry.id == "1718000000000"
    assert entry.source == "manual"
    assert entry.tags == []
    assert "timestamp" not in entry.to_dict()
    assert LogEntry.from_dict(entry.to_dict()) == entry


def test_parse_timestamp_accepts_z_suffix():
    assert parse_timestamp("2024-06-10T00:00:00Z") == datetime(2024, 6, 10, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("weekly", SummaryKind.WEEKLY),
        ("Monthly", SummaryKind.MONTHLY),
        ("QUARTERLY", SummaryKind.QUARTERLY),
        (0, SummaryKind.WEEKLY),
        ("2", SummaryKind.QUARTERLY),
        (3, SummaryKind.CUSTOM),
        (SummaryKind.CUSTOM, SummaryKind.CUSTOM),
    ],
)
def test_summary_kind_parse(value, expected):
    assert SummaryKind.parse(value) is expected


def test_summary_kind_parse_unknown():
    with pytest.raises(ValueError):
        SummaryKind.parse("yearly")


def test_summary_event_dict_excludes_internal_fields():
    event = SummaryEvent(SummaryEventType.ERROR, {"message": "x"}, error=RuntimeError("x"))
    assert event.terminal
    assert event.to_dict() == {"type": "error", "message": "x"}
    assert not SummaryEvent(SummaryEventType.CHUNK, {"text": "a"}).terminal
