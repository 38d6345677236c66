"""作業ログと要約のデータモデル

関連クラス:
  - entry_store.EntryStore: LogEntry を日別ファイルに永続化
  - pipeline.SummaryPipeline: SummaryConfig から SummaryArtifact を生成
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


def parse_timestamp(value: str) -> datetime:
    # Python 3.10 の fromisoformat は末尾の "Z" を受け付けない
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@dataclass(slots=True)
class LogEntry:
    """1件の作業ログ

    created_at がどの日付ファイルに属するかを決める唯一の値。
    timestamp は同じ瞬間のローカル表記で、表示用にのみ使う。
    """

    id: str
    content: str
    created_at: str  # RFC 3339（オフセット付き）
    source: str = "manual"  # manual, git-commit など
    tags: List[str] = field(default_factory=list)
    timestamp: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.content or not self.content.strip():
            raise ValueError("log entry content must not be empty")

    @classmethod
    def create(
        cls,
        content: str,
        source: str = "manual",
        tags: Optional[List[str]] = None,
        *,
        on_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> "LogEntry":
        """新しいログを作成

        Args:
            content: ログ内容
            source: 記録元
            tags: タグ
            on_date: 指定日に記録する場合の日付（時刻は現在のローカル時刻）
            now: 現在時刻（テスト用に注入可能）
        """
        current = (now or datetime.now(timezone.utc)).astimezone()
        if on_date is not None:
            current = datetime.combine(on_date, current.time()).astimezone()
        return cls(
            id=str(int(current.timestamp() * 1000)),
            content=content,
            created_at=current.astimezone(timezone.utc).isoformat(),
            source=source,
            tags=list(tags or []),
            timestamp=current.isoformat(),
        )

    @property
    def created_at_local(self) -> datetime:
        return parse_timestamp(self.created_at).astimezone()

    def partition_date(self) -> date:
        """created_at をローカル時刻に変換した日付（日別ファイルのキー）"""
        return self.created_at_local.date()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "content": self.content,
            "created_at": self.created_at,
            "source": self.source,
            "tags": list(self.tags),
        }
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogEntry":
        return cls(
            id=str(data["id"]),
            content=data["content"],
            created_at=data["created_at"],
            source=data.get("source", "manual"),
            tags=list(data.get("tags") or []),
            timestamp=data.get("timestamp"),
        )


class SummaryKind(str, Enum):
    """要約の種類"""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: Union[str, int, "SummaryKind"]) -> "SummaryKind":
        """名前・値・旧来の数値コード(0-3)から変換"""
        if isinstance(value, SummaryKind):
            return value
        if isinstance(value, int) or (isinstance(value, str) and value.isdigit()):
            codes = [cls.WEEKLY, cls.MONTHLY, cls.QUARTERLY]
            code = int(value)
            return codes[code] if 0 <= code < len(codes) else cls.CUSTOM
        normalized = value.strip().lower()
        for kind in cls:
            if normalized in (kind.value, kind.name.lower()):
                return kind
        raise ValueError(f"unknown summary kind: {value}")


@dataclass
class SummaryConfig:
    """要約生成の設定"""

    kind: SummaryKind
    start_date: Optional[date] = None  # CUSTOM の場合のみ使用
    end_date: Optional[date] = None
    title: str = ""


@dataclass
class SummaryArtifact:
    """生成された要約と保存先

    saved=False の場合はファイル保存に失敗したが text は有効。
    """

    text: str
    filename: str
    path: Path
    start_date: date
    end_date: date
    saved: bool = True
    save_error: Optional[str] = None


class SummaryEventType(str, Enum):
    START = "start"
    PROCESSING = "processing"
    CHUNK = "chunk"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(slots=True)
class SummaryEvent:
    """ストリーミング生成の進捗通知

    artifact / error は呼び出し側のための値で、to_dict() には含めない。
    """

    type: SummaryEventType
    data: Dict[str, Any] = field(default_factory=dict)
    artifact: Optional[SummaryArtifact] = None
    error: Optional[Exception] = None

    @property
    def terminal(self) -> bool:
        return self.type in (SummaryEventType.COMPLETE, SummaryEventType.ERROR)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, **self.data}
