"""
SummaryPipeline: 作業ログの期間要約を生成

処理の流れ:
1. 要約の種類から期間を決定
2. RangeAggregator で期間内のログを集約（0件なら NoLogsError）
3. 種類ごとの指示文 + ログ本文でプロンプトを構築
4. バックエンドで生成（一括 / ストリーミング）
5. 要約ファイルを保存して返す

1-4 のどこかで失敗した場合はファイルを書かない。
5 の保存に失敗しても生成済みのテキストは返す。

関連:
- src/work_record/aggregator.py: 期間集約
- src/work_record/backends/: LLM推論
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import AsyncIterator, Callable, Dict, List, Optional, Tuple, Union

from .aggregator import RangeAggregator, count_entries, date_span
from .backends import SummaryBackend
from .entry_store import EntryStore
from .exceptions import (
    InvalidRangeError,
    MissingDateError,
    NoLogsError,
    StorageError,
    WorkRecordError,
)
from .models import (
    LogEntry,
    SummaryArtifact,
    SummaryConfig,
    SummaryEvent,
    SummaryEventType,
    SummaryKind,
)
from .prompts import SYSTEM_PROMPT, build_summary_prompt

logger = logging.getLogger(__name__)

ROLLING = "rolling"
CALENDAR = "calendar"

_ROLLING_DAYS = {
    SummaryKind.WEEKLY: 7,
    SummaryKind.MONTHLY: 30,
    SummaryKind.QUARTERLY: 90,
}

_TITLE_LABELS = {
    SummaryKind.WEEKLY: "週次作業まとめ",
    SummaryKind.MONTHLY: "月次作業まとめ",
    SummaryKind.QUARTERLY: "四半期作業まとめ",
    SummaryKind.CUSTOM: "作業まとめ",
}

EventSink = Callable[[SummaryEvent], None]


def quarter_of(day: date) -> int:
    return (day.month - 1) // 3 + 1


def resolve_date_range(
    config: SummaryConfig, today: date, anchor: str = ROLLING
) -> Tuple[date, date]:
    """
    要約の種類から対象期間を決定

    Args:
        config: 要約設定
        today: 基準日（ローカル日付）
        anchor: "rolling"（今日から7/30/90日遡る）または
                "calendar"（直近7日間 / 今月初日 / 今四半期初日から）

    週次の開始日を「7日前」、四半期の開始日を「四半期の初日（1/4/7/10月1日）」と
    同時に満たす anchor はない。既定の rolling は週次の定義に合わせ、四半期は90日前になる。
    四半期の境界から集計したい場合は calendar を使う。どちらの anchor でも
    ファイル名の四半期番号は基準日の暦上の四半期。

    Returns:
        (開始日, 終了日)
    """
    if config.kind is SummaryKind.CUSTOM:
        if config.start_date is None:
            raise MissingDateError("start_date")
        if config.end_date is None:
            raise MissingDateError("end_date")
        if config.start_date > config.end_date:
            raise InvalidRangeError(config.start_date, config.end_date)
        return config.start_date, config.end_date

    if anchor == ROLLING:
        return today - timedelta(days=_ROLLING_DAYS[config.kind]), today

    if anchor == CALENDAR:
        if config.kind is SummaryKind.WEEKLY:
            return today - timedelta(days=6), today
        if config.kind is SummaryKind.MONTHLY:
            return today.replace(day=1), today
        quarter_month = (quarter_of(today) - 1) * 3 + 1
        return date(today.year, quarter_month, 1), today

    raise ValueError(f"unknown date range anchor: {anchor}")


def summary_filename(config: SummaryConfig, today: date) -> str:
    """要約ファイル名: <kind>_summary_<日付由来のサフィックス>.md"""
    if config.kind is SummaryKind.WEEKLY:
        return f"weekly_summary_{today.isoformat()}.md"
    if config.kind is SummaryKind.MONTHLY:
        return f"monthly_summary_{today.year}-{today.month}.md"
    if config.kind is SummaryKind.QUARTERLY:
        return f"quarterly_summary_{today.year}-Q{quarter_of(today)}.md"
    start = (config.start_date or today).isoformat()
    end = (config.end_date or today).isoformat()
    return f"custom_summary_{start}_{end}.md"


def default_title(kind: SummaryKind, start: date, end: date) -> str:
    return f"{_TITLE_LABELS[kind]}（{start.isoformat()} 〜 {end.isoformat()}）"


@dataclass
class _PreparedSummary:
    today: date
    start_date: date
    end_date: date
    logs: Dict[str, List[LogEntry]]
    prompt: str


class SummaryPipeline:
    """期間要約の生成パイプライン"""

    def __init__(
        self,
        store: EntryStore,
        backend: SummaryBackend,
        output_dir: Union[str, Path],
        *,
        anchor: str = ROLLING,
        system_prompt: str = SYSTEM_PROMPT,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        初期化

        Args:
            store: ログストア
            backend: 要約バックエンド
            output_dir: 要約ファイルの出力先
            anchor: 期間の決め方（"rolling" / "calendar"）
            system_prompt: バックエンドに渡すシステムプロンプト
            clock: 現在時刻を返す関数（テスト用にDI可能）
        """
        self.store = store
        self.aggregator = RangeAggregator(store)
        self.backend = backend
        self.output_dir = Path(output_dir).expanduser()
        self.anchor = anchor
        self.system_prompt = system_prompt
        self._clock = clock or datetime.now

    def today(self) -> date:
        return self._clock().date()

    def resolve(self, config: SummaryConfig) -> Tuple[date, date]:
        return resolve_date_range(config, self.today(), self.anchor)

    async def collect_logs(
        self, start_date: date, end_date: date
    ) -> Dict[str, List[LogEntry]]:
        """要約せずに期間内のログだけを取得"""
        return await asyncio.to_thread(self.aggregator.collect, start_date, end_date)

    async def _prepare(self, config: SummaryConfig) -> _PreparedSummary:
        today = self.today()
        start, end = resolve_date_range(config, today, self.anchor)
        self.backend.validate()

        logs = await self.collect_logs(start, end)
        if not logs:
            raise NoLogsError(start, end)

        logger.info(
            f"Summarizing {count_entries(logs)} entries ({config.kind.value}, "
            f"{start.isoformat()} - {end.isoformat()}) with {self.backend.name}"
        )
        return _PreparedSummary(
            today=today,
            start_date=start,
            end_date=end,
            logs=logs,
            prompt=build_summary_prompt(config.kind, logs),
        )

    def _write_artifact(self, path: Path, document: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(document, encoding="utf-8")
        except OSError as exc:
            raise StorageError(
                "cannot write summary", operation="save_summary", path=path, cause=exc
            ) from exc

    async def _persist(
        self, config: SummaryConfig, prepared: _PreparedSummary, text: str
    ) -> SummaryArtifact:
        filename = summary_filename(config, prepared.today)
        path = self.output_dir / filename
        title = config.title or default_title(
            config.kind, prepared.start_date, prepared.end_date
        )
        artifact = SummaryArtifact(
            text=text,
            filename=filename,
            path=path,
            start_date=prepared.start_date,
            end_date=prepared.end_date,
        )

        try:
            await asyncio.to_thread(self._write_artifact, path, f"# {title}\n\n{text}\n")
        except StorageError as exc:
            # 生成済みのテキストは破棄しない
            logger.error(f"Failed to save summary: {exc}")
            artifact.saved = False
            artifact.save_error = str(exc)
        else:
            logger.info(f"Saved summary to {path}")
        return artifact

    async def generate(self, config: SummaryConfig) -> SummaryArtifact:
        """一括生成"""
        prepared = await self._prepare(config)
        text = await self.backend.generate(prepared.prompt, self.system_prompt)
        return await self._persist(config, prepared, text)

    async def iter_events(self, config: SummaryConfig) -> AsyncIterator[SummaryEvent]:
        """
        ストリーミング生成の進捗を SummaryEvent として順に返す

        start → processing → chunk* → complete または error（終端イベントは必ず1つ）
        """
        yield SummaryEvent(SummaryEventType.START, {"kind": config.kind.value})

        try:
            prepared = await self._prepare(config)
            yield SummaryEvent(
                SummaryEventType.PROCESSING,
                {
                    "start_date": prepared.start_date.isoformat(),
                    "end_date": prepared.end_date.isoformat(),
                    "days": date_span(prepared.start_date, prepared.end_date),
                    "entry_count": count_entries(prepared.logs),
                },
            )

            parts: List[str] = []
            chunks = self.backend.stream(prepared.prompt, self.system_prompt)
            try:
                async for chunk in chunks:
                    parts.append(chunk)
                    yield SummaryEvent(SummaryEventType.CHUNK, {"text": chunk})
            finally:
                await chunks.aclose()
        except Exception as exc:
            if not isinstance(exc, WorkRecordError):
                logger.exception("Unexpected error during summary stream")
            yield SummaryEvent(
                SummaryEventType.ERROR,
                {
                    "error": type(exc).__name__,
                    "message": str(exc),
                    "user_facing": getattr(exc, "user_facing", False),
                },
                error=exc,
            )
            return

        artifact = await self._persist(config, prepared, "".join(parts))
        yield SummaryEvent(
            SummaryEventType.COMPLETE,
            {
                "text": artifact.text,
                "filename": artifact.filename,
                "saved": artifact.saved,
            },
            artifact=artifact,
        )

    async def generate_stream(self, config: SummaryConfig, sink: EventSink) -> SummaryArtifact:
        """
        ストリーミング生成

        各イベントを受信順に sink に渡す。失敗時は error イベントを渡した後に例外を送出する。
        """
        events = self.iter_events(config)
        try:
            async for event in events:
                sink(event)
                if event.type is SummaryEventType.ERROR:
                    raise event.error
                if event.type is SummaryEventType.COMPLETE:
                    return event.artifact
        finally:
            await events.aclose()
        raise RuntimeError("summary stream ended without a terminal event")
