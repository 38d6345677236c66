#!/usr/bin/env python3
"""
作業ログCLI

Usage:
    python -m src.work_record add "内容" [--source manual] [--tag TAG ...] [--date YYYY-MM-DD]
    python -m src.work_record list [--date YYYY-MM-DD] [--format json|text]
    python -m src.work_record files [--format json|text]
    python -m src.work_record update --id ID --date YYYY-MM-DD [--content "新内容"] [--tag TAG ...]
    python -m src.work_record delete --id ID --date YYYY-MM-DD
    python -m src.work_record logs --start-date YYYY-MM-DD --end-date YYYY-MM-DD
    python -m src.work_record summary [--type weekly|monthly|quarterly|custom] [--start-date ...] [--end-date ...] [--stream]
    python -m src.work_record config
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from .aggregator import RangeAggregator, format_raw_logs
from .backends import create_backend
from .config import Config
from .entry_store import EntryStore
from .exceptions import NotFoundError, WorkRecordError
from .logger import setup_logger
from .models import LogEntry, SummaryConfig, SummaryEvent, SummaryEventType, SummaryKind
from .pipeline import CALENDAR, ROLLING, SummaryPipeline


def format_entry_text(entry: LogEntry) -> str:
    """ログをテキスト形式で整形"""
    time_str = entry.created_at_local.strftime("%H:%M")
    tag_str = f" [{', '.join(entry.tags)}]" if entry.tags else ""
    return f"[{entry.id}] {time_str} {entry.content}{tag_str} ({entry.source})"


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False))


def _parse_date(value: Optional[str], label: str) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValueError(f"{label}の形式が不正です（YYYY-MM-DD）: {value}")


def cmd_add(
    store: EntryStore,
    content: str,
    source: str,
    tags: List[str],
    on_date: Optional[str],
    output_format: str,
) -> int:
    """ログを追加"""
    if not content.strip():
        print("Error: 内容は必須です。", file=sys.stderr)
        return 1

    try:
        entry = LogEntry.create(
            content.strip(), source, tags, on_date=_parse_date(on_date, "日付")
        )
        store.add_entry(entry)
    except (ValueError, WorkRecordError) as exc:
        print(f"Error: ログ追加に失敗しました: {exc}", file=sys.stderr)
        return 1

    if output_format == "json":
        _print_json(entry.to_dict())
    else:
        print(f"追加しました: {format_entry_text(entry)}")
    return 0


def cmd_list(store: EntryStore, on_date: Optional[str], output_format: str) -> int:
    """指定日のログを表示"""
    try:
        day = _parse_date(on_date, "日付") or date.today()
        entries = store.entries_for_date(day)
    except (ValueError, WorkRecordError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if output_format == "json":
        _print_json([entry.to_dict() for entry in entries])
    elif not entries:
        print(f"{day.isoformat()} のログはありません。")
    else:
        for entry in entries:
            print(format_entry_text(entry))
    return 0


def cmd_files(store: EntryStore, output_format: str) -> int:
    """ログファイルの一覧を表示"""
    try:
        files = store.list_files()
    except WorkRecordError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if output_format == "json":
        _print_json(files)
    else:
        for name in files:
            print(name)
    return 0


def cmd_update(
    store: EntryStore,
    entry_id: str,
    on_date: str,
    content: Optional[str],
    source: Optional[str],
    tags: Optional[List[str]],
    output_format: str,
) -> int:
    """既存のログを更新"""
    try:
        day = _parse_date(on_date, "日付")
        current = next((e for e in store.entries_for_date(day) if e.id == entry_id), None)
        if current is None:
            raise NotFoundError(day, entry_id)

        changes: Dict[str, Any] = {}
        if content is not None:
            changes["content"] = content.strip()
        if source is not None:
            changes["source"] = source
        if tags is not None:
            changes["tags"] = tags
        updated = dataclasses.replace(current, **changes)
        store.update_entry(updated)
    except NotFoundError as exc:
        print(f"Error: ログが見つかりません: {exc}", file=sys.stderr)
        return 1
    except (ValueError, WorkRecordError) as exc:
        print(f"Error: ログ更新に失敗しました: {exc}", file=sys.stderr)
        return 1

    if output_format == "json":
        _print_json(updated.to_dict())
    else:
        print(f"更新しました: {format_entry_text(updated)}")
    return 0


def cmd_delete(store: EntryStore, entry_id: str, on_date: str, output_format: str) -> int:
    """ログを削除"""
    try:
        store.delete_entry(entry_id, _parse_date(on_date, "日付"))
    except NotFoundError as exc:
        print(f"Error: ログが見つかりません: {exc}", file=sys.stderr)
        return 1
    except (ValueError, WorkRecordError) as exc:
        print(f"Error: ログ削除に失敗しました: {exc}", file=sys.stderr)
        return 1

    if output_format == "json":
        _print_json({"deleted": True, "id": entry_id})
    else:
        print(f"削除しました: ID {entry_id}")
    return 0


def cmd_logs(
    store: EntryStore,
    start_date: str,
    end_date: str,
    title: str,
    output_format: str,
) -> int:
    """期間内のログを要約せずに表示"""
    try:
        logs = RangeAggregator(store).collect(
            _parse_date(start_date, "開始日"), _parse_date(end_date, "終了日")
        )
    except (ValueError, WorkRecordError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if output_format == "json":
        _print_json({day: [e.to_dict() for e in entries] for day, entries in logs.items()})
    elif not logs:
        print(f"{start_date} 〜 {end_date} のログはありません。")
    else:
        print(format_raw_logs(logs, title), end="")
    return 0


def _print_event(event: SummaryEvent) -> None:
    if event.type is SummaryEventType.CHUNK:
        sys.stdout.write(event.data["text"])
        sys.stdout.flush()
    elif event.type is SummaryEventType.PROCESSING:
        print(
            f"要約を生成しています（{event.data['start_date']} 〜 {event.data['end_date']}、"
            f"{event.data['entry_count']}件）...",
            file=sys.stderr,
        )


def cmd_summary(
    config: Config,
    store: EntryStore,
    type_name: str,
    start_date: Optional[str],
    end_date: Optional[str],
    title: str,
    anchor: str,
    stream: bool,
    output: Optional[str],
) -> int:
    """期間要約を生成"""
    try:
        summary_config = SummaryConfig(
            kind=SummaryKind.parse(type_name),
            start_date=_parse_date(start_date, "開始日"),
            end_date=_parse_date(end_date, "終了日"),
            title=title,
        )
        pipeline = SummaryPipeline(
            store, create_backend(config), config.output_path, anchor=anchor
        )
        if stream:
            artifact = asyncio.run(pipeline.generate_stream(summary_config, _print_event))
            print()
        else:
            artifact = asyncio.run(pipeline.generate(summary_config))
            print(artifact.text)
    except (ValueError, WorkRecordError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if output:
        try:
            Path(output).write_text(artifact.text, encoding="utf-8")
        except OSError as exc:
            print(f"Warning: {output} への書き出しに失敗しました: {exc}", file=sys.stderr)
    if artifact.saved:
        print(f"保存しました: {artifact.path}", file=sys.stderr)
    else:
        print(f"Warning: 要約ファイルの保存に失敗しました: {artifact.save_error}", file=sys.stderr)
    return 0


def cmd_config(config: Config) -> int:
    """設定を表示"""
    _print_json(
        {
            "log_storage_dir": str(config.storage_path),
            "log_output_dir": str(config.output_path),
            "use_local_model": config.use_local_model,
            "ollama": {"host": config.ollama.host, "model": config.ollama.model},
            "remote_api": {
                "url": config.remote_api.url,
                "api_key_configured": bool(config.remote_api.api_key),
                "model": config.remote_api.model,
            },
        }
    )
    return 0


def _add_format(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--format",
        choices=["json", "text"],
        default="text",
        help="出力フォーマット（デフォルト: text）",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="work-record",
        description="作業ログ記録 - 日々の作業を記録し、期間ごとに要約する",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", help="設定ファイル（YAML）のパス")
    parser.add_argument("--storage-dir", help="ログ保存ディレクトリ（設定を上書き）")
    parser.add_argument("--output-dir", help="要約出力ディレクトリ（設定を上書き）")
    parser.add_argument("-v", "--verbose", action="store_true", help="詳細ログを出力")

    subparsers = parser.add_subparsers(dest="command", help="実行するコマンド", required=True)

    # add コマンド
    parser_add = subparsers.add_parser("add", help="ログを追加")
    parser_add.add_argument("content", help="ログ内容")
    parser_add.add_argument("-s", "--source", default="manual", help="記録元（デフォルト: manual）")
    parser_add.add_argument("-t", "--tag", action="append", default=[], help="タグ（複数指定可）")
    parser_add.add_argument("-d", "--date", help="記録日（YYYY-MM-DD、デフォルト: 今日）")
    _add_format(parser_add)

    # list コマンド
    parser_list = subparsers.add_parser("list", help="指定日のログを表示")
    parser_list.add_argument("-d", "--date", help="日付（YYYY-MM-DD、デフォルト: 今日）")
    _add_format(parser_list)

    # files コマンド
    parser_files = subparsers.add_parser("files", help="ログファイルの一覧")
    _add_format(parser_files)

    # update コマンド
    parser_update = subparsers.add_parser("update", help="既存のログを更新")
    parser_update.add_argument("--id", required=True, help="更新するログのID")
    parser_update.add_argument("-d", "--date", required=True, help="ログの日付（YYYY-MM-DD）")
    parser_update.add_argument("--content", help="新しい内容")
    parser_update.add_argument("--source", help="新しい記録元")
    parser_update.add_argument("-t", "--tag", action="append", help="新しいタグ（指定すると置き換え）")
    _add_format(parser_update)

    # delete コマンド
    parser_delete = subparsers.add_parser("delete", help="ログを削除")
    parser_delete.add_argument("--id", required=True, help="削除するログのID")
    parser_delete.add_argument("-d", "--date", required=True, help="ログの日付（YYYY-MM-DD）")
    _add_format(parser_delete)

    # logs コマンド
    parser_logs = subparsers.add_parser("logs", help="期間内のログを要約せずに表示")
    parser_logs.add_argument("--start-date", required=True, help="開始日（YYYY-MM-DD）")
    parser_logs.add_argument("--end-date", required=True, help="終了日（YYYY-MM-DD）")
    parser_logs.add_argument("--title", default="", help="見出し")
    _add_format(parser_logs)

    # summary コマンド
    parser_summary = subparsers.add_parser("summary", help="期間要約を生成")
    parser_summary.add_argument(
        "-y",
        "--type",
        dest="type_name",
        default="weekly",
        choices=[kind.value for kind in SummaryKind],
        help="要約の種類（デフォルト: weekly）",
    )
    parser_summary.add_argument("--start-date", help="開始日（custom のとき必須）")
    parser_summary.add_argument("--end-date", help="終了日（custom のとき必須）")
    parser_summary.add_argument("--title", default="", help="要約のタイトル")
    parser_summary.add_argument(
        "--anchor",
        choices=[ROLLING, CALENDAR],
        default=ROLLING,
        help="期間の決め方（rolling: 7/30/90日前から, calendar: 直近7日/月初/四半期初から）",
    )
    parser_summary.add_argument("--stream", action="store_true", help="生成中のテキストを逐次表示")
    parser_summary.add_argument("-o", "--output", help="要約を追加で書き出すファイル")

    # config コマンド
    subparsers.add_parser("config", help="設定を表示")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLIエントリポイント"""
    args = build_parser().parse_args(argv)

    config = Config.load(Path(args.config) if args.config else None)
    if args.storage_dir:
        config.log_storage_dir = args.storage_dir
    if args.output_dir:
        config.log_output_dir = args.output_dir
    if args.verbose:
        setup_logger(log_level="DEBUG", log_file=config.log_file)

    store = EntryStore(config.storage_path)

    if args.command == "add":
        return cmd_add(store, args.content, args.source, args.tag, args.date, args.format)
    elif args.command == "list":
        return cmd_list(store, args.date, args.format)
    elif args.command == "files":
        return cmd_files(store, args.format)
    elif args.command == "update":
        return cmd_update(
            store, args.id, args.date, args.content, args.source, args.tag, args.format
        )
    elif args.command == "delete":
        return cmd_delete(store, args.id, args.date, args.format)
    elif args.command == "logs":
        return cmd_logs(store, args.start_date, args.end_date, args.title, args.format)
    elif args.command == "summary":
        return cmd_summary(
            config,
            store,
            args.type_name,
            args.start_date,
            args.end_date,
            args.title,
            args.anchor,
            args.stream,
            args.output,
        )
    elif args.command == "config":
        return cmd_config(config)
    else:
        print(f"Error: 不明なコマンド: {args.command}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
