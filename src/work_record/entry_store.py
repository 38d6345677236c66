"""日別JSONファイルによる作業ログの永続化

1日 = 1ファイル（<log_storage_dir>/YYYY-MM-DD.json）にログを追記順で保存する。
最後の1件を削除したファイルは空配列で残さずファイルごと削除する。
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
import threading
from datetime import date
from pathlib import Path
from typing import Dict, List, Union

from .exceptions import (
    DuplicateEntryError,
    NotFoundError,
    PartitionFormatError,
    StorageError,
)
from .models import LogEntry

logger = logging.getLogger(__name__)

_PARTITION_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DateLike = Union[date, str]


def coerce_date(value: DateLike) -> date:
    """date または YYYY-MM-DD 文字列を date に変換"""
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip())


class EntryStore:
    """日別ファイルに対する LogEntry の CRUD

    同じ日付ファイルへの読み込み-変更-書き込みは日付ごとのロックで直列化する。
    書き込みは一時ファイル経由の置き換えなので、読み手が書きかけのファイルを見ることはない。
    """

    def __init__(self, storage_dir: Union[str, Path]):
        self.storage_dir = Path(storage_dir).expanduser()
        # 触れた日付ごとに1つ。解放はしない（1年で高々366個）
        self._locks: Dict[str, threading.Lock] = {}
        self._global_lock = threading.Lock()

    def _lock_for(self, day: date) -> threading.Lock:
        key = day.isoformat()
        with self._global_lock:
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            return self._locks[key]

    def partition_path(self, day: DateLike) -> Path:
        """指定日のログファイルパス"""
        return self.storage_dir / f"{coerce_date(day).isoformat()}.json"

    def _ensure_directory(self) -> None:
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(
                "cannot create storage directory",
                operation="ensure_directory",
                path=self.storage_dir,
                cause=exc,
            ) from exc

    def _read_partition(self, path: Path, operation: str) -> List[LogEntry]:
        """ファイルを読み込んでパース（存在しない場合は FileNotFoundError をそのまま送出）"""
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise
        except OSError as exc:
            raise StorageError("read failed", operation=operation, path=path, cause=exc) from exc

        try:
            payload = json.loads(raw)
            if not isinstance(payload, list):
                raise ValueError("partition content is not a JSON array")
            return [LogEntry.from_dict(item) for item in payload]
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise PartitionFormatError(
                "malformed partition", operation=operation, path=path, cause=exc
            ) from exc

    def _load_or_empty(self, path: Path, operation: str) -> List[LogEntry]:
        # 空扱いにするのはファイルが存在しない場合のみ。壊れたファイルはエラーにする
        try:
            return self._read_partition(path, operation)
        except FileNotFoundError:
            return []

    def _write_partition(self, path: Path, entries: List[LogEntry], operation: str) -> None:
        content = json.dumps(
            [entry.to_dict() for entry in entries], ensure_ascii=False, indent=2
        )
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{path.stem}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError("write failed", operation=operation, path=path, cause=exc) from exc

    def entries_for_date(self, day: DateLike) -> List[LogEntry]:
        """指定日のログ一覧（ファイルが無ければ空リスト）"""
        path = self.partition_path(day)
        try:
            return self._read_partition(path, "entries_for_date")
        except FileNotFoundError:
            return []

    def add_entry(self, entry: LogEntry) -> None:
        """created_at のローカル日付のファイルに追記"""
        day = entry.partition_date()
        path = self.partition_path(day)
        self._ensure_directory()

        with self._lock_for(day):
            entries = self._load_or_empty(path, "add_entry")
            if any(existing.id == entry.id for existing in entries):
                raise DuplicateEntryError(entry.id, path)
            entries.append(entry)
            self._write_partition(path, entries, "add_entry")

        logger.info(f"Added log entry {entry.id} to {day.isoformat()}")

    def update_entry(self, entry: LogEntry) -> None:
        """同じIDのログを位置を保ったまま置き換える"""
        day = entry.partition_date()
        path = self.partition_path(day)

        with self._lock_for(day):
            try:
                entries = self._read_partition(path, "update_entry")
            except FileNotFoundError as exc:
                raise NotFoundError(day) from exc

            for index, existing in enumerate(entries):
                if existing.id == entry.id:
                    entries[index] = entry
                    break
            else:
                raise NotFoundError(day, entry.id)

            self._write_partition(path, entries, "update_entry")

        logger.info(f"Updated log entry {entry.id} on {day.isoformat()}")

    def delete_entry(self, entry_id: str, day: DateLike) -> None:
        """ログを削除（最後の1件ならファイルごと削除）"""
        day = coerce_date(day)
        path = self.partition_path(day)

        with self._lock_for(day):
            try:
                entries = self._read_partition(path, "delete_entry")
            except FileNotFoundError as exc:
                raise NotFoundError(day) from exc

            remaining = [entry for entry in entries if entry.id != entry_id]
            if len(remaining) == len(entries):
                raise NotFoundError(day, entry_id)

            if remaining:
                self._write_partition(path, remaining, "delete_entry")
            else:
                try:
                    path.unlink()
                except OSError as exc:
                    raise StorageError(
                        "cannot remove empty partition",
                        operation="delete_entry",
                        path=path,
                        cause=exc,
                    ) from exc

        logger.info(f"Deleted log entry {entry_id} from {day.isoformat()}")

    def list_partitions(self) -> List[str]:
        """日付ファイルの一覧（新しい順）"""
        if not self.storage_dir.exists():
            logger.warning(f"Log storage directory does not exist: {self.storage_dir}")
            return []

        try:
            partitions = [
                path.stem
                for path in self.storage_dir.glob("*.json")
                if path.is_file() and _PARTITION_PATTERN.match(path.stem)
            ]
        except OSError as exc:
            raise StorageError(
                "cannot list partitions",
                operation="list_partitions",
                path=self.storage_dir,
                cause=exc,
            ) from exc

        partitions.sort(reverse=True)
        logger.debug(f"Found {len(partitions)} log partitions")
        return partitions

    def list_files(self) -> List[str]:
        """ファイル名の一覧（YYYY-MM-DD.json、新しい順）"""
        return [f"{partition}.json" for partition in self.list_partitions()]
