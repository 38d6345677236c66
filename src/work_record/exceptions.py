"""work-record のカスタム例外定義

ストレージ・入力検証・要約バックエンドの各エラーを型で区別する。
各例外は整形済み文字列ではなく構造化されたコンテキスト（日付、ID、HTTPステータス等）を保持する。
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Optional


class WorkRecordError(Exception):
    """work-record 基底例外"""

    user_facing = False


# ---------------------------------------------------------------------------
# ストレージ
# ---------------------------------------------------------------------------


class StorageError(WorkRecordError):
    """ファイルシステム/IO関連のエラー"""

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        path: Optional[Path] = None,
        cause: Optional[BaseException] = None,
    ):
        self.operation = operation
        self.path = Path(path) if path is not None else None
        self.cause = cause
        detail = f"{operation}: {message}"
        if self.path is not None:
            detail += f" ({self.path})"
        if cause is not None:
            detail += f": {cause}"
        super().__init__(detail)


class PartitionFormatError(StorageError):
    """日別ファイルの内容がパースできない"""


class DuplicateEntryError(StorageError):
    """同一日付ファイル内にIDが重複する"""

    def __init__(self, entry_id: str, path: Path):
        self.entry_id = entry_id
        super().__init__(
            f"entry {entry_id} already exists", operation="add_entry", path=path
        )


class NotFoundError(WorkRecordError):
    """指定された日付ファイルまたはIDが存在しない"""

    def __init__(self, entry_date: date, entry_id: Optional[str] = None):
        self.date = entry_date
        self.entry_id = entry_id
        if entry_id is None:
            message = f"No log partition for {entry_date.isoformat()}"
        else:
            message = f"No log entry {entry_id} on {entry_date.isoformat()}"
        super().__init__(message)


# ---------------------------------------------------------------------------
# 入力検証
# ---------------------------------------------------------------------------


class InvalidRangeError(WorkRecordError):
    """開始日が終了日より後"""

    def __init__(self, start_date: date, end_date: date):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"start date {start_date.isoformat()} is after end date {end_date.isoformat()}"
        )


class MissingDateError(WorkRecordError):
    """カスタム期間で開始日/終了日が指定されていない"""

    def __init__(self, missing: str):
        self.missing = missing
        super().__init__(f"custom summary requires {missing}")


class NoLogsError(WorkRecordError):
    """期間内にログが1件もない（ユーザー向けの正常系条件）"""

    user_facing = True

    def __init__(self, start_date: date, end_date: date):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"No log entries between {start_date.isoformat()} and {end_date.isoformat()}"
        )


class ConfigurationError(WorkRecordError):
    """バックエンドの設定不備"""

    def __init__(self, message: str, *, backend: Optional[str] = None):
        self.backend = backend
        super().__init__(message)


# ---------------------------------------------------------------------------
# 要約バックエンド
# ---------------------------------------------------------------------------


class BackendError(WorkRecordError):
    """バックエンドが非成功ステータスを返した"""

    def __init__(
        self,
        message: str,
        *,
        backend: str,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        self.backend = backend
        self.status_code = status_code
        self.detail = detail
        text = f"{backend}: {message}"
        if status_code is not None:
            text += f" (HTTP {status_code})"
        if detail:
            text += f": {detail}"
        super().__init__(text)


class BackendResponseError(BackendError):
    """レスポンスの形式が想定外"""


class TransportError(WorkRecordError):
    """ネットワークレベルの失敗"""

    def __init__(self, backend: str, cause: BaseException):
        self.backend = backend
        self.cause = cause
        super().__init__(f"{backend}: request failed: {cause}")
