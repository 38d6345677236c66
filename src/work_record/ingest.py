"""Git コミット情報を作業ログに変換

リポジトリの走査は行わない。呼び出し側が集めたコミット情報（id, message, time, author）を受け取り、
source="git-commit" の LogEntry にする。
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Union

from .models import LogEntry, parse_timestamp

GIT_COMMIT_SOURCE = "git-commit"


@dataclass(frozen=True)
class GitCommit:
    """1件のコミット"""

    id: str
    message: str
    time: datetime
    author: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GitCommit":
        time_value = data["time"]
        if isinstance(time_value, str):
            time_value = parse_timestamp(time_value)
        return cls(
            id=str(data["id"]),
            message=str(data["message"]),
            time=time_value,
            author=str(data.get("author", "")),
        )


def commit_to_entry(commit: Union[GitCommit, Dict[str, Any]]) -> LogEntry:
    """コミット1件を LogEntry に変換（コミット時刻のローカル日付に記録される）"""
    if isinstance(commit, dict):
        commit = GitCommit.from_dict(commit)

    moment = commit.time
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)

    # 複数行メッセージは1行目（件名）のみ
    subject = commit.message.strip().splitlines()[0] if commit.message.strip() else ""
    return LogEntry(
        id=str(int(moment.timestamp() * 1000)),
        content=subject,
        created_at=moment.astimezone(timezone.utc).isoformat(),
        source=GIT_COMMIT_SOURCE,
        tags=[commit.id[:7]],
        timestamp=moment.astimezone().isoformat(),
    )


def entries_from_commits(commits: Iterable[Union[GitCommit, Dict[str, Any]]]) -> List[LogEntry]:
    """メッセージが空のコミットは除外する"""
    entries: List[LogEntry] = []
    for commit in commits:
        message = commit.message if isinstance(commit, GitCommit) else str(commit.get("message", ""))
        if not message.strip():
            continue
        entries.append(commit_to_entry(commit))
    return entries
