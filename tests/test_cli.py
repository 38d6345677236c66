"""作業ログCLI の動作テスト"""

import json
import os
import subprocess
import sys
from datetime import date
from pathlib import Path

from src.work_record import cli
from src.work_record.backends.base import SummaryBackend
from src.work_record.entry_store import EntryStore
from src.work_record.models import LogEntry


def run_cli(args: list[str], storage_dir: Path) -> subprocess.CompletedProcess:
    """CLI実行ヘルパー"""
    env = {k: v for k, v in os.environ.items() if k != "WORK_RECORD_CONFIG"}
    cmd = [
        sys.executable,
        "-m",
        "src.work_record",
        "--storage-dir",
        str(storage_dir),
        "--output-dir",
        str(storage_dir / "summaries"),
    ] + args
    return subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        cwd=Path(__file__).parent.parent,
        env=env,
    )


def test_cli_list_empty(tmp_path):
    """空のリスト取得"""
    result = run_cli(["list", "--date", "2024-06-10", "--format", "json"], tmp_path)
    assert result.returncode == 0
    assert json.loads(result.stdout) == []


def test_cli_add_update_delete(tmp_path):
    """追加・更新・削除の一連の流れ"""
    result = run_cli(
        ["add", "設計レビュー", "--tag", "review", "--date", "2024-06-10", "--format", "json"],
        tmp_path,
    )
    assert result.returncode == 0
    added = json.loads(result.stdout)
    assert added["content"] == "設計レビュー"
    assert added["tags"] == ["review"]
    entry_id = added["id"]

    result = run_cli(["files", "--format", "json"], tmp_path)
    assert json.loads(result.stdout) == ["2024-06-10.json"]

    result = run_cli(
        ["update", "--id", entry_id, "--date", "2024-06-10", "--content", "設計レビュー完了", "--format", "json"],
        tmp_path,
    )
    assert result.returncode == 0
    assert json.loads(result.stdout)["content"] == "設計レビュー完了"

    result = run_cli(["list", "--date", "2024-06-10", "--format", "json"], tmp_path)
    entries = json.loads(result.stdout)
    assert [e["content"] for e in entries] == ["設計レビュー完了"]

    result = run_cli(["delete", "--id", entry_id, "--date", "2024-06-10"], tmp_path)
    assert result.returncode == 0
    assert not (tmp_path / "2024-06-10.json").exists()


def test_cli_update_unknown_id(tmp_path):
    """存在しないIDの更新はエラー"""
    run_cli(["add", "作業", "--date", "2024-06-10"], tmp_path)
    result = run_cli(["update", "--id", "999", "--date", "2024-06-10", "--content", "x"], tmp_path)
    assert result.returncode == 1
    assert "見つかりません" in result.stderr


def test_cli_logs_range(tmp_path):
    """期間内ログの表示"""
    run_cli(["add", "一日目", "--date", "2024-06-10"], tmp_path)
    run_cli(["add", "三日目", "--date", "2024-06-12"], tmp_path)

    result = run_cli(
        ["logs", "--start-date", "2024-06-10", "--end-date", "2024-06-11", "--format", "json"],
        tmp_path,
    )
    assert result.returncode == 0
    logs = json.loads(result.stdout)
    assert list(logs) == ["2024-06-10"]

    result = run_cli(["logs", "--start-date", "2024-06-12", "--end-date", "2024-06-10"], tmp_path)
    assert result.returncode == 1


def test_cli_summary_without_logs(tmp_path):
    """ログが無い期間の要約はエラー終了しファイルを作らない"""
    result = run_cli(
        ["summary", "--type", "custom", "--start-date", "2020-01-01", "--end-date", "2020-01-31"],
        tmp_path,
    )
    assert result.returncode == 1
    assert "2020-01-01" in result.stderr
    assert not (tmp_path / "summaries").exists()


def test_cli_invalid_date(tmp_path):
    result = run_cli(["list", "--date", "2024/06/10"], tmp_path)
    assert result.returncode == 1
    assert "Error" in result.stderr


class StaticBackend(SummaryBackend):
    name = "static"

    async def generate(self, prompt, system=None):
        return "今週のまとめ"

    async def stream(self, prompt, system=None, on_chunk=None):
        yield "今週のまとめ"


def test_cli_summary_output_file_failure_is_reported(tmp_path, monkeypatch, capsys):
    """-o の書き出しに失敗しても要約は表示して正常終了"""
    monkeypatch.setattr(cli, "create_backend", lambda config: StaticBackend())
    monkeypatch.delenv("WORK_RECORD_CONFIG", raising=False)
    store = EntryStore(tmp_path / "logs")
    store.add_entry(LogEntry.create("設計", on_date=date.today()))
    unwritable = tmp_path / "no-such-dir" / "summary.md"

    code = cli.main(
        [
            "--storage-dir",
            str(tmp_path / "logs"),
            "--output-dir",
            str(tmp_path / "summaries"),
            "summary",
            "-o",
            str(unwritable),
        ]
    )

    captured = capsys.readouterr()
    assert code == 0
    assert "今週のまとめ" in captured.out
    assert "Warning" in captured.err
    assert str(unwritable) in captured.err
    assert (tmp_path / "summaries").is_dir()
