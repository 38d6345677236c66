"""
要約プロンプトの構築

期間の種類ごとに異なる指示文を先頭に置き、その後に日付見出しと箇条書きのログを並べる。
"""

from __future__ import annotations

from typing import Dict, List

from .models import LogEntry, SummaryKind

SYSTEM_PROMPT = "あなたは業務日誌の分析に長けたアシスタントです。作業内容を的確に要約し、示唆のある所見を述べてください。"

PREAMBLES: Dict[SummaryKind, str] = {
    SummaryKind.WEEKLY: (
        "以下の作業ログをもとに週次の振り返りを作成してください。"
        "作業内容・成果・課題を整理し、改善のための提案を挙げてください。"
    ),
    SummaryKind.MONTHLY: (
        "以下の作業ログをもとに月次の振り返りを作成してください。"
        "今月の重点業務・成果・得られた教訓をまとめ、来月の作業計画を提案してください。"
    ),
    SummaryKind.QUARTERLY: (
        "以下の作業ログをもとに四半期の振り返りを作成してください。"
        "四半期目標の達成状況・主要プロジェクトの進捗・成果と課題を分析し、次の四半期の計画を提案してください。"
    ),
    SummaryKind.CUSTOM: (
        "以下の指定期間の作業ログを要約してください。"
        "主要な作業内容・成果・得られた教訓を分析してください。"
    ),
}


def format_log_section(logs: Dict[str, List[LogEntry]]) -> str:
    """日付見出し + 1ログ1行の箇条書き（日付昇順）"""
    parts: List[str] = []
    for day in sorted(logs):
        lines = [f"## {day}"]
        lines.extend(f"- {entry.content}" for entry in logs[day])
        parts.append("\n".join(lines))
    return "\n\n".join(parts)


def build_summary_prompt(kind: SummaryKind, logs: Dict[str, List[LogEntry]]) -> str:
    """指示文とログ本文を結合したプロンプト"""
    return f"{PREAMBLES[kind]}\n\n{format_log_section(logs)}\n"
