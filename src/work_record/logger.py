"""
ロギング設定モジュール

CLI とサーバーの両方から呼ばれる。CLI の JSON 出力を汚さないよう、
コンソールへのログは常に標準エラーに出す。
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# 要求URLごとにINFOを出すHTTPクライアント
_NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logger(log_level: str = "INFO", log_file: Optional[str] = "logs/work_record.log") -> None:
    """
    ロガーのセットアップ

    Args:
        log_level: ログレベル (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: ログファイルのパス（None または空文字ならファイルに出さない）

    Raises:
        ValueError: 不明なログレベル
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level: {log_level}")

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    # 2回目以降の呼び出し（-v 指定など）でもレベルとハンドラを置き換える
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
