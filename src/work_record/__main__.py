"""作業ログCLI実行用エントリポイント

Usage:
    python -m src.work_record <command> [options]
"""

from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
