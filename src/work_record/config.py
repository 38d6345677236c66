"""
設定管理モジュール

関連クラス:
  - entry_store.EntryStore: log_storage_dir を使用
  - pipeline.SummaryPipeline: log_output_dir を使用
  - backends.create_backend: use_local_model / ollama / remote_api を使用
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .exceptions import StorageError

DEFAULT_STORAGE_DIR = str(Path.home() / "work_records")
DEFAULT_OUTPUT_DIR = str(Path.home() / "work_records" / "summaries")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class OllamaConfig:
    """ローカルモデル（Ollama）設定"""

    host: str = "http://localhost:11434"
    model: str = "llama3"
    timeout: float = 300.0


@dataclass
class RemoteApiConfig:
    """外部 Chat Completions API 設定"""

    url: str = ""
    api_key: str = ""
    model: str = "gpt-4"
    timeout: float = 120.0


@dataclass
class Config:
    """アプリケーション設定クラス"""

    # ログ保存先
    log_storage_dir: str = DEFAULT_STORAGE_DIR
    log_output_dir: str = DEFAULT_OUTPUT_DIR

    # 要約バックエンド
    use_local_model: bool = True
    ollama: OllamaConfig = None  # type: ignore
    remote_api: RemoteApiConfig = None  # type: ignore

    # ログ設定
    log_level: str = "INFO"
    log_file: str = "logs/work_record.log"

    def __post_init__(self):
        """デフォルト値の初期化"""
        if self.ollama is None:
            self.ollama = OllamaConfig()
        if self.remote_api is None:
            self.remote_api = RemoteApiConfig()

    @property
    def storage_path(self) -> Path:
        return Path(self.log_storage_dir).expanduser()

    @property
    def output_path(self) -> Path:
        return Path(self.log_output_dir).expanduser()

    def ensure_dirs(self) -> None:
        """ログ保存先と要約出力先を作成（冪等）"""
        for path in (self.storage_path, self.output_path):
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise StorageError(
                    "cannot create directory", operation="ensure_dirs", path=path, cause=exc
                ) from exc

    @classmethod
    def from_yaml(cls, config_path: Optional[Path] = None) -> "Config":
        """YAMLファイルから設定を読み込む

        Args:
            config_path: 設定ファイルパス（省略時は config/app_config.yaml を使用）

        Returns:
            Config: 設定インスタンス
        """
        if config_path is None:
            project_root = Path(__file__).parent.parent.parent
            config_path = project_root / "config" / "app_config.yaml"

        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data: Dict[str, Any] = yaml.safe_load(f) or {}

        storage_data = yaml_data.get("storage", {})
        summary_data = yaml_data.get("summary", {})
        ollama_data = yaml_data.get("ollama", {})
        remote_data = yaml_data.get("remote_api", {})
        log_data = yaml_data.get("log", {})

        return cls(
            log_storage_dir=storage_data.get("log_storage_dir", DEFAULT_STORAGE_DIR),
            log_output_dir=storage_data.get("log_output_dir", DEFAULT_OUTPUT_DIR),
            use_local_model=summary_data.get("use_local_model", True),
            ollama=OllamaConfig(
                host=ollama_data.get("host", "http://localhost:11434"),
                model=ollama_data.get("model", "llama3"),
                timeout=float(ollama_data.get("timeout", 300.0)),
            ),
            remote_api=RemoteApiConfig(
                url=remote_data.get("url", "") or "",
                api_key=remote_data.get("api_key", "") or "",
                model=remote_data.get("model", "gpt-4"),
                timeout=float(remote_data.get("timeout", 120.0)),
            ),
            log_level=log_data.get("level", "INFO"),
            log_file=log_data.get("file", "logs/work_record.log"),
        )

    @classmethod
    def from_env(cls) -> "Config":
        """環境変数から設定を読み込む"""
        return cls(
            log_storage_dir=os.getenv("WORK_RECORD_STORAGE_DIR", DEFAULT_STORAGE_DIR),
            log_output_dir=os.getenv("WORK_RECORD_OUTPUT_DIR", DEFAULT_OUTPUT_DIR),
            use_local_model=_env_bool("WORK_RECORD_USE_LOCAL_MODEL", True),
            ollama=OllamaConfig(
                host=os.getenv("OLLAMA_HOST", "http://localhost:11434"),
                model=os.getenv("OLLAMA_MODEL", "llama3"),
            ),
            remote_api=RemoteApiConfig(
                url=os.getenv("LLM_API_URL", ""),
                api_key=os.getenv("LLM_API_KEY", ""),
                model=os.getenv("LLM_API_MODEL", "gpt-4"),
            ),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE", "logs/work_record.log"),
        )

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """指定パスまたは WORK_RECORD_CONFIG のYAMLを読み、無ければ環境変数から構築"""
        if config_path is None and os.getenv("WORK_RECORD_CONFIG"):
            config_path = Path(os.environ["WORK_RECORD_CONFIG"])
        if config_path is not None:
            return cls.from_yaml(config_path)
        return cls.from_env()
