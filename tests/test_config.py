"""設定読み込みのテスト"""

from pathlib import Path

import pytest

from src.work_record.config import Config
from src.work_record.exceptions import StorageError


def test_from_yaml(tmp_path):
    config_path = tmp_path / "app_config.yaml"
    config_path.write_text(
        "\n".join(
            [
                "storage:",
                f"  log_storage_dir: {tmp_path / 'logs'}",
                f"  log_output_dir: {tmp_path / 'out'}",
                "summary:",
                "  use_local_model: false",
                "ollama:",
                "  model: qwen2.5",
                "remote_api:",
                "  url: https://llm.example.com/v1/chat/completions",
                "  api_key: secret",
                "  timeout: 30",
                "log:",
                "  level: DEBUG",
            ]
        ),
        encoding="utf-8",
    )

    config = Config.from_yaml(config_path)

    assert config.storage_path == tmp_path / "logs"
    assert config.output_path == tmp_path / "out"
    assert config.use_local_model is False
    assert config.ollama.model == "qwen2.5"
    assert config.ollama.host == "http://localhost:11434"
    assert config.remote_api.api_key == "secret"
    assert config.remote_api.timeout == 30.0
    assert config.log_level == "DEBUG"


def test_bundled_yaml_loads():
    config = Config.from_yaml()
    assert config.use_local_model is True


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("WORK_RECORD_STORAGE_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("WORK_RECORD_USE_LOCAL_MODEL", "false")
    monkeypatch.setenv("LLM_API_URL", "https://llm.example.com")
    monkeypatch.setenv("LLM_API_KEY", "k")
    monkeypatch.setenv("OLLAMA_MODEL", "llama3.1")

    config = Config.from_env()

    assert config.storage_path == tmp_path / "logs"
    assert config.use_local_model is False
    assert config.remote_api.url == "https://llm.example.com"
    assert config.ollama.model == "llama3.1"


def test_load_prefers_config_env_var(monkeypatch, tmp_path):
    config_path = tmp_path / "custom.yaml"
    config_path.write_text("storage:\n  log_storage_dir: /tmp/from-yaml\n", encoding="utf-8")
    monkeypatch.setenv("WORK_RECORD_CONFIG", str(config_path))
    monkeypatch.setenv("WORK_RECORD_STORAGE_DIR", "/tmp/from-env")

    assert Config.load().log_storage_dir == "/tmp/from-yaml"

    monkeypatch.delenv("WORK_RECORD_CONFIG")
    assert Config.load().log_storage_dir == "/tmp/from-env"


def test_ensure_dirs(tmp_path):
    config = Config(log_storage_dir=str(tmp_path / "a" / "logs"), log_output_dir=str(tmp_path / "b"))
    config.ensure_dirs()
    config.ensure_dirs()
    assert (tmp_path / "a" / "logs").is_dir()
    assert Path(config.log_output_dir).is_dir()


def test_ensure_dirs_failure(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")
    config = Config(log_storage_dir=str(blocker / "logs"), log_output_dir=str(tmp_path / "out"))
    with pytest.raises(StorageError):
        config.ensure_dirs()
