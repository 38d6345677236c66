"""要約バックエンド（ローカルモデル / 外部API）"""

from ..config import Config
from .base import ChunkCallback, SummaryBackend
from .ollama_backend import LocalModelBackend
from .remote_api import RemoteApiBackend


def create_backend(config: Config) -> SummaryBackend:
    """設定の use_local_model に従ってバックエンドを選択（フォールバックはしない）"""
    if config.use_local_model:
        return LocalModelBackend(
            host=config.ollama.host,
            model=config.ollama.model,
            timeout=config.ollama.timeout,
        )
    return RemoteApiBackend(
        url=config.remote_api.url,
        api_key=config.remote_api.api_key,
        model=config.remote_api.model,
        timeout=config.remote_api.timeout,
    )


__all__ = [
    "ChunkCallback",
    "LocalModelBackend",
    "RemoteApiBackend",
    "SummaryBackend",
    "create_backend",
]
