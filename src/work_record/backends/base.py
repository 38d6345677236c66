"""
要約バックエンドの基底クラス

関連クラス:
  - ollama_backend.LocalModelBackend: ローカルの Ollama サーバー
  - remote_api.RemoteApiBackend: Chat Completions 互換の外部API
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Callable, Optional

ChunkCallback = Callable[[str], None]


class SummaryBackend(ABC):
    """プロンプトから要約テキストを生成する抽象基底クラス"""

    name = "backend"

    def validate(self) -> None:
        """I/O の前に設定を検証（不備があれば ConfigurationError）"""

    async def aclose(self) -> None:
        """保持している接続を閉じる（アプリ終了時に1回呼ばれる）"""

    @abstractmethod
    async def generate(self, prompt: str, system: Optional[str] = None) -> str:
        """
        全文をまとめて生成

        Returns:
            生成されたテキスト
        """

    @abstractmethod
    def stream(
        self,
        prompt: str,
        system: Optional[str] = None,
        on_chunk: Optional[ChunkCallback] = None,
    ) -> AsyncIterator[str]:
        """
        テキストを逐次生成（受信したチャンクを順に yield）

        途中で aclose() された場合は下層のHTTP接続も閉じる。
        on_chunk は各チャンクを yield する直前に呼ばれる。
        """
