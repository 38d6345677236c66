"""
ローカルモデル（Ollama）による要約バックエンド

/api/generate を1回呼び出す。stream=True の場合は応答チャンクを逐次返す。
"""

import logging
from typing import Any, AsyncIterator, Dict, Optional

import httpx
import ollama

from ..exceptions import BackendError, BackendResponseError, TransportError
from .base import ChunkCallback, SummaryBackend

logger = logging.getLogger(__name__)


def _response_text(payload: Any) -> str:
    try:
        text = payload["response"]
    except (KeyError, TypeError) as exc:
        raise BackendResponseError(
            "response field missing", backend=LocalModelBackend.name
        ) from exc
    if not isinstance(text, str):
        raise BackendResponseError(
            "response field is not text", backend=LocalModelBackend.name
        )
    return text


class LocalModelBackend(SummaryBackend):
    """Ollama サーバーを使う要約バックエンド"""

    name = "ollama"

    def __init__(
        self,
        host: str = "http://localhost:11434",
        model: str = "llama3",
        timeout: float = 300.0,
        client: Optional[ollama.AsyncClient] = None,
    ):
        """
        初期化

        Args:
            host: OllamaサーバーのURL
            model: 使用するモデル名
            timeout: リクエストのタイムアウト秒数
            client: Ollamaクライアント（テスト用にDI可能）
        """
        self.host = host
        self.model = model
        self.client = client or ollama.AsyncClient(host=host, timeout=timeout)

    def _request_args(self, prompt: str, system: Optional[str], stream: bool) -> Dict[str, Any]:
        args: Dict[str, Any] = {"model": self.model, "prompt": prompt, "stream": stream}
        if system:
            args["system"] = system
        return args

    def _translate(self, exc: Exception) -> Exception:
        if isinstance(exc, ollama.ResponseError):
            return BackendError(
                "generate request failed",
                backend=self.name,
                status_code=exc.status_code,
                detail=exc.error,
            )
        return TransportError(self.name, exc)

    async def generate(self, prompt: str, system: Optional[str] = None) -> str:
        try:
            response = await self.client.generate(**self._request_args(prompt, system, False))
        except (ollama.ResponseError, httpx.TransportError, ConnectionError) as exc:
            logger.error(f"Ollama generate error: {exc}")
            raise self._translate(exc) from exc
        return _response_text(response)

    async def aclose(self) -> None:
        # ollama.AsyncClient は内部の httpx.AsyncClient を閉じる手段を公開していない
        http_client = getattr(self.client, "_client", None)
        if http_client is not None:
            await http_client.aclose()

    async def stream(
        self,
        prompt: str,
        system: Optional[str] = None,
        on_chunk: Optional[ChunkCallback] = None,
    ) -> AsyncIterator[str]:
        chunks = None
        try:
            chunks = await self.client.generate(**self._request_args(prompt, system, True))
            async for part in chunks:
                text = _response_text(part)
                if not text:
                    continue
                if on_chunk is not None:
                    on_chunk(text)
                yield text
        except (ollama.ResponseError, httpx.TransportError, ConnectionError) as exc:
            logger.error(f"Ollama stream error: {exc}")
            raise self._translate(exc) from exc
        finally:
            # 途中で打ち切られた場合も接続を閉じる
            aclose = getattr(chunks, "aclose", None)
            if aclose is not None:
                await aclose()
