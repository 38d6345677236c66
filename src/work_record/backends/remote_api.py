"""
Chat Completions 互換APIによる要約バックエンド

Bearer 認証で設定済みのURLに1回POSTし、choices[0].message.content を要約として取り出す。
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from ..exceptions import (
    BackendError,
    BackendResponseError,
    ConfigurationError,
    TransportError,
)
from .base import ChunkCallback, SummaryBackend

logger = logging.getLogger(__name__)


def _error_detail(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text
    if isinstance(payload, dict):
        error = payload.get("error") or payload.get("message")
        if isinstance(error, dict):
            error = error.get("message")
        if error:
            return str(error)
    return json.dumps(payload, ensure_ascii=False)


class RemoteApiBackend(SummaryBackend):
    """外部APIを使う要約バックエンド"""

    name = "remote_api"

    def __init__(
        self,
        url: str,
        api_key: str,
        model: str = "gpt-4",
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = (url or "").strip()
        self.api_key = (api_key or "").strip()
        self.model = model
        self.timeout = timeout
        self._transport = transport

    def validate(self) -> None:
        if not self.url or not self.api_key:
            raise ConfigurationError(
                "remote API requires both url and api_key", backend=self.name
            )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self.timeout)

    def _headers(self) -> Dict[str, str]:
        self.validate()
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _payload(self, prompt: str, system: Optional[str], stream: bool) -> Dict[str, Any]:
        messages: List[Dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        payload: Dict[str, Any] = {"model": self.model, "messages": messages}
        if stream:
            payload["stream"] = True
        return payload

    def _status_error(self, response: httpx.Response) -> BackendError:
        return BackendError(
            "request failed",
            backend=self.name,
            status_code=response.status_code,
            detail=_error_detail(response),
        )

    def _extract_content(self, data: Any, status_code: int) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise BackendResponseError(
                "response has no choices[0].message.content",
                backend=self.name,
                status_code=status_code,
            ) from exc
        if not isinstance(content, str):
            raise BackendResponseError(
                "message content is not text", backend=self.name, status_code=status_code
            )
        return content

    async def generate(self, prompt: str, system: Optional[str] = None) -> str:
        headers = self._headers()
        payload = self._payload(prompt, system, stream=False)

        async with self._client() as client:
            try:
                response = await client.post(self.url, headers=headers, json=payload)
            except httpx.HTTPError as exc:
                logger.error(f"Remote API request failed: {exc}")
                raise TransportError(self.name, exc) from exc

        # リダイレクトは追わないので 3xx も失敗として扱う
        if not response.is_success:
            logger.error(f"Remote API returned {response.status_code}")
            raise self._status_error(response)

        return self._extract_content(self._json_body(response), response.status_code)

    async def stream(
        self,
        prompt: str,
        system: Optional[str] = None,
        on_chunk: Optional[ChunkCallback] = None,
    ) -> AsyncIterator[str]:
        headers = self._headers()
        payload = self._payload(prompt, system, stream=True)

        async with self._client() as client:
            try:
                async with client.stream(
                    "POST", self.url, headers=headers, json=payload
                ) as response:
                    if not response.is_success:
                        await response.aread()
                        logger.error(f"Remote API returned {response.status_code}")
                        raise self._status_error(response)

                    # stream 指定を無視して通常のJSON応答を返すサーバーは全文を1チャンクとして扱う
                    content_type = response.headers.get("content-type", "")
                    if content_type.startswith("application/json"):
                        await response.aread()
                        text = self._extract_content(
                            self._json_body(response), response.status_code
                        )
                        if text:
                            if on_chunk is not None:
                                on_chunk(text)
                            yield text
                        return

                    # server-sent events: "data: {...}" 行、"data: [DONE]" で終了
                    received_event = False
                    async for line in response.aiter_lines():
                        line = line.strip()
                        if not line.startswith("data:"):
                            continue
                        received_event = True
                        data = line[len("data:"):].strip()
                        if data == "[DONE]":
                            break
                        text = self._delta_text(data, response.status_code)
                        if not text:
                            continue
                        if on_chunk is not None:
                            on_chunk(text)
                        yield text

                    if not received_event:
                        raise BackendResponseError(
                            "stream ended without any event",
                            backend=self.name,
                            status_code=response.status_code,
                        )
            except httpx.HTTPError as exc:
                logger.error(f"Remote API stream failed: {exc}")
                raise TransportError(self.name, exc) from exc

    def _json_body(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise BackendResponseError(
                "response is not JSON", backend=self.name, status_code=response.status_code
            ) from exc

    def _delta_text(self, data: str, status_code: int) -> str:
        try:
            event = json.loads(data)
        except ValueError as exc:
            raise BackendResponseError(
                "stream event is not JSON", backend=self.name, status_code=status_code
            ) from exc
        choices = event.get("choices") if isinstance(event, dict) else None
        if not isinstance(choices, list):
            raise BackendResponseError(
                "stream event has no choices", backend=self.name, status_code=status_code
            )
        # フィルタ結果や usage だけのチャンクは choices が空
        if not choices:
            return ""
        choice = choices[0]
        if not isinstance(choice, dict):
            raise BackendResponseError(
                "stream choice is not an object", backend=self.name, status_code=status_code
            )
        delta = choice.get("delta") or {}
        return delta.get("content") or ""
