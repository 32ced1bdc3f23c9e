from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from unspoken.llm.errors import ApiError, NetworkError, ParseError
from unspoken.llm.types import ChatMessage, message_from_wire, message_to_wire

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://models.inference.ai.azure.com/"
DEFAULT_MODEL = "gpt-4o"


@dataclass(frozen=True, slots=True)
class ChatClientConfig:
    api_url: str = DEFAULT_API_URL
    model: str = DEFAULT_MODEL
    system_message: str | None = None
    temperature: float | None = None
    top_p: float | None = None
    max_tokens: int | None = None
    timeout_s: float = 120.0


def _error_detail(resp: httpx.Response) -> str:
    try:
        payload = resp.json()
    except ValueError:
        return resp.text.strip() or resp.reason_phrase
    if isinstance(payload, dict):
        err = payload.get("error")
        if isinstance(err, dict) and isinstance(err.get("message"), str):
            return err["message"]
        if isinstance(err, str):
            return err
    return json.dumps(payload, ensure_ascii=False)


def _raise_for_status(resp: httpx.Response) -> None:
    if resp.is_success:
        return
    raise ApiError(resp.status_code, _error_detail(resp))


def _parse_reply(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError as e:
        raise ParseError(f"response is not valid JSON: {e}") from e
    try:
        message = data["choices"][0]["message"]
    except (KeyError, IndexError, TypeError) as e:
        raise ParseError("response has no choices[0].message") from e
    return message_from_wire(message).content


class ChatClient:
    """
    Keeps a conversation with a chat-completion endpoint.

    Every `ask` sends the full message history, so the model sees the whole
    conversation. A failed `ask` keeps the user message it appended; the
    caller may simply ask again.
    """

    def __init__(
        self,
        api_key: str,
        config: ChatClientConfig | None = None,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self.config = config or ChatClientConfig()
        self._url = self.config.api_url.rstrip("/") + "/chat/completions"
        self._client = http_client
        self._owns_client = http_client is None
        self._messages: list[ChatMessage] = []
        self.reset()

    @property
    def messages(self) -> tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def reset(self) -> None:
        """Start a new conversation, keeping only the configured system message."""
        self._messages.clear()
        if self.config.system_message is not None:
            self._messages.append(ChatMessage(role="system", content=self.config.system_message))

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.config.timeout_s, follow_redirects=True)
        return self._client

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    def _payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.config.model,
            "messages": [message_to_wire(m) for m in self._messages],
        }
        if self.config.temperature is not None:
            payload["temperature"] = self.config.temperature
        if self.config.top_p is not None:
            payload["top_p"] = self.config.top_p
        if self.config.max_tokens is not None:
            payload["max_tokens"] = self.config.max_tokens
        return payload

    def ask(self, query: str) -> str:
        self._messages.append(ChatMessage(role="user", content=query))
        payload = self._payload()
        logger.debug(
            "POST %s model=%s messages=%d", self._url, self.config.model, len(payload["messages"])
        )
        try:
            resp = self._get_client().post(self._url, headers=self._headers(), json=payload)
        except httpx.RequestError as e:
            logger.debug("Request to %s failed: %s", self._url, e)
            raise NetworkError(f"request to {self._url} failed: {e}") from e
        _raise_for_status(resp)
        text = _parse_reply(resp)
        self._messages.append(ChatMessage(role="assistant", content=text))
        return text

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self) -> ChatClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
