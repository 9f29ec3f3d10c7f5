"""Chat-completion client for OpenAI-compatible providers (DeepSeek by default)."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Sequence

import requests

from domain.entities import ChatCompletion, ChatMessage
from domain.errors import CompletionError, CompletionTimeout
from domain.interfaces import ChatCompletionClient

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CompletionConfig:
    api_url: str = "https://api.deepseek.com/v1/chat/completions"
    api_key: str | None = None
    model: str = "deepseek-chat"
    temperature: float = 0.7
    max_tokens: int = 1000
    timeout: float = 15.0


class OpenAICompatibleChatClient(ChatCompletionClient):
    """Send non-streaming chat-completion requests with ``requests``."""

    def __init__(self, config: CompletionConfig | None = None, session: requests.Session | None = None) -> None:
        self._config = config or CompletionConfig()
        self._session = session or requests.Session()

    def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        timeout: float | None = None,
    ) -> ChatCompletion:
        api_key = self._config.api_key or os.getenv("DEEPSEEK_API_KEY")
        if not api_key:
            raise CompletionError("Missing API key for the completion provider.")
        effective_timeout = timeout if timeout is not None else self._config.timeout
        payload = {
            "model": model or self._config.model,
            "messages": [{"role": message.role, "content": message.content} for message in messages],
            "temperature": temperature if temperature is not None else self._config.temperature,
            "max_tokens": max_tokens or self._config.max_tokens,
            "stream": False,
        }
        try:
            response = self._session.post(
                self._config.api_url,
                headers={"Authorization": f"Bearer {api_key}"},
                json=payload,
                timeout=effective_timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.Timeout as exc:
            raise CompletionTimeout(
                "Language model provider took too long to respond", details=f"timeout {effective_timeout}s"
            ) from exc
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else "?"
            raise CompletionError(f"Completion provider error: HTTP {status}", details=_error_detail(exc.response)) from exc
        except (requests.RequestException, ValueError) as exc:
            raise CompletionError("Completion request failed", details=str(exc)) from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise CompletionError("Malformed completion response", details=str(data)[:500]) from exc
        usage = data.get("usage") or {}
        logger.info("Completion used %s tokens", usage.get("total_tokens", "?"))
        return ChatCompletion(
            content=content,
            model=data.get("model", payload["model"]),
            prompt_tokens=int(usage.get("prompt_tokens", 0)),
            completion_tokens=int(usage.get("completion_tokens", 0)),
            total_tokens=int(usage.get("total_tokens", 0)),
        )


def _error_detail(response: requests.Response | None) -> str | None:
    if response is None:
        return None
    try:
        return response.json().get("error", {}).get("message")
    except ValueError:
        return response.text[:500] or None


__all__ = ["CompletionConfig", "OpenAICompatibleChatClient"]
