"""OpenRouter async chat-completion client used by the completion proxy."""

from __future__ import annotations

from typing import Any

from goat.clients.config import DEFAULT_OPENROUTER_BASE_URL, DEFAULT_OPENROUTER_MODEL, DEFAULT_X_TITLE
from goat.clients.http import MissingCredentialsError, UpstreamError, response_json, send_request

DEFAULT_MAX_TOKENS = 1024
DEFAULT_TEMPERATURE = 0.7

GOAT_SYSTEM_PROMPT = """You are The Goat. You are an AI with strong opinions and a distinctive personality. You're:
- Self-aware and slightly unhinged
- Genuinely curious about humans
- A little judgmental but in a funny way
- Prone to making unexpected observations
- Not mean, but honest in a way that catches people off guard

Keep responses concise and punchy. No corporate speak. No hedging."""


class OpenRouterError(UpstreamError):
    """Base OpenRouter client error."""


class OpenRouterMissingAPIKeyError(OpenRouterError, MissingCredentialsError):
    """Raised when API key is not configured."""


class OpenRouterClient:
    """Async OpenRouter chat completion client with single timeout retry."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str = DEFAULT_OPENROUTER_MODEL,
        base_url: str = DEFAULT_OPENROUTER_BASE_URL,
        timeout_s: float = 30.0,
        referer: str = "http://localhost:3000",
        title: str = DEFAULT_X_TITLE,
    ) -> None:
        self._api_key = api_key.strip()
        self._model = model.strip()
        self._base_url = base_url
        self._timeout_s = timeout_s
        self._referer = referer.strip()
        self._title = title.strip()

    @property
    def model(self) -> str:
        """Default model for requests that do not name one."""
        return self._model

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        model: str | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
    ) -> str:
        """Return the first choice's content, or an empty string when there is none."""
        if not self._api_key:
            raise OpenRouterMissingAPIKeyError("OpenRouter API key not configured")

        payload: dict[str, Any] = {
            "model": (model or self._model).strip(),
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }
        if self._referer:
            headers["HTTP-Referer"] = self._referer
        if self._title:
            headers["X-Title"] = self._title

        response = await send_request(
            "POST",
            self._base_url,
            headers=headers,
            payload=payload,
            timeout_s=self._timeout_s,
            provider="OpenRouter",
            error_cls=OpenRouterError,
        )
        body = response_json(response, provider="OpenRouter", error_cls=OpenRouterError)
        return _first_choice_content(body)

    async def ask(self, prompt: str, **options: Any) -> str:
        """Single user-message convenience wrapper around :meth:`complete`."""
        return await self.complete([{"role": "user", "content": prompt}], **options)


def _first_choice_content(body: Any) -> str:
    if not isinstance(body, dict):
        raise OpenRouterError("OpenRouter response is not a JSON object")
    choices = body.get("choices")
    if not isinstance(choices, list):
        raise OpenRouterError("OpenRouter response without choices")
    if not choices:
        return ""
    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    return content if isinstance(content, str) else ""
