"""Completion providers that turn a composed prompt into a reply."""

import logging
from typing import Protocol

import anthropic
import httpx

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "Sorry, I couldn't generate a response."
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_ANTHROPIC_MODEL = "claude-haiku-4-5-20251001"


class ProviderError(Exception):
    """The completion provider rejected the request or could not be reached."""

    def __init__(self, status_code: int, detail: str):
        super().__init__(f"provider error {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class CompletionProvider(Protocol):
    """Protocol for completion providers.

    ``messages[0]`` is always the system message.
    """

    async def complete(self, messages: list[dict[str, str]]) -> str:
        ...


class OpenAIProvider:
    """Chat completions over the OpenAI HTTP API."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_OPENAI_MODEL,
        max_tokens: int = 300,
        temperature: float = 0.7,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def complete(self, messages: list[dict[str, str]]) -> str:
        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.HTTPError as e:
            logger.error("OpenAI request failed: %s", type(e).__name__)
            raise ProviderError(502, str(e)) from e

        if not resp.is_success:
            logger.error("OpenAI returned HTTP %d", resp.status_code)
            raise ProviderError(resp.status_code, resp.text)

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError(502, "invalid JSON in provider response") from e
        choices = data.get("choices") or [{}]
        content = (choices[0].get("message") or {}).get("content")
        return content or FALLBACK_REPLY


class AnthropicProvider:
    """Chat completions over the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_ANTHROPIC_MODEL,
        max_tokens: int = 300,
        temperature: float = 0.7,
        client: anthropic.AsyncAnthropic | None = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.client = client or anthropic.AsyncAnthropic(api_key=api_key)

    @staticmethod
    def _split(messages: list[dict[str, str]]) -> tuple[str, list[dict[str, str]]]:
        """Separate the system prompt; the conversation must open with a user turn."""
        system = messages[0]["content"] if messages and messages[0]["role"] == "system" else ""
        turns = [m for m in messages if m["role"] != "system"]
        while turns and turns[0]["role"] != "user":
            turns.pop(0)
        return system, turns

    async def complete(self, messages: list[dict[str, str]]) -> str:
        system, turns = self._split(messages)
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=system,
                messages=turns,
            )
        except anthropic.APIStatusError as e:
            logger.error("Anthropic returned HTTP %d", e.status_code)
            raise ProviderError(e.status_code, str(e.message)) from e
        except anthropic.APIError as e:
            logger.error("Anthropic request failed: %s", type(e).__name__)
            raise ProviderError(502, str(e)) from e

        text = "".join(block.text for block in response.content if block.type == "text")
        return text.strip() or FALLBACK_REPLY


def build_provider(settings) -> CompletionProvider | None:
    """Create the configured provider, or None when its key is missing."""
    if settings.provider == "anthropic":
        if not settings.anthropic_api_key:
            return None
        return AnthropicProvider(
            api_key=settings.anthropic_api_key,
            model=settings.model or DEFAULT_ANTHROPIC_MODEL,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
        )

    if not settings.openai_api_key:
        return None
    return OpenAIProvider(
        api_key=settings.openai_api_key,
        model=settings.model or DEFAULT_OPENAI_MODEL,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
        base_url=settings.openai_base_url,
    )
