"""
LLM Service - Text completion capability.

Wraps a single chat-completion call against an OpenAI-compatible API.
Used directly for narrative text and, under a JSON contract, by the
prompt analyzer, blueprint builder, storyboard planner and manga planner.
"""
import logging
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any

import httpx

from omniforge.providers.exceptions import ProviderError, ProviderUnavailable
from omniforge.providers.http import raise_for_provider_error, auth_headers

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."


@dataclass
class TokenUsage:
    """Token accounting reported by the provider."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class TextResult:
    """Result of a text completion."""
    content: str
    model: str
    usage: Optional[TokenUsage] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "model": self.model,
            "usage": asdict(self.usage) if self.usage else None,
        }


class LLMService:
    """
    Text completion service.

    Raises ProviderUnavailable when no API key is configured and ProviderError
    for transport or HTTP failures. Output is returned as-is; callers that need
    structure decode it themselves.
    """

    PROVIDER = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        from omniforge.config import config
        self.api_key = api_key or config.ai.openai_api_key or ""
        self.model = model or config.ai.text_model
        self.base_url = (base_url or config.ai.openai_base_url).rstrip("/")
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=config.production.http_timeout_seconds)

        if not self.api_key or self.api_key.startswith("PASTE_"):
            logger.warning("[LLM] OpenAI API key not configured - text calls will be unavailable")
            self.api_key = ""
        else:
            logger.info(f"[LLM] Service initialized with {self.model}")

    @property
    def is_available(self) -> bool:
        return bool(self.api_key)

    async def generate_text(
        self,
        prompt: str,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        model: Optional[str] = None,
        json_mode: bool = False,
    ) -> TextResult:
        """
        Run one chat completion.

        Args:
            prompt: User message
            system_prompt: System message
            temperature: Sampling temperature
            max_tokens: Completion token limit
            model: Override the configured model
            json_mode: Ask the provider for a JSON object response

        Returns:
            TextResult with content, model and usage
        """
        if not self.api_key:
            raise ProviderUnavailable(self.PROVIDER, "OPENAI_API_KEY not configured")

        payload = {
            "model": model or self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        logger.debug(f"[LLM] Completion request ({payload['model']}): {prompt[:100]}...")

        try:
            response = await self.client.post(
                f"{self.base_url}/chat/completions",
                headers=auth_headers(self.api_key),
                json=payload,
            )
        except httpx.HTTPError as e:
            raise ProviderError(self.PROVIDER, f"Text request failed: {e}") from e

        raise_for_provider_error(self.PROVIDER, response)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(self.PROVIDER, "Text response was not JSON") from e

        if not isinstance(data, dict):
            raise ProviderError(self.PROVIDER, "Text response has malformed response body")

        choices = data.get("choices") or []
        if choices and not (isinstance(choices, list) and isinstance(choices[0], dict)):
            raise ProviderError(self.PROVIDER, "Text response has malformed response choices")

        message = (choices[0].get("message") or {}) if choices else {}
        if not isinstance(message, dict):
            raise ProviderError(self.PROVIDER, "Text response has malformed response message")

        content = message.get("content") or ""
        if not isinstance(content, str):
            raise ProviderError(self.PROVIDER, "Text response has malformed response content")

        usage = None
        raw_usage = data.get("usage")
        if isinstance(raw_usage, dict):
            usage = TokenUsage(
                prompt_tokens=raw_usage.get("prompt_tokens", 0),
                completion_tokens=raw_usage.get("completion_tokens", 0),
                total_tokens=raw_usage.get("total_tokens", 0),
            )

        return TextResult(
            content=content,
            model=data.get("model") or payload["model"],
            usage=usage,
        )

    async def close(self):
        """Close the HTTP client."""
        if self._owns_client:
            await self.client.aclose()
