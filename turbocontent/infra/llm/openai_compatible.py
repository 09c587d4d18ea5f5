"""Base for OpenAI-compatible APIs (OpenAI, DeepSeek, Grok)."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from openai import AsyncOpenAI

from turbocontent.core.domain.exceptions import ProviderError
from turbocontent.core.domain.generation import BackendRequest

from .failures import ProviderFailure


class OpenAICompatibleBackend:

    provider: str = "openai"
    BASE_URL: str = "https://api.openai.com/v1"
    TIMEOUT_S: float = 120.0

    def __init__(self, *, api_key: str, client: Optional[Any] = None) -> None:
        # retries are the caller's decision, never the SDK's
        self._client = client or AsyncOpenAI(
            api_key=api_key, base_url=self.BASE_URL, max_retries=0,
        )

    def _build_kwargs(self, request: BackendRequest) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": request.model_name,
            "messages": [{"role": "user", "content": request.prompt}],
        }
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature
        if request.reasoning_effort:
            kwargs["reasoning_effort"] = request.reasoning_effort
        return kwargs

    async def generate(self, request: BackendRequest) -> str:
        resp = await asyncio.wait_for(
            self._client.chat.completions.create(**self._build_kwargs(request)),
            timeout=self.TIMEOUT_S,
        )
        return self._extract_text(resp)

    def _extract_text(self, resp: Any) -> str:
        choices = getattr(resp, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise ProviderError(
                self.provider, "response contained no text",
                failure=ProviderFailure.MALFORMED_RESPONSE.value,
            )
        return content
