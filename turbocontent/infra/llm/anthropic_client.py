from __future__ import annotations

import asyncio
from typing import Any, Optional

import anthropic

from turbocontent.core.domain.exceptions import ProviderError
from turbocontent.core.domain.generation import BackendRequest

from .failures import ProviderFailure


class AnthropicBackend:
    provider = "anthropic"
    MAX_TOKENS = 4096
    TIMEOUT_S = 120.0

    def __init__(self, *, api_key: str, client: Optional[Any] = None) -> None:
        self._client = client or anthropic.AsyncAnthropic(api_key=api_key, max_retries=0)

    async def generate(self, request: BackendRequest) -> str:
        kwargs: dict[str, Any] = {
            "model": request.model_name,
            "max_tokens": self.MAX_TOKENS,
            "messages": [{"role": "user", "content": request.prompt}],
        }
        if request.temperature is not None:
            kwargs["temperature"] = request.temperature

        resp = await asyncio.wait_for(
            self._client.messages.create(**kwargs),
            timeout=self.TIMEOUT_S,
        )

        # first text block; tool_use / thinking blocks are skipped
        for block in getattr(resp, "content", None) or []:
            if getattr(block, "type", None) == "text" and block.text:
                return block.text

        raise ProviderError(
            self.provider, "response contained no text block",
            failure=ProviderFailure.MALFORMED_RESPONSE.value,
        )
