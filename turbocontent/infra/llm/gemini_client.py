from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from google import genai
from google.genai import types

from turbocontent.core.domain.exceptions import ProviderError
from turbocontent.core.domain.generation import BackendRequest
from turbocontent.infra.media import ImageStore

from .failures import ProviderFailure

logger = logging.getLogger(__name__)

IMAGE_MARKDOWN = "![alt text]({path})"


class GeminiBackend:
    """Gemini text and text+image generation.

    Image-capable routes ask for TEXT and IMAGE modalities. Parts come back
    interleaved; text is kept in order and every inline image is stored via
    the ImageStore and replaced by a markdown image reference.
    """

    provider = "gemini"
    TIMEOUT_S = 180.0

    def __init__(
        self,
        *,
        api_key: str,
        media: ImageStore,
        client: Optional[Any] = None,
    ) -> None:
        self._client = client or genai.Client(api_key=api_key)
        self._media = media

    def _build_contents(self, request: BackendRequest) -> list[Any]:
        contents: list[Any] = [request.prompt]
        if request.image is not None:
            contents.append(
                types.Part.from_bytes(data=request.image.data, mime_type=request.image.mime_type)
            )
        return contents

    def _build_config(self, request: BackendRequest) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            temperature=request.temperature,
            response_modalities=["TEXT", "IMAGE"] if request.image_output else None,
        )

    async def generate(self, request: BackendRequest) -> str:
        resp = await asyncio.wait_for(
            self._client.aio.models.generate_content(
                model=request.model_name,
                contents=self._build_contents(request),
                config=self._build_config(request),
            ),
            timeout=self.TIMEOUT_S,
        )

        candidates = getattr(resp, "candidates", None) or []
        content = candidates[0].content if candidates else None
        parts = getattr(content, "parts", None) or []
        if not parts:
            raise ProviderError(
                self.provider, "response contained no candidate parts",
                failure=ProviderFailure.MALFORMED_RESPONSE.value,
            )

        chunks: list[str] = []
        images = 0
        for part in parts:
            if getattr(part, "text", None):
                chunks.append(part.text)
                continue
            inline = getattr(part, "inline_data", None)
            if inline is not None and inline.data:
                path = await self._media.save_async(inline.data)
                chunks.append(IMAGE_MARKDOWN.format(path=path))
                images += 1

        text = "".join(chunks)
        if not text:
            raise ProviderError(
                self.provider, "response contained no text or image parts",
                failure=ProviderFailure.MALFORMED_RESPONSE.value,
            )
        if images:
            logger.info("Gemini returned %d image(s) for %s", images, request.model_name)
        return text
