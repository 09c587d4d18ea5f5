"""Generate-content use case: usage gate -> dispatch -> best-effort save.

The model id and its parameters (inline image, temperature range) are
validated before the gate runs, so a caller error is rejected without
spending the daily quota.
Saving the result is best-effort: the caller still gets the generated text
when the write fails, with ``save_error`` set.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from turbocontent.core.domain.exceptions import PersistenceError
from turbocontent.core.domain.generation import compose_social_post_prompt, parse_inline_image
from turbocontent.core.domain.schemas import GenerateRequest, GenerateResponse
from turbocontent.infra.llm.dispatcher import ProviderDispatcher
from turbocontent.usecases.usage_gate import UsageGate

logger = logging.getLogger(__name__)

SAVE_ERROR_MESSAGE = "Failed to auto-save content"


class ContentStore(Protocol):

    async def create_content(self, **fields: Any) -> Any:
        ...

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...


def build_prompt(req: GenerateRequest) -> str:
    if req.is_brief:
        return compose_social_post_prompt(
            topic=req.topic or "",
            goal=req.goal or "",
            platform=req.platform or "",
            tone=req.tone or "",
        )
    return req.prompt or ""


async def generate_content(
    req: GenerateRequest,
    *,
    user_id: Optional[str],
    dispatcher: ProviderDispatcher,
    gate: UsageGate,
    store: ContentStore,
    default_model: str,
) -> GenerateResponse:
    model_id = req.model or default_model
    image = parse_inline_image(req.image) if req.image else None
    dispatcher.validate(model_id, temperature=req.temperature, image=image)

    # anonymous callers are only IP rate-limited
    if user_id is not None:
        await gate.check(user_id)

    content = await dispatcher.generate(
        build_prompt(req), model_id, req.temperature, image=image,
    )

    try:
        await store.create_content(
            user_id=user_id,
            content=content,
            model=model_id,
            topic=req.topic,
            goal=req.goal,
            platform=req.platform,
            tone=req.tone,
        )
        await store.commit()
    except (SQLAlchemyError, PersistenceError) as exc:
        logger.warning("Auto-save of generated content failed (user=%s): %s", user_id, exc)
        await store.rollback()
        return GenerateResponse(content=content, save_error=SAVE_ERROR_MESSAGE)

    return GenerateResponse(content=content)
