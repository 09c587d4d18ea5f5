from typing import Optional

from fastapi import APIRouter, Depends, Request

from turbocontent.api.deps import (
    get_current_user,
    get_dispatcher,
    get_optional_user,
    get_repository,
    get_usage_gate,
)
from turbocontent.api.rate_limit import limiter
from turbocontent.config import settings
from turbocontent.core.domain.schemas import (
    GenerateRequest,
    GenerateResponse,
    ModelRouteOut,
    UsageStatus,
)
from turbocontent.infra.db.models import UserRow
from turbocontent.infra.db.repository import Repository
from turbocontent.infra.llm.dispatcher import ProviderDispatcher
from turbocontent.usecases.generate_content import generate_content
from turbocontent.usecases.usage_gate import UsageGate

router = APIRouter(prefix="/api", tags=["generate"])


@router.get("/models", response_model=list[ModelRouteOut])
async def list_models(dispatcher: ProviderDispatcher = Depends(get_dispatcher)):
    return [
        ModelRouteOut(
            id=r.model_id, backend=r.backend, label=r.label, supports_image=r.supports_image,
        )
        for r in dispatcher.routes
    ]


@router.post("/generate-content", response_model=GenerateResponse, response_model_exclude_none=True)
@limiter.limit(settings.rate_limit_default)
async def generate(
    request: Request,
    body: GenerateRequest,
    user: Optional[UserRow] = Depends(get_optional_user),
    dispatcher: ProviderDispatcher = Depends(get_dispatcher),
    gate: UsageGate = Depends(get_usage_gate),
    repo: Repository = Depends(get_repository),
):
    return await generate_content(
        body,
        user_id=user.id if user is not None else None,
        dispatcher=dispatcher,
        gate=gate,
        store=repo,
        default_model=settings.default_model_id,
    )


@router.get("/usage", response_model=UsageStatus)
async def usage(
    user: UserRow = Depends(get_current_user),
    gate: UsageGate = Depends(get_usage_gate),
):
    return await gate.status(user.id)
