from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status

from turbocontent.api.deps import get_optional_user, get_repository
from turbocontent.core.domain.schemas import FeedbackCreate, FeedbackOut
from turbocontent.infra.db.models import UserRow
from turbocontent.infra.db.repository import Repository

router = APIRouter(prefix="/api/feedback", tags=["feedback"])


@router.post("", response_model=FeedbackOut, status_code=status.HTTP_201_CREATED)
async def submit_feedback(
    body: FeedbackCreate,
    user: Optional[UserRow] = Depends(get_optional_user),
    repo: Repository = Depends(get_repository),
):
    row = await repo.create_feedback(
        user_id=user.id if user is not None else None,
        type=body.type.value,
        message=body.message.strip(),
    )
    await repo.commit()
    return row
