from __future__ import annotations

from fastapi import APIRouter, Depends, status

from turbocontent.api.deps import get_current_user, get_repository
from turbocontent.core.domain.exceptions import ContentNotFoundError
from turbocontent.core.domain.schemas import ContentOut, ProfileUpdate, UserOut
from turbocontent.infra.db.models import UserRow
from turbocontent.infra.db.repository import Repository

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("", response_model=UserOut)
async def get_profile(user: UserRow = Depends(get_current_user)):
    return user


@router.put("", response_model=UserOut)
async def update_profile(
    body: ProfileUpdate,
    user: UserRow = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    if body.first_name is not None:
        user.first_name = body.first_name
    if body.last_name is not None:
        user.last_name = body.last_name
    if body.preferences is not None:
        # merge; the client sends only the keys it changed
        user.preferences = {**(user.preferences or {}), **body.preferences}
    await repo.save_user(user)
    return user


@router.get("/content", response_model=list[ContentOut])
async def list_content(
    user: UserRow = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    return await repo.list_user_content(user.id)


@router.delete("/content/{content_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_content(
    content_id: str,
    user: UserRow = Depends(get_current_user),
    repo: Repository = Depends(get_repository),
):
    if not await repo.delete_user_content(content_id, user.id):
        raise ContentNotFoundError(content_id)
    await repo.commit()
