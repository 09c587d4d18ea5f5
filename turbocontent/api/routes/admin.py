from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from turbocontent.api.deps import get_admin_user, get_repository
from turbocontent.core.domain.exceptions import (
    ContentNotFoundError,
    FeedbackNotFoundError,
    UserNotFoundError,
)
from turbocontent.core.domain.schemas import (
    ContentOut,
    DailyCount,
    DashboardStats,
    FeedbackOut,
    ModelUsageCount,
    PrivacyUpdate,
    SubscriptionStatus,
    SubscriptionUpdate,
    UserOut,
)
from turbocontent.infra.db.models import ContentRow, UserRow
from turbocontent.infra.db.repository import Repository

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(get_admin_user)],
)


def conversion_rate(premium: int, total: int) -> str:
    """Paid share of all users as a two-decimal percentage string."""
    if total <= 0:
        return "0.00"
    return f"{premium / total * 100:.2f}"


@router.get("/users", response_model=list[UserOut])
async def list_users(repo: Repository = Depends(get_repository)):
    return await repo.list_users()


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    admin: UserRow = Depends(get_admin_user),
    repo: Repository = Depends(get_repository),
):
    if user_id == admin.id:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Admins cannot delete their own account")
    if not await repo.delete_user(user_id):
        raise UserNotFoundError(user_id)
    await repo.commit()
    logger.info("Admin %s deleted user %s", admin.id, user_id)


@router.put("/users/{user_id}/subscription", response_model=UserOut)
async def set_subscription(
    user_id: str,
    body: SubscriptionUpdate,
    repo: Repository = Depends(get_repository),
):
    user = await repo.get_user(user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    user.subscription_status = body.subscription_status.value
    await repo.save_user(user)
    return user


@router.get("/dashboard", response_model=DashboardStats)
async def dashboard(repo: Repository = Depends(get_repository)):
    total = await repo.count_users()
    premium = await repo.count_users(subscription_status=SubscriptionStatus.ACTIVE.value)
    trialing = await repo.count_users(subscription_status=SubscriptionStatus.TRIALING.value)
    user_growth = await repo.daily_counts(UserRow.created_at)
    content_growth = await repo.daily_counts(ContentRow.created_at)

    return DashboardStats(
        total_users=total,
        premium_users=premium,
        trialing_users=trialing,
        conversion_rate=conversion_rate(premium, total),
        user_growth=[DailyCount(date=d, count=n) for d, n in user_growth],
        total_content=await repo.count_content(),
        content_growth=[DailyCount(date=d, count=n) for d, n in content_growth],
    )


@router.get("/feedbacks", response_model=list[FeedbackOut])
async def list_feedbacks(repo: Repository = Depends(get_repository)):
    return await repo.list_feedback()


@router.delete("/feedbacks/{feedback_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_feedback(feedback_id: str, repo: Repository = Depends(get_repository)):
    if not await repo.delete_feedback(feedback_id):
        raise FeedbackNotFoundError(feedback_id)
    await repo.commit()


@router.get("/content", response_model=list[ContentOut])
async def list_all_content(repo: Repository = Depends(get_repository)):
    return await repo.list_all_content()


@router.put("/content/{content_id}/privacy", status_code=status.HTTP_204_NO_CONTENT)
async def set_privacy(
    content_id: str,
    body: PrivacyUpdate,
    repo: Repository = Depends(get_repository),
):
    if not await repo.set_content_privacy(content_id, body.is_private):
        raise ContentNotFoundError(content_id)
    await repo.commit()


@router.get("/content-model-stats", response_model=list[ModelUsageCount])
async def content_model_stats(repo: Repository = Depends(get_repository)):
    return [ModelUsageCount(model=m, count=n) for m, n in await repo.count_content_by_model()]
