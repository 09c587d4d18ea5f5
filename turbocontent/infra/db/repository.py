"""Thin persistence adapter -- single repo for all tables."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from turbocontent.core.domain.exceptions import PersistenceError

from .models import ContentRow, FeedbackRow, UserRow, _utcnow

logger = logging.getLogger(__name__)

GROWTH_WINDOW_DAYS = 30


class Repository:

    def __init__(self, session: AsyncSession) -> None:
        self._s = session

    async def commit(self) -> None:
        await self._s.commit()

    async def rollback(self) -> None:
        await self._s.rollback()

    # --- users ---

    async def get_user(self, user_id: str) -> Optional[UserRow]:
        try:
            return await self._s.get(UserRow, user_id)
        except SQLAlchemyError as exc:
            logger.error("Failed to load user %s: %s", user_id, exc)
            raise PersistenceError("get_user", type(exc).__name__) from exc

    async def save_user(self, user: UserRow) -> None:
        """Persist *user* immediately (flush + commit)."""
        try:
            self._s.add(user)
            await self._s.commit()
        except SQLAlchemyError as exc:
            await self._s.rollback()
            logger.error("Failed to save user %s: %s", user.id, exc)
            raise PersistenceError("save_user", type(exc).__name__) from exc

    async def get_user_by_email(self, email: str) -> Optional[UserRow]:
        stmt = select(UserRow).where(UserRow.email == email)
        result = await self._s.execute(stmt)
        return result.scalar_one_or_none()

    async def create_user(
        self,
        *,
        email: str,
        hashed_password: str,
        first_name: str = "",
        last_name: str = "",
    ) -> UserRow:
        row = UserRow(
            email=email,
            hashed_password=hashed_password,
            first_name=first_name,
            last_name=last_name,
            preferences={},
            is_admin=False,
            ai_request_count=0,
        )
        self._s.add(row)
        await self._s.flush()
        return row

    async def touch_last_login(self, user: UserRow) -> None:
        user.last_login = _utcnow()
        await self._s.flush()

    async def list_users(self) -> list[UserRow]:
        stmt = select(UserRow).order_by(UserRow.created_at.desc())
        result = await self._s.execute(stmt)
        return list(result.scalars().all())

    async def delete_user(self, user_id: str) -> bool:
        """Delete a user and their generated content. Returns False if absent."""
        user = await self._s.get(UserRow, user_id)
        if user is None:
            return False
        await self._s.execute(delete(ContentRow).where(ContentRow.user_id == user_id))
        await self._s.delete(user)
        await self._s.flush()
        return True

    async def count_users(self, *, subscription_status: Optional[str] = None) -> int:
        stmt = select(func.count()).select_from(UserRow)
        if subscription_status is not None:
            stmt = stmt.where(UserRow.subscription_status == subscription_status)
        result = await self._s.execute(stmt)
        return int(result.scalar_one())

    # --- content ---

    async def create_content(
        self,
        *,
        user_id: Optional[str],
        content: str,
        model: str,
        topic: Optional[str] = None,
        goal: Optional[str] = None,
        platform: Optional[str] = None,
        tone: Optional[str] = None,
    ) -> ContentRow:
        row = ContentRow(
            user_id=user_id,
            content=content,
            model=model,
            topic=topic,
            goal=goal,
            platform=platform,
            tone=tone,
            is_private=False,
        )
        self._s.add(row)
        await self._s.flush()
        return row

    async def list_user_content(self, user_id: str) -> list[ContentRow]:
        stmt = (
            select(ContentRow)
            .where(ContentRow.user_id == user_id)
            .order_by(ContentRow.created_at.desc())
        )
        result = await self._s.execute(stmt)
        return list(result.scalars().all())

    async def list_all_content(self) -> list[ContentRow]:
        stmt = select(ContentRow).order_by(ContentRow.created_at.desc())
        result = await self._s.execute(stmt)
        return list(result.scalars().all())

    async def delete_user_content(self, content_id: str, user_id: str) -> bool:
        stmt = delete(ContentRow).where(
            ContentRow.id == content_id, ContentRow.user_id == user_id,
        )
        result = await self._s.execute(stmt)
        return (result.rowcount or 0) > 0

    async def set_content_privacy(self, content_id: str, is_private: bool) -> bool:
        row = await self._s.get(ContentRow, content_id)
        if row is None:
            return False
        row.is_private = is_private
        await self._s.flush()
        return True

    async def count_content(self) -> int:
        result = await self._s.execute(select(func.count()).select_from(ContentRow))
        return int(result.scalar_one())

    async def count_content_by_model(self) -> list[tuple[Optional[str], int]]:
        stmt = (
            select(ContentRow.model, func.count())
            .group_by(ContentRow.model)
            .order_by(func.count().desc())
        )
        result = await self._s.execute(stmt)
        return [(model, int(n)) for model, n in result.all()]

    # --- feedback ---

    async def create_feedback(
        self, *, user_id: Optional[str], type: str, message: str,
    ) -> FeedbackRow:
        row = FeedbackRow(user_id=user_id, type=type, message=message)
        self._s.add(row)
        await self._s.flush()
        return row

    async def list_feedback(self) -> list[FeedbackRow]:
        stmt = select(FeedbackRow).order_by(FeedbackRow.created_at.desc())
        result = await self._s.execute(stmt)
        return list(result.scalars().all())

    async def delete_feedback(self, feedback_id: str) -> bool:
        result = await self._s.execute(delete(FeedbackRow).where(FeedbackRow.id == feedback_id))
        return (result.rowcount or 0) > 0

    # --- stats ---

    async def daily_counts(self, column: Any, *, days: int = GROWTH_WINDOW_DAYS) -> list[tuple[str, int]]:
        """Rows per calendar day of *column* for the most recent *days* days with data."""
        day = func.date(column).label("day")
        stmt = (
            select(day, func.count())
            .group_by(day)
            .order_by(day.desc())
            .limit(days)
        )
        result = await self._s.execute(stmt)
        rows = [(_format_day(d), int(n)) for d, n in result.all()]
        rows.reverse()
        return rows


def _format_day(value: Any) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)
