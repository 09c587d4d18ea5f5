from __future__ import annotations

from typing import AsyncGenerator, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from turbocontent.api.security import decode_access_token
from turbocontent.config import settings
from turbocontent.infra.db.models import UserRow
from turbocontent.infra.db.repository import Repository
from turbocontent.infra.db.session import async_session_factory
from turbocontent.infra.llm.dispatcher import ProviderDispatcher
from turbocontent.infra.timezone_utils import get_app_timezone
from turbocontent.usecases.usage_gate import UsageGate

_bearer = HTTPBearer(auto_error=False)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        yield session


async def get_repository(session: AsyncSession = Depends(get_session)) -> Repository:
    return Repository(session)


def get_dispatcher(request: Request) -> ProviderDispatcher:
    # built once in the lifespan
    return request.app.state.dispatcher


def get_usage_gate(repo: Repository = Depends(get_repository)) -> UsageGate:
    return UsageGate(
        repo,
        daily_limit=settings.daily_ai_request_limit,
        tz=get_app_timezone(),
    )


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    repo: Repository = Depends(get_repository),
) -> Optional[UserRow]:
    """Resolve the bearer token if one was sent. A bad token is a 401, not anonymous."""
    if credentials is None:
        return None
    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid or expired token")
    user = await repo.get_user(user_id)
    if user is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "User not found")
    return user


async def get_current_user(user: Optional[UserRow] = Depends(get_optional_user)) -> UserRow:
    if user is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Authentication required")
    return user


async def get_admin_user(user: UserRow = Depends(get_current_user)) -> UserRow:
    if not user.is_admin:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Admin access required")
    return user
